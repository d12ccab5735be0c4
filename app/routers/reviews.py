import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import get_current_user, require_role
from app.models.user import ROLE_ADMIN, ROLE_HOMEOWNER, User
from app.schemas.error import ErrorResponse
from app.schemas.review import (
    BuilderBrief,
    CreateReviewRequest,
    CreateReviewResponse,
    ReviewItem,
    UpdateReviewRequest,
)
from app.schemas.review_field import SuccessResponse
from app.services import reviews as review_store
from app.services.aggregation import sub_average
from app.services.reviews import ReviewDetail

router = APIRouter(prefix="/reviews", tags=["Reviews"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid values or too many photos"},
    403: {"model": ErrorResponse, "description": "Not the author and not an admin"},
    404: {"model": ErrorResponse, "description": "Review or builder not found"},
}


def review_item(detail: ReviewDetail) -> ReviewItem:
    review = detail.review
    builder = detail.builder
    return ReviewItem(
        id=review.id,
        author_id=review.author_id,
        author_name=detail.author_name,
        builder_id=review.builder_id,
        ratings=review.ratings or {},
        answers=review.answers or {},
        overall_comment=review.overall_comment,
        sub_average=sub_average(review.ratings or {}),
        photos=detail.photos,
        builder=BuilderBrief(
            id=builder.id,
            name=builder.name,
            logo=builder.logo,
            location=builder.location,
            is_verified=builder.is_verified,
        )
        if builder
        else None,
        created_at=review.created_at,
        updated_at=review.updated_at,
    )


@router.post(
    "",
    response_model=CreateReviewResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Submit a review",
    description="Rate a builder against the current review schema. Up to 5 photo URLs (from `/upload`). Admins may submit on behalf of another user via `author_id`.",
)
async def create_review(
    body: CreateReviewRequest,
    user: User = Depends(require_role(ROLE_HOMEOWNER, ROLE_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    author_id = user.id
    if body.author_id is not None and body.author_id != user.id:
        if user.role != ROLE_ADMIN:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only admins can review on behalf of others")
        author_id = body.author_id

    review_id = await review_store.create_review(
        db,
        author_id=author_id,
        builder_id=body.builder_id,
        values=body.values,
        overall_comment=body.overall_comment,
        photo_urls=body.photos,
    )
    return CreateReviewResponse(id=review_id)


@router.get("/{review_id}", response_model=ReviewItem, responses=ERROR_RESPONSES, summary="Get a review", description="Review with its photos, for its author or an admin (edit form).")
async def get_review(
    review_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    detail = await review_store.get_review(db, review_id)
    if detail.review.author_id != user.id and user.role != ROLE_ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to view this review")
    return review_item(detail)


@router.put("/{review_id}", response_model=ReviewItem, responses=ERROR_RESPONSES, summary="Edit a review", description="Full replacement of values, comment and photos. Photos not resubmitted are removed.")
async def update_review(
    review_id: uuid.UUID,
    body: UpdateReviewRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await review_store.update_review(
        db,
        review_id,
        user.id,
        user.role,
        values=body.values,
        overall_comment=body.overall_comment,
        photo_urls=body.photos,
    )
    return review_item(await review_store.get_review(db, review_id))


@router.delete("/{review_id}", response_model=SuccessResponse, responses=ERROR_RESPONSES, summary="Delete a review", description="Removes the review and its photos and refreshes the builder rating.")
async def delete_review(
    review_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await review_store.delete_review(db, review_id, user.id, user.role)
    return SuccessResponse()
