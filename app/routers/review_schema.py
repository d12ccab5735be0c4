import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import require_role
from app.models.user import ROLE_ADMIN, User
from app.schemas.review_field import (
    CreateReviewFieldRequest,
    ReorderFieldsRequest,
    ReviewFieldItem,
    ReviewFieldListResponse,
    SuccessResponse,
    UpdateReviewFieldRequest,
)
from app.services import review_schema

router = APIRouter(prefix="/review-schema", tags=["Review schema"])
admin_router = APIRouter(prefix="/admin/review-schema", tags=["Admin"])


async def _field_list(db: AsyncSession) -> ReviewFieldListResponse:
    fields = await review_schema.list_fields(db)
    return ReviewFieldListResponse(fields=[ReviewFieldItem.model_validate(f) for f in fields])


@router.get("", response_model=ReviewFieldListResponse, summary="Review form fields", description="Fields of the review form in display order.")
async def get_schema(db: AsyncSession = Depends(get_db)):
    return await _field_list(db)


@admin_router.get("", response_model=ReviewFieldListResponse, summary="List review fields")
async def admin_list_fields(
    _admin: User = Depends(require_role(ROLE_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    return await _field_list(db)


@admin_router.post("", response_model=ReviewFieldItem, status_code=status.HTTP_201_CREATED, summary="Add a review field", description="Numeric fields need `min` and `max`. Without `order` the field goes last.")
async def create_field(
    body: CreateReviewFieldRequest,
    _admin: User = Depends(require_role(ROLE_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    field = await review_schema.create_field(db, **body.model_dump())
    return ReviewFieldItem.model_validate(field)


@admin_router.patch("/{field_id}", response_model=ReviewFieldItem, summary="Edit a review field", description="Only the supplied attributes change.")
async def update_field(
    field_id: uuid.UUID,
    body: UpdateReviewFieldRequest,
    _admin: User = Depends(require_role(ROLE_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    field = await review_schema.update_field(db, field_id, body.model_dump(exclude_unset=True))
    return ReviewFieldItem.model_validate(field)


@admin_router.delete("/{field_id}", response_model=SuccessResponse, summary="Remove a review field", description="Existing reviews keep the values they were submitted with.")
async def delete_field(
    field_id: uuid.UUID,
    _admin: User = Depends(require_role(ROLE_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    await review_schema.delete_field(db, field_id)
    return SuccessResponse()


@admin_router.post("/reorder", response_model=ReviewFieldListResponse, summary="Reorder review fields", description="Assigns positions 1..n in the given order. Pass every id for a clean ordering.")
async def reorder_fields(
    body: ReorderFieldsRequest,
    _admin: User = Depends(require_role(ROLE_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    fields = await review_schema.reorder(db, body.ordered_ids)
    return ReviewFieldListResponse(fields=[ReviewFieldItem.model_validate(f) for f in fields])
