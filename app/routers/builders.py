import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.deps import get_optional_user
from app.models.user import ROLE_ADMIN, User
from app.routers.reviews import review_item
from app.schemas.builder import BuilderDetail, BuilderListItem, BuilderListResponse, PaginationMeta
from app.schemas.review import ReviewListResponse
from app.services import directory
from app.services import reviews as review_store

router = APIRouter(prefix="/builders", tags=["Builders"])


def _is_admin(user: User | None) -> bool:
    return user is not None and user.role == ROLE_ADMIN


@router.get("", response_model=BuilderListResponse, summary="Search builders", description="Name search. Exact and prefix matches first, then alphabetical. Unpublished builders are visible to admins only.")
async def list_builders(
    q: str | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.BUILDERS_PER_PAGE, ge=1, le=100),
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    result = await directory.search(db, q, page, per_page, caller_is_admin=_is_admin(user))
    return BuilderListResponse(
        data=[BuilderListItem.model_validate(b) for b in result.items],
        meta=PaginationMeta(
            page=result.page,
            per_page=result.per_page,
            total=result.total,
            total_pages=result.total_pages,
        ),
    )


@router.get("/by-name/{name}", response_model=BuilderListItem, summary="Builder by exact name")
async def get_builder_by_name(
    name: str,
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    builder = await directory.get_builder_by_name(db, name, caller_is_admin=_is_admin(user))
    return BuilderListItem.model_validate(builder)


@router.get("/{builder_id}", response_model=BuilderDetail, summary="Builder profile", description="Builder with its reviews (newest first) and every review photo.")
async def get_builder(
    builder_id: uuid.UUID,
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    builder = await directory.get_builder(db, builder_id, caller_is_admin=_is_admin(user))
    details = await review_store.list_reviews_for_builder(db, builder.id)
    return BuilderDetail(
        builder=BuilderListItem.model_validate(builder),
        reviews=[review_item(d) for d in details],
        images=await directory.builder_photos(db, builder.id),
    )


@router.get("/{builder_id}/reviews", response_model=ReviewListResponse, summary="Builder reviews")
async def get_builder_reviews(
    builder_id: uuid.UUID,
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    builder = await directory.get_builder(db, builder_id, caller_is_admin=_is_admin(user))
    details = await review_store.list_reviews_for_builder(db, builder.id)
    return ReviewListResponse(reviews=[review_item(d) for d in details])
