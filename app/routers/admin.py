import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.deps import require_role
from app.models.user import ROLE_ADMIN, User
from app.schemas.builder import (
    AdminStatsResponse,
    BuilderListItem,
    BuilderListResponse,
    CreateBuilderRequest,
    PaginationMeta,
    UpdateBuilderFlagsRequest,
)
from app.services import directory

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/stats", response_model=AdminStatsResponse, summary="Platform totals")
async def get_stats(
    _admin: User = Depends(require_role(ROLE_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    return AdminStatsResponse(**await directory.stats(db))


@router.get("/builders", response_model=BuilderListResponse, summary="All builders", description="Includes unpublished builders.")
async def list_builders(
    q: str | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.ADMIN_BUILDERS_PER_PAGE, ge=1, le=100),
    _admin: User = Depends(require_role(ROLE_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    result = await directory.search(db, q, page, per_page, caller_is_admin=True)
    return BuilderListResponse(
        data=[BuilderListItem.model_validate(b) for b in result.items],
        meta=PaginationMeta(page=result.page, per_page=result.per_page, total=result.total, total_pages=result.total_pages),
    )


@router.post("/builders", response_model=BuilderListItem, status_code=status.HTTP_201_CREATED, summary="Add a builder")
async def create_builder(
    body: CreateBuilderRequest,
    _admin: User = Depends(require_role(ROLE_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    builder = await directory.create_builder(db, **body.model_dump())
    return BuilderListItem.model_validate(builder)


@router.patch("/builders/{builder_id}", response_model=BuilderListItem, summary="Moderate a builder", description="Sets `is_published`, `is_featured` and/or `is_verified`. Ratings cannot be edited here.")
async def moderate_builder(
    builder_id: uuid.UUID,
    body: UpdateBuilderFlagsRequest,
    _admin: User = Depends(require_role(ROLE_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    builder = await directory.set_moderation_flags(db, builder_id, body.model_dump(exclude_none=True))
    return BuilderListItem.model_validate(builder)
