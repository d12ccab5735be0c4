"""Builder directory read path plus admin moderation of directory entries."""
import logging
import math
import uuid
from dataclasses import dataclass

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, ValidationError
from app.models.builder import Builder
from app.models.review import Review, ReviewImage
from app.models.user import User

logger = logging.getLogger(__name__)

MODERATION_FLAGS = ("is_published", "is_featured", "is_verified")


@dataclass
class BuilderPage:
    items: list[Builder]
    page: int
    per_page: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.per_page) if self.total > 0 else 0


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def search(
    db: AsyncSession,
    query: str | None,
    page: int,
    per_page: int,
    caller_is_admin: bool,
) -> BuilderPage:
    """Paginated builders whose name contains ``query``.

    Exact name matches sort first, then prefix matches, then the rest; each
    group alphabetically. Non-admin callers only see published builders.
    Pages are 1-indexed and a page past the end is simply empty.
    """
    stmt = select(Builder)
    if not caller_is_admin:
        stmt = stmt.where(Builder.is_published.is_(True))

    q = (query or "").strip()
    if q:
        pattern = _escape_like(q)
        stmt = stmt.where(Builder.name.ilike(f"%{pattern}%", escape="\\"))

    total = (await db.execute(select(func.count()).select_from(stmt.subquery()))).scalar() or 0
    offset = (page - 1) * per_page
    if offset >= total:
        return BuilderPage(items=[], page=page, per_page=per_page, total=total)

    if q:
        rank = case(
            (func.lower(Builder.name) == q.lower(), 0),
            (Builder.name.ilike(f"{_escape_like(q)}%", escape="\\"), 1),
            else_=2,
        )
        stmt = stmt.order_by(rank, Builder.name, Builder.id)
    else:
        stmt = stmt.order_by(Builder.name, Builder.id)

    stmt = stmt.offset(offset).limit(per_page)
    result = await db.execute(stmt)
    return BuilderPage(items=list(result.scalars().all()), page=page, per_page=per_page, total=total)


async def get_builder(db: AsyncSession, builder_id: uuid.UUID, caller_is_admin: bool = False) -> Builder:
    stmt = select(Builder).where(Builder.id == builder_id)
    if not caller_is_admin:
        stmt = stmt.where(Builder.is_published.is_(True))
    builder = (await db.execute(stmt)).scalar_one_or_none()
    if builder is None:
        raise NotFoundError("Builder not found")
    return builder


async def get_builder_by_name(db: AsyncSession, name: str, caller_is_admin: bool = False) -> Builder:
    stmt = select(Builder).where(Builder.name == name)
    if not caller_is_admin:
        stmt = stmt.where(Builder.is_published.is_(True))
    builder = (await db.execute(stmt.order_by(Builder.id).limit(1))).scalar_one_or_none()
    if builder is None:
        raise NotFoundError("Builder not found")
    return builder


async def builder_photos(db: AsyncSession, builder_id: uuid.UUID) -> list[str]:
    """Distinct photo URLs across all of a builder's reviews."""
    result = await db.execute(
        select(ReviewImage.url)
        .join(Review, Review.id == ReviewImage.review_id)
        .where(Review.builder_id == builder_id)
        .distinct()
        .order_by(ReviewImage.url)
    )
    return list(result.scalars().all())


async def create_builder(db: AsyncSession, **attributes) -> Builder:
    """Register a directory entry. Aggregate fields always start empty."""
    attributes.pop("average_rating", None)
    attributes.pop("total_reviews", None)
    builder = Builder(**attributes, average_rating=None, total_reviews=0)
    db.add(builder)
    await db.commit()
    await db.refresh(builder)
    logger.info("Builder %s (%s) created", builder.id, builder.name)
    return builder


async def set_moderation_flags(db: AsyncSession, builder_id: uuid.UUID, flags: dict[str, bool]) -> Builder:
    changes = {key: value for key, value in flags.items() if key in MODERATION_FLAGS and value is not None}
    if not changes:
        raise ValidationError("No valid fields to update", missing_fields=list(MODERATION_FLAGS))

    builder = await get_builder(db, builder_id, caller_is_admin=True)
    for key, value in changes.items():
        setattr(builder, key, value)
    await db.commit()
    await db.refresh(builder)
    logger.info("Builder %s moderation flags set: %s", builder_id, changes)
    return builder


async def stats(db: AsyncSession) -> dict[str, int]:
    totals = {}
    for key, model in (("total_builders", Builder), ("total_reviews", Review), ("total_users", User)):
        totals[key] = (await db.execute(select(func.count()).select_from(model))).scalar() or 0
    return totals
