"""Review store: review lifecycle with owned photo attachments.

Each mutation runs as one atomic unit: review row, photo rows and the
builder aggregate are committed together or not at all. The builder row is
locked before any write so mutations on the same builder serialize, while
mutations on different builders do not block each other.
"""
import logging
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import atomic
from app.core.errors import AuthorizationError, ConsistencyFailure, LimitExceededError, NotFoundError, ValidationError
from app.models.builder import Builder
from app.models.review import Review, ReviewImage
from app.models.user import ROLE_ADMIN, User
from app.services import aggregation, review_schema, validator

logger = logging.getLogger(__name__)

OVERALL_COMMENT_FIELD = "overall_comment"


@dataclass
class BuilderSnapshot:
    id: uuid.UUID
    name: str
    logo: str | None
    location: str | None
    is_verified: bool


@dataclass
class ReviewDetail:
    review: Review
    photos: list[str] = field(default_factory=list)
    author_name: str | None = None
    builder: BuilderSnapshot | None = None


def _clean_photos(photo_urls: Sequence[str] | None) -> list[str]:
    photos = [url.strip() for url in photo_urls or [] if url and url.strip()]
    if len(photos) > settings.MAX_REVIEW_PHOTOS:
        raise LimitExceededError(f"A review can have at most {settings.MAX_REVIEW_PHOTOS} photos")
    return photos


async def _check_submission(
    db: AsyncSession, values: Mapping[str, Any], overall_comment: str | None
) -> validator.ReviewValues:
    fields = await review_schema.list_fields(db)
    submitted = {**values, OVERALL_COMMENT_FIELD: overall_comment}
    try:
        if not overall_comment or not overall_comment.strip():
            raise ValidationError("Overall comment is required", missing_fields=[OVERALL_COMMENT_FIELD])
        accepted = validator.validate(fields, submitted)
    except ValidationError as e:
        logger.warning(
            "Review submission rejected: missing=%s out_of_range=%s", e.missing_fields, e.out_of_range_fields
        )
        raise
    accepted.answers.pop(OVERALL_COMMENT_FIELD, None)
    return accepted


def _add_photos(db: AsyncSession, review_id: uuid.UUID, photos: list[str]) -> None:
    for position, url in enumerate(photos):
        db.add(ReviewImage(review_id=review_id, url=url, position=position))


async def _get_review_row(db: AsyncSession, review_id: uuid.UUID, refresh: bool = False) -> Review:
    query = select(Review).where(Review.id == review_id)
    if refresh:
        query = query.execution_options(populate_existing=True)
    review = (await db.execute(query)).scalar_one_or_none()
    if review is None:
        raise NotFoundError("Review not found")
    return review


def _authorize(review: Review, caller_id: uuid.UUID, caller_role: str | None) -> None:
    if review.author_id != caller_id and caller_role != ROLE_ADMIN:
        raise AuthorizationError("Only the author or an admin can change this review")


async def _lock_review(db: AsyncSession, review_id: uuid.UUID, caller_id: uuid.UUID, caller_role: str | None) -> Review:
    review = await _get_review_row(db, review_id)
    _authorize(review, caller_id, caller_role)
    await aggregation.lock_builder(db, review.builder_id)
    # Re-read under the builder lock in case a concurrent delete won the race.
    return await _get_review_row(db, review_id, refresh=True)


async def _recompute(db: AsyncSession, builder_id: uuid.UUID) -> None:
    try:
        await aggregation.recompute(db, builder_id)
    except ConsistencyFailure:
        logger.exception("Aggregation failed for builder %s, rolling back", builder_id)
        raise


async def _photos_by_review(db: AsyncSession, review_ids: list[uuid.UUID]) -> dict[uuid.UUID, list[str]]:
    photos: dict[uuid.UUID, list[str]] = {review_id: [] for review_id in review_ids}
    if not review_ids:
        return photos
    result = await db.execute(
        select(ReviewImage.review_id, ReviewImage.url)
        .where(ReviewImage.review_id.in_(review_ids))
        .order_by(ReviewImage.created_at, ReviewImage.position)
    )
    for review_id, url in result.all():
        photos[review_id].append(url)
    return photos


# ──────────────────────────────────────────────
# MUTATIONS
# ──────────────────────────────────────────────

async def create_review(
    db: AsyncSession,
    *,
    author_id: uuid.UUID,
    builder_id: uuid.UUID,
    values: Mapping[str, Any],
    overall_comment: str,
    photo_urls: Sequence[str] | None = None,
) -> uuid.UUID:
    if await aggregation.lock_builder(db, builder_id) is None:
        raise NotFoundError("Builder not found")
    if (await db.execute(select(User.id).where(User.id == author_id))).first() is None:
        raise NotFoundError("Author not found")

    photos = _clean_photos(photo_urls)
    accepted = await _check_submission(db, values, overall_comment)

    async with atomic(db):
        review = Review(
            author_id=author_id,
            builder_id=builder_id,
            ratings=dict(accepted.ratings),
            answers=dict(accepted.answers),
            overall_comment=overall_comment.strip(),
        )
        db.add(review)
        await db.flush()
        review_id = review.id
        _add_photos(db, review_id, photos)
        await _recompute(db, builder_id)

    logger.info("Review %s created for builder %s by %s", review_id, builder_id, author_id)
    return review_id


async def update_review(
    db: AsyncSession,
    review_id: uuid.UUID,
    caller_id: uuid.UUID,
    caller_role: str | None,
    *,
    values: Mapping[str, Any],
    overall_comment: str,
    photo_urls: Sequence[str] | None = None,
) -> None:
    """Replace a review's values, comment and whole photo set."""
    review = await _lock_review(db, review_id, caller_id, caller_role)
    builder_id = review.builder_id

    photos = _clean_photos(photo_urls)
    accepted = await _check_submission(db, values, overall_comment)

    async with atomic(db):
        review.ratings = dict(accepted.ratings)
        review.answers = dict(accepted.answers)
        review.overall_comment = overall_comment.strip()
        await db.execute(delete(ReviewImage).where(ReviewImage.review_id == review_id))
        _add_photos(db, review_id, photos)
        await _recompute(db, builder_id)

    logger.info("Review %s updated by %s", review_id, caller_id)


async def delete_review(
    db: AsyncSession,
    review_id: uuid.UUID,
    caller_id: uuid.UUID,
    caller_role: str | None,
) -> None:
    """Delete photos, then the review, then refresh the builder aggregate."""
    review = await _lock_review(db, review_id, caller_id, caller_role)
    builder_id = review.builder_id

    async with atomic(db):
        await db.execute(delete(ReviewImage).where(ReviewImage.review_id == review_id))
        await db.delete(review)
        await _recompute(db, builder_id)

    logger.info("Review %s deleted by %s", review_id, caller_id)


# ──────────────────────────────────────────────
# READS
# ──────────────────────────────────────────────

async def get_review(db: AsyncSession, review_id: uuid.UUID) -> ReviewDetail:
    review = await _get_review_row(db, review_id)
    photos = await _photos_by_review(db, [review.id])

    builder = (await db.execute(select(Builder).where(Builder.id == review.builder_id))).scalar_one_or_none()
    return ReviewDetail(
        review=review,
        photos=photos[review.id],
        builder=_snapshot(builder) if builder else None,
    )


async def list_reviews_for_builder(db: AsyncSession, builder_id: uuid.UUID) -> list[ReviewDetail]:
    result = await db.execute(
        select(Review, User.full_name)
        .outerjoin(User, User.id == Review.author_id)
        .where(Review.builder_id == builder_id)
        .order_by(Review.created_at.desc(), Review.id)
    )
    rows = result.all()
    photos = await _photos_by_review(db, [review.id for review, _ in rows])
    return [ReviewDetail(review=review, photos=photos[review.id], author_name=name) for review, name in rows]


async def list_reviews_for_author(db: AsyncSession, author_id: uuid.UUID) -> list[ReviewDetail]:
    """Author's reviews with the owning builder's current display metadata."""
    result = await db.execute(
        select(Review, Builder)
        .join(Builder, Builder.id == Review.builder_id)
        .where(Review.author_id == author_id)
        .order_by(Review.created_at.desc(), Review.id)
    )
    rows = result.all()
    photos = await _photos_by_review(db, [review.id for review, _ in rows])
    return [
        ReviewDetail(review=review, photos=photos[review.id], builder=_snapshot(builder))
        for review, builder in rows
    ]


def _snapshot(builder: Builder) -> BuilderSnapshot:
    return BuilderSnapshot(
        id=builder.id,
        name=builder.name,
        logo=builder.logo,
        location=builder.location,
        is_verified=builder.is_verified,
    )
