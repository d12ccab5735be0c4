"""Builder rating aggregation.

``recompute`` re-derives a builder's ``average_rating`` and ``total_reviews``
from its full current review set. It never increments, so running it after
any mutation, in any order, leaves the cache equal to the review set. It
runs inside the caller's transaction and does not commit; the caller holds
the builder row lock for the whole mutation.
"""
import logging
import uuid
from collections.abc import Iterable, Mapping

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConsistencyFailure
from app.models.builder import Builder
from app.models.review import Review

logger = logging.getLogger(__name__)


def sub_average(ratings: Mapping[str, float]) -> float | None:
    """Unweighted mean of one review's numeric values, ``None`` if it has none."""
    values = [float(value) for value in ratings.values()]
    if not values:
        return None
    return sum(values) / len(values)


def aggregate(ratings_per_review: Iterable[Mapping[str, float]]) -> tuple[float | None, int]:
    """Return ``(average_rating, total_reviews)`` for a builder's reviews.

    Every review counts towards the total; reviews without numeric values
    have no sub-average and do not move the average.
    """
    count = 0
    sub_averages = []
    for ratings in ratings_per_review:
        count += 1
        value = sub_average(ratings or {})
        if value is not None:
            sub_averages.append(value)

    if not sub_averages:
        return None, count
    return sum(sub_averages) / len(sub_averages), count


def builder_lock_query(builder_id: uuid.UUID) -> Select:
    return select(Builder).where(Builder.id == builder_id).with_for_update()


async def lock_builder(db: AsyncSession, builder_id: uuid.UUID) -> Builder | None:
    """Load the builder with a row lock held until the transaction ends."""
    result = await db.execute(builder_lock_query(builder_id))
    return result.scalar_one_or_none()


async def recompute(db: AsyncSession, builder_id: uuid.UUID) -> None:
    try:
        await db.flush()
        builder = await lock_builder(db, builder_id)
        if builder is None:
            raise ConsistencyFailure(f"Builder {builder_id} vanished during aggregation")

        result = await db.execute(select(Review.ratings).where(Review.builder_id == builder_id))
        average, count = aggregate(result.scalars().all())

        builder.average_rating = average
        builder.total_reviews = count
        await db.flush()
    except SQLAlchemyError as e:
        raise ConsistencyFailure(f"Aggregation failed for builder {builder_id}") from e

    logger.debug("Builder %s aggregate: average=%s total=%d", builder_id, average, count)
