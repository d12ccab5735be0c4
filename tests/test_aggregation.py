"""Tests for builder rating aggregation."""
import asyncio
import uuid
from unittest.mock import patch

import pytest
from sqlalchemy import select
from sqlalchemy.dialects import postgresql
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.errors import ConsistencyFailure
from app.models.builder import Builder
from app.models.review import Review
from app.services import aggregation, reviews
from app.services.aggregation import aggregate, sub_average
from tests.conftest import TEST_DB_URL, all_ratings


def test_sub_average_uses_float_division():
    assert sub_average({"a": 4, "b": 5}) == 4.5
    assert sub_average({}) is None


def test_aggregate_is_mean_of_sub_averages():
    average, count = aggregate([{"a": 5, "b": 3}, {"a": 1, "b": 1, "c": 1}])
    assert count == 2
    assert average == pytest.approx((4.0 + 1.0) / 2)


def test_aggregate_without_reviews_is_null():
    assert aggregate([]) == (None, 0)


def test_reviews_without_numeric_values_count_but_do_not_move_average():
    average, count = aggregate([{"a": 2}, {}])
    assert count == 2
    assert average == 2.0


async def test_recompute_rederives_from_review_set(db, builder, homeowner):
    builder_id = builder.id
    db.add(Review(author_id=homeowner.id, builder_id=builder_id, ratings=all_ratings(4), answers={}, overall_comment="a"))
    db.add(Review(author_id=homeowner.id, builder_id=builder_id, ratings=all_ratings(2), answers={}, overall_comment="b"))
    await db.flush()

    # A corrupted cache is overwritten, not incremented.
    builder.average_rating = 1.0
    builder.total_reviews = 40
    await aggregation.recompute(db, builder_id)
    await aggregation.recompute(db, builder_id)
    await db.commit()

    refreshed = (await db.execute(select(Builder).where(Builder.id == builder_id))).scalar_one()
    assert refreshed.total_reviews == 2
    assert refreshed.average_rating == pytest.approx(3.0)


async def test_recompute_after_last_review_removed_resets_to_null(db, builder, homeowner):
    review = Review(author_id=homeowner.id, builder_id=builder.id, ratings=all_ratings(5), answers={}, overall_comment="a")
    db.add(review)
    await aggregation.recompute(db, builder.id)
    assert builder.average_rating == 5.0

    await db.delete(review)
    await aggregation.recompute(db, builder.id)
    assert builder.total_reviews == 0
    assert builder.average_rating is None


async def test_recompute_for_missing_builder_is_consistency_failure(db):
    with pytest.raises(ConsistencyFailure):
        await aggregation.recompute(db, uuid.uuid4())


def test_builder_lock_query_takes_row_lock():
    builder_id = uuid.uuid4()
    compiled = str(aggregation.builder_lock_query(builder_id).compile(dialect=postgresql.dialect()))
    assert compiled.rstrip().endswith("FOR UPDATE")


async def test_review_mutations_lock_the_builder(db, builder, homeowner):
    builder_id = builder.id
    locked = []
    original = aggregation.builder_lock_query

    def recording_lock_query(target_id):
        locked.append(target_id)
        return original(target_id)

    with patch("app.services.aggregation.builder_lock_query", side_effect=recording_lock_query):
        review_id = await reviews.create_review(
            db, author_id=homeowner.id, builder_id=builder_id, values=all_ratings(4), overall_comment="solid"
        )
        assert builder_id in locked

        locked.clear()
        await reviews.update_review(
            db, review_id, homeowner.id, homeowner.role, values=all_ratings(2), overall_comment="leaky"
        )
        assert builder_id in locked

        locked.clear()
        await reviews.delete_review(db, review_id, homeowner.id, homeowner.role)
        assert builder_id in locked


@pytest.mark.skipif(not TEST_DB_URL.startswith("postgresql"), reason="row locks need PostgreSQL")
async def test_concurrent_creates_for_one_builder_are_serialised(db, builder, homeowner, other_homeowner):
    builder_id = builder.id
    authors = [(homeowner.id, 5), (other_homeowner.id, 1)]

    eng = create_async_engine(TEST_DB_URL)
    session_factory = async_sessionmaker(eng, class_=AsyncSession, expire_on_commit=False)

    async def submit(author_id, value):
        async with session_factory() as session:
            await reviews.create_review(
                session, author_id=author_id, builder_id=builder_id, values=all_ratings(value), overall_comment="ok"
            )

    try:
        await asyncio.gather(*(submit(author_id, value) for author_id, value in authors))
    finally:
        await eng.dispose()

    refreshed = (
        await db.execute(select(Builder).where(Builder.id == builder_id).execution_options(populate_existing=True))
    ).scalar_one()
    assert refreshed.total_reviews == 2
    assert refreshed.average_rating == pytest.approx(3.0)
