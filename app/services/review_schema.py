"""Review schema store: the admin-configurable list of review fields.

Fields are listed by ``order`` ascending with ties broken by id. Deleting or
editing a field never touches reviews that were already submitted.
"""
import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, ValidationError
from app.models.review_field import FIELD_NUMBER, FIELD_TYPES, ReviewField

logger = logging.getLogger(__name__)

_EDITABLE = ("name", "label", "type", "required", "min", "max", "order")


async def list_fields(db: AsyncSession) -> list[ReviewField]:
    result = await db.execute(select(ReviewField).order_by(ReviewField.order, ReviewField.id))
    return list(result.scalars().all())


async def get_field(db: AsyncSession, field_id: uuid.UUID) -> ReviewField:
    result = await db.execute(select(ReviewField).where(ReviewField.id == field_id))
    field = result.scalar_one_or_none()
    if field is None:
        raise NotFoundError("Review field not found")
    return field


def _check_definition(field_type: str, min_value: float | None, max_value: float | None) -> None:
    if field_type not in FIELD_TYPES:
        raise ValidationError(f"Unknown field type: {field_type}", out_of_range_fields=["type"])
    if field_type != FIELD_NUMBER:
        return
    missing = [key for key, value in (("min", min_value), ("max", max_value)) if value is None]
    if missing:
        raise ValidationError("Numeric fields need both min and max", missing_fields=missing)
    if min_value > max_value:
        raise ValidationError("min must not exceed max", out_of_range_fields=["min", "max"])


async def _check_name_free(db: AsyncSession, name: str, exclude_id: uuid.UUID | None = None) -> None:
    query = select(ReviewField.id).where(ReviewField.name == name)
    if exclude_id is not None:
        query = query.where(ReviewField.id != exclude_id)
    if (await db.execute(query)).first() is not None:
        raise ValidationError(f"A field named '{name}' already exists", out_of_range_fields=["name"])


async def _commit_named(db: AsyncSession, name: str) -> None:
    """Commit, mapping a lost race on the unique name to a validation error."""
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ValidationError(f"A field named '{name}' already exists", out_of_range_fields=["name"]) from e


async def _next_order(db: AsyncSession) -> int:
    current = (await db.execute(select(func.max(ReviewField.order)))).scalar()
    return (current or 0) + 1


async def create_field(
    db: AsyncSession,
    *,
    name: str,
    label: str,
    type: str,
    required: bool = True,
    min: float | None = None,
    max: float | None = None,
    order: int | None = None,
) -> ReviewField:
    _check_definition(type, min, max)
    await _check_name_free(db, name)

    if type != FIELD_NUMBER:
        min = max = None
    if order is None:
        order = await _next_order(db)

    field = ReviewField(name=name, label=label, type=type, required=required, min=min, max=max, order=order)
    db.add(field)
    await _commit_named(db, name)
    await db.refresh(field)
    logger.info("Review field %s created at position %s", field.name, field.order)
    return field


async def update_field(db: AsyncSession, field_id: uuid.UUID, changes: dict) -> ReviewField:
    """Apply a partial update; keys absent from ``changes`` keep their value."""
    field = await get_field(db, field_id)
    changes = {key: value for key, value in changes.items() if key in _EDITABLE}

    merged = {key: changes.get(key, getattr(field, key)) for key in _EDITABLE}
    cleared = [key for key in ("name", "label", "type", "required", "order") if merged[key] is None]
    if cleared:
        raise ValidationError(f"Cannot clear {', '.join(cleared)}", missing_fields=cleared)
    _check_definition(merged["type"], merged["min"], merged["max"])
    if "name" in changes and changes["name"] != field.name:
        await _check_name_free(db, changes["name"], exclude_id=field.id)

    if merged["type"] != FIELD_NUMBER:
        merged["min"] = merged["max"] = None
    for key, value in merged.items():
        setattr(field, key, value)

    await _commit_named(db, merged["name"])
    await db.refresh(field)
    logger.info("Review field %s updated: %s", field.name, sorted(changes))
    return field


async def delete_field(db: AsyncSession, field_id: uuid.UUID) -> None:
    field = await get_field(db, field_id)
    name = field.name
    await db.delete(field)
    await db.commit()
    logger.info("Review field %s deleted", name)


async def reorder(db: AsyncSession, ordered_ids: list[uuid.UUID]) -> list[ReviewField]:
    """Set ``order`` to the 1-based position of each id; ids not listed keep their order."""
    if len(set(ordered_ids)) != len(ordered_ids):
        raise ValidationError("Duplicate ids in reorder request", out_of_range_fields=["ordered_ids"])

    result = await db.execute(select(ReviewField).where(ReviewField.id.in_(ordered_ids)))
    by_id = {field.id: field for field in result.scalars().all()}
    unknown = [str(field_id) for field_id in ordered_ids if field_id not in by_id]
    if unknown:
        raise NotFoundError(f"Unknown review fields: {', '.join(unknown)}")

    for position, field_id in enumerate(ordered_ids, start=1):
        by_id[field_id].order = position

    await db.commit()
    logger.info("Review fields reordered (%d ids)", len(ordered_ids))
    return await list_fields(db)
