"""Checks a review submission against a snapshot of the review schema.

Pure: the caller passes the field list it read, nothing is loaded or written
here. Required numeric fields must hold a number within ``[min, max]``,
required text fields a non-blank string. Optional fields are only checked
when present. Keys that match no field are dropped.
"""
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from app.core.errors import ValidationError
from app.models.review_field import FIELD_NUMBER, ReviewField


@dataclass(frozen=True)
class ReviewValues:
    """Accepted submission, split by field kind."""

    ratings: dict[str, float] = field(default_factory=dict)
    answers: dict[str, str] = field(default_factory=dict)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate(fields: Iterable[ReviewField], values: Mapping[str, Any]) -> ReviewValues:
    missing: list[str] = []
    out_of_range: list[str] = []
    ratings: dict[str, float] = {}
    answers: dict[str, str] = {}

    for definition in fields:
        name = definition.name
        value = values.get(name)

        if definition.type == FIELD_NUMBER:
            if value is None:
                if definition.required:
                    missing.append(name)
                continue
            if not _is_number(value) or not definition.min <= value <= definition.max:
                out_of_range.append(name)
                continue
            ratings[name] = value
        else:
            if value is None or (isinstance(value, str) and not value.strip()):
                if definition.required:
                    missing.append(name)
                continue
            if not isinstance(value, str):
                out_of_range.append(name)
                continue
            answers[name] = value.strip()

    if missing or out_of_range:
        parts = []
        if missing:
            parts.append(f"missing: {', '.join(missing)}")
        if out_of_range:
            parts.append(f"out of range: {', '.join(out_of_range)}")
        raise ValidationError(
            f"Invalid review ({'; '.join(parts)})",
            missing_fields=missing,
            out_of_range_fields=out_of_range,
        )

    return ReviewValues(ratings=ratings, answers=answers)
