import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.review_field import FIELD_NUMBER, FIELD_TEXTAREA, ReviewField

logger = logging.getLogger(__name__)

RATING_CATEGORIES = [
    ("build_quality", "Build Quality"),
    ("material_quality", "Material Quality"),
    ("bathrooms", "Bathrooms"),
    ("bedrooms", "Bedrooms"),
    ("kitchen", "Kitchen"),
    ("exterior", "Exterior"),
    ("windows_doors", "Windows & Doors"),
    ("electrical", "Electrical"),
    ("plumbing", "Plumbing"),
]


def default_fields() -> list[ReviewField]:
    fields = [
        ReviewField(name=name, label=label, type=FIELD_NUMBER, required=True, min=1, max=5, order=position)
        for position, (name, label) in enumerate(RATING_CATEGORIES, start=1)
    ]
    fields.append(
        ReviewField(
            name="overall_comment",
            label="Overall Comment",
            type=FIELD_TEXTAREA,
            required=True,
            order=len(RATING_CATEGORIES) + 1,
        )
    )
    return fields


async def ensure_default_fields(db: AsyncSession) -> bool:
    """Seed the default review schema into an empty field table. Returns True if seeded."""
    count = (await db.execute(select(func.count()).select_from(ReviewField))).scalar() or 0
    if count:
        return False

    db.add_all(default_fields())
    await db.commit()
    logger.info("Seeded %d default review fields", len(RATING_CATEGORIES) + 1)
    return True
