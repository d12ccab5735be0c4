from app.models.builder import Builder
from app.models.review import Review, ReviewImage
from app.models.review_field import ReviewField
from app.models.user import User

__all__ = [
    "User",
    "Builder",
    "Review",
    "ReviewImage",
    "ReviewField",
]
