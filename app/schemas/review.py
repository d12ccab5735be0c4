import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class BuilderBrief(BaseModel):
    id: uuid.UUID
    name: str
    logo: str | None = None
    location: str | None = None
    is_verified: bool = False


class ReviewItem(BaseModel):
    id: uuid.UUID
    author_id: uuid.UUID
    author_name: str | None = None
    builder_id: uuid.UUID
    ratings: dict[str, float] = {}
    answers: dict[str, str] = {}
    overall_comment: str
    sub_average: float | None = None
    photos: list[str] = []
    builder: BuilderBrief | None = None
    created_at: datetime
    updated_at: datetime


class ReviewListResponse(BaseModel):
    reviews: list[ReviewItem]


class CreateReviewRequest(BaseModel):
    builder_id: uuid.UUID
    values: dict[str, Any] = Field(default_factory=dict, examples=[{"kitchen": 4, "plumbing": 5}])
    overall_comment: str
    photos: list[str] = []
    author_id: uuid.UUID | None = Field(None, description="Admins only: submit on behalf of this user.")


class UpdateReviewRequest(BaseModel):
    values: dict[str, Any] = Field(default_factory=dict)
    overall_comment: str
    photos: list[str] = Field(default_factory=list, description="Replaces the whole photo set.")


class CreateReviewResponse(BaseModel):
    id: uuid.UUID
    message: str = "Review created successfully"
