import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.review import ReviewItem


class BuilderListItem(BaseModel):
    id: uuid.UUID
    name: str
    description: str | None = None
    location: str | None = None
    website: str | None = None
    phone: str | None = None
    email: str | None = None
    logo: str | None = None
    average_rating: float | None = None
    total_reviews: int = 0
    is_verified: bool = False
    is_published: bool = True
    is_featured: bool = False
    created_at: datetime

    model_config = {"from_attributes": True}


class PaginationMeta(BaseModel):
    page: int
    per_page: int
    total: int
    total_pages: int


class BuilderListResponse(BaseModel):
    data: list[BuilderListItem]
    meta: PaginationMeta


class BuilderDetail(BaseModel):
    builder: BuilderListItem
    reviews: list[ReviewItem]
    images: list[str]


class CreateBuilderRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    location: str | None = None
    website: str | None = None
    phone: str | None = None
    email: str | None = None
    logo: str | None = None
    user_id: uuid.UUID | None = None
    is_verified: bool = False
    is_published: bool = True
    is_featured: bool = False


class UpdateBuilderFlagsRequest(BaseModel):
    is_published: bool | None = None
    is_featured: bool | None = None
    is_verified: bool | None = None


class AdminStatsResponse(BaseModel):
    total_builders: int
    total_reviews: int
    total_users: int
