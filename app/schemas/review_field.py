import uuid
from typing import Literal

from pydantic import BaseModel, Field

FieldType = Literal["number", "text", "textarea"]


class ReviewFieldItem(BaseModel):
    id: uuid.UUID
    name: str
    label: str
    type: FieldType
    required: bool
    min: float | None = None
    max: float | None = None
    order: int

    model_config = {"from_attributes": True}


class ReviewFieldListResponse(BaseModel):
    fields: list[ReviewFieldItem]


class CreateReviewFieldRequest(BaseModel):
    name: str = Field(..., pattern=r"^[a-z][a-z0-9_]*$", max_length=100, examples=["kitchen"])
    label: str = Field(..., min_length=1, max_length=255)
    type: FieldType
    required: bool = True
    min: float | None = None
    max: float | None = None
    order: int | None = None


class UpdateReviewFieldRequest(BaseModel):
    name: str | None = Field(None, pattern=r"^[a-z][a-z0-9_]*$", max_length=100)
    label: str | None = Field(None, min_length=1, max_length=255)
    type: FieldType | None = None
    required: bool | None = None
    min: float | None = None
    max: float | None = None
    order: int | None = None


class ReorderFieldsRequest(BaseModel):
    ordered_ids: list[uuid.UUID] = Field(..., min_length=1)


class SuccessResponse(BaseModel):
    success: bool = True
