import uuid

from pydantic import BaseModel


class ProfileResponse(BaseModel):
    id: uuid.UUID
    email: str
    role: str
    full_name: str | None = None

    model_config = {"from_attributes": True}
