from typing import Literal, get_args

from pydantic import BaseModel

UploadType = Literal["review", "logo"]
UPLOAD_TYPES = frozenset(get_args(UploadType))


class UploadResponse(BaseModel):
    """A stored photo; ``url`` is what reviews and builder logos reference."""

    url: str
    type: UploadType
    size: int
    mime_type: str
