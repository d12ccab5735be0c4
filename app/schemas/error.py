from pydantic import BaseModel


class ErrorResponse(BaseModel):
    detail: str
    missing_fields: list[str] = []
    out_of_range_fields: list[str] = []
