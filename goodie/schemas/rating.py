# goodie/schemas/rating.py
import uuid
from datetime import datetime

from pydantic import field_validator
from sqlmodel import SQLModel, Field


class RatingCreate(SQLModel):
    """
    Payload for rating a product. Rating the same product again
    replaces the previous value and comment.
    """

    product_id: uuid.UUID
    value: int = Field(ge=1, le=5)
    comment: str | None = Field(default=None, max_length=2000)

    @field_validator("comment")
    @classmethod
    def normalize_comment(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class RatingRead(SQLModel):
    id: uuid.UUID
    user_id: uuid.UUID
    product_id: uuid.UUID
    value: int
    comment: str | None = None
    created_at: datetime
    updated_at: datetime
