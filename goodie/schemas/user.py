# goodie/schemas/user.py
import uuid
from datetime import datetime

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from goodie.models.user import Role


class UserRead(SQLModel):
    """Response schema returned to clients. Never carries the hash."""

    id: uuid.UUID
    email: EmailStr
    name: str | None = None
    image: str | None = None
    role: Role
    email_verified: datetime | None = None
    created_at: datetime


class UserUpdate(SQLModel):
    """
    Partial profile update for authenticated users.
    Only editable field is `name` here.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v
