# goodie/schemas/auth.py
import uuid
from datetime import datetime

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from goodie.models.user import Role
from goodie.schemas.user import UserRead

GENERIC_RESET_MESSAGE = (
    "If an account with that email exists, a password reset link has been sent."
)


class RegisterRequest(SQLModel):
    """
    Payload for credential registration.

    Password length is checked by the service so a short password is a
    400, not a schema error.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    email: EmailStr
    password: str

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class RegisterResponse(SQLModel):
    message: str
    user: UserRead


class LoginRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    # Plain str: a malformed email fails like any other bad credential
    email: str
    password: str


class Identity(SQLModel):
    """Identity payload produced by a successful sign-in."""

    id: uuid.UUID
    name: str | None = None
    email: str
    image: str | None = None
    role: Role


class LoginResponse(SQLModel):
    user: Identity
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime


class SessionRead(SQLModel):
    subject: uuid.UUID
    role: Role
    issued_at: datetime
    expires_at: datetime


class ForgotPasswordRequest(SQLModel):
    email: EmailStr


class ResetPasswordRequest(SQLModel):
    token: str = Field(min_length=1)
    password: str


class MessageResponse(SQLModel):
    message: str
