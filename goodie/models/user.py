# goodie/models/user.py
import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Column, Enum as SAEnum, UniqueConstraint
from sqlmodel import SQLModel, Field


class Role(str, Enum):
    """
    Application role.

    "guest" is represented by the absence of a session token.
    """

    STANDARD = "standard"
    ADMIN = "admin"


class User(SQLModel, table=True):
    """
    Persistent user record for Goodie.

    Password:
      - password_hash is None for accounts created through a federated
        provider; those accounts cannot use the credential login.

    Password reset:
      - password_reset_token holds the SHA-256 digest of the live token
      - at most one live token per user (reissuing overwrites)

    Role:
      - "standard" | "admin", assigned out of band (promote_admin.py)
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    email: str = Field(
        unique=True,
        index=True,
        description="Login email (unique)",
    )

    name: str | None = Field(
        default=None,
        max_length=100,
        description="Display name; first part of email by default",
    )

    image: str | None = Field(
        default=None,
        description="Avatar URL (usually from the identity provider)",
    )

    password_hash: str | None = Field(
        default=None,
        description="bcrypt digest, absent for federated-only accounts",
    )

    email_verified: datetime | None = Field(
        default=None,
        description="When the email was verified by an identity provider",
    )

    role: Role = Field(
        default=Role.STANDARD,
        sa_column=Column(
            SAEnum(
                Role,
                name="user_role",
                values_callable=lambda roles: [r.value for r in roles],
            ),
            nullable=False,
            index=True,
        ),
    )

    password_reset_token: str | None = Field(
        default=None,
        index=True,
        description="SHA-256 digest of the live reset token",
    )

    password_reset_token_expiry: datetime | None = Field(
        default=None,
        description="Absolute expiry of the live reset token (UTC)",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last update timestamp (UTC)",
    )


class LinkedIdentity(SQLModel, table=True):
    """
    Federated account link: one (provider, provider_account_id) pair
    belongs to at most one user.
    """

    __tablename__ = "linked_identities"
    __table_args__ = (
        UniqueConstraint(
            "provider",
            "provider_account_id",
            name="uq_linked_identity_provider_account",
        ),
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    provider: str = Field(max_length=50)
    provider_account_id: str = Field(max_length=255)

    # Opaque provider tokens
    access_token: str | None = None
    refresh_token: str | None = None
    expires_at: int | None = Field(
        default=None,
        description="Provider token expiry (epoch seconds)",
    )
    token_type: str | None = None
    scope: str | None = None
    id_token: str | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
