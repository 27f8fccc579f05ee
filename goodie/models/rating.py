# goodie/models/rating.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class Rating(SQLModel, table=True):
    """
    A user's star rating (1-5) and optional review for a product.

    Re-rating a product updates the existing row.
    """

    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_rating_user_product"),
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

    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        index=True,
    )

    value: int = Field(
        ge=1,
        le=5,
        description="Star rating 1-5",
    )

    comment: str | None = Field(
        default=None,
        description="Optional review text",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
