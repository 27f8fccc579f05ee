# goodie/models/product.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Product catalog entry for Goodie.

    The image lives on the image host; image_public_id is the host's
    identifier, needed to destroy the file when it is replaced or the
    product is deleted.
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=255,
        index=True,
        description="Display name of the product",
    )

    description: str | None = Field(
        default=None,
        description="Optional long description",
    )

    price: float = Field(
        gt=0,
        description="Unit price",
    )

    image_url: str | None = Field(
        default=None,
        description="Public URL on the image host",
    )

    image_public_id: str | None = Field(
        default=None,
        description="Image host identifier for the current image",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last update timestamp (UTC)",
    )
