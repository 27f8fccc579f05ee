# goodie/schemas/product.py
import uuid
from datetime import datetime

from pydantic import ConfigDict
from sqlmodel import SQLModel, Field


class ProductRead(SQLModel):
    """
    Product representation for clients.
    """

    id: uuid.UUID
    name: str
    description: str | None = None
    price: float
    image_url: str | None = None
    created_at: datetime
    updated_at: datetime


class RatingAuthor(SQLModel):
    name: str | None = None
    image: str | None = None


class ProductRatingRead(SQLModel):
    id: uuid.UUID
    value: int
    comment: str | None = None
    created_at: datetime
    user: RatingAuthor


class ProductDetail(ProductRead):
    """
    Product page payload: product, its reviews (newest first) and the
    average rating (0 when there are no reviews).
    """

    ratings: list[ProductRatingRead]
    average_rating: float
    rating_count: int


class ProductFormData(SQLModel):
    """
    Validated multipart fields for admin create/update.

    The image itself is handled separately as an UploadFile.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    price: float = Field(gt=0)
