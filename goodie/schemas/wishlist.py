# goodie/schemas/wishlist.py
import uuid
from datetime import datetime

from sqlmodel import SQLModel

from goodie.schemas.product import ProductRead


class WishlistItemCreate(SQLModel):
    product_id: uuid.UUID


class WishlistItemRead(SQLModel):
    id: uuid.UUID
    user_id: uuid.UUID
    product_id: uuid.UUID
    created_at: datetime


class WishlistItemWithProduct(WishlistItemRead):
    product: ProductRead
