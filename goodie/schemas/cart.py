# goodie/schemas/cart.py
import uuid
from datetime import datetime

from sqlmodel import SQLModel, Field

from goodie.schemas.product import ProductRead


class CartItemCreate(SQLModel):
    """
    Payload for adding to cart. Adding a product already in the cart
    increases its quantity.
    """

    product_id: uuid.UUID
    quantity: int = Field(default=1, gt=0)


class CartItemUpdate(SQLModel):
    """
    Payload for updating quantity of a cart item.
    """

    quantity: int = Field(gt=0)


class CartItemRead(SQLModel):
    id: uuid.UUID
    user_id: uuid.UUID
    product_id: uuid.UUID
    quantity: int
    created_at: datetime


class CartItemWithProduct(CartItemRead):
    """
    Cart line with live product details and line_total.
    """

    product: ProductRead
    line_total: float


class CheckoutSummary(SQLModel):
    """
    Checkout preview: no order is created and no payment is taken.
    """

    items: list[CartItemWithProduct]
    total_quantity: int
    subtotal: float
    shipping: float
    total: float
