# goodie/routers/cart.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from goodie.core.auth import require_session
from goodie.core.tokens import SessionClaims
from goodie.database import get_session
from goodie.repositories.cart_repo import CartRepository
from goodie.repositories.product_repo import ProductRepository
from goodie.schemas.auth import MessageResponse
from goodie.schemas.cart import (
    CartItemCreate,
    CartItemRead,
    CartItemUpdate,
    CartItemWithProduct,
)
from goodie.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])

cart_repo = CartRepository()
product_repo = ProductRepository()
service = CartService(cart_repo, product_repo)


@router.get("/items", response_model=list[CartItemWithProduct])
def get_my_cart(
    session: Session = Depends(get_session),
    claims: SessionClaims = Depends(require_session),
):
    """
    Current user's cart lines with product details and line totals.

    Auth:
      - Any signed-in user.
    """
    return service.list_items(session, claims.subject)


@router.post("", response_model=CartItemRead)
def add_to_cart(
    payload: CartItemCreate,
    session: Session = Depends(get_session),
    claims: SessionClaims = Depends(require_session),
):
    """
    Add product to the current user's cart.

    Adding a product that is already in the cart increases its quantity.
    """
    return service.add_to_cart(session, claims.subject, payload)


@router.patch("/{product_id}", response_model=CartItemRead)
def update_cart_item(
    product_id: uuid.UUID,
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
    claims: SessionClaims = Depends(require_session),
):
    """
    Set the quantity of a product in the cart.
    """
    return service.update_quantity(
        session=session,
        user_id=claims.subject,
        product_id=product_id,
        payload=payload,
    )


@router.delete("/{product_id}", response_model=MessageResponse)
def remove_cart_item(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    claims: SessionClaims = Depends(require_session),
):
    """
    Remove a product from the cart.
    """
    service.remove_item(session, claims.subject, product_id)
    return MessageResponse(message="Item removed from cart")


@router.delete("", response_model=MessageResponse)
def clear_cart(
    session: Session = Depends(get_session),
    claims: SessionClaims = Depends(require_session),
):
    """
    Clear the entire cart.
    """
    service.clear_cart(session, claims.subject)
    return MessageResponse(message="Cart cleared")
