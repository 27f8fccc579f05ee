# goodie/routers/checkout.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from goodie.core.auth import require_session
from goodie.core.tokens import SessionClaims
from goodie.database import get_session
from goodie.repositories.cart_repo import CartRepository
from goodie.repositories.product_repo import ProductRepository
from goodie.schemas.cart import CheckoutSummary
from goodie.services.cart_service import CartService

router = APIRouter(prefix="/checkout", tags=["Checkout"])

service = CartService(CartRepository(), ProductRepository())


@router.get("", response_model=CheckoutSummary)
def checkout_summary(
    session: Session = Depends(get_session),
    claims: SessionClaims = Depends(require_session),
):
    """
    Order summary for the checkout page.

    No order is created and nothing is charged.
    """
    return service.checkout_summary(session, claims.subject)
