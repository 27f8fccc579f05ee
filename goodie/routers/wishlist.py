# goodie/routers/wishlist.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from goodie.core.auth import require_session
from goodie.core.tokens import SessionClaims
from goodie.database import get_session
from goodie.repositories.product_repo import ProductRepository
from goodie.repositories.wishlist_repo import WishlistRepository
from goodie.schemas.auth import MessageResponse
from goodie.schemas.wishlist import (
    WishlistItemCreate,
    WishlistItemRead,
    WishlistItemWithProduct,
)
from goodie.services.wishlist_service import WishlistService

router = APIRouter(prefix="/wishlist", tags=["Wishlist"])

service = WishlistService(WishlistRepository(), ProductRepository())


@router.get("/items", response_model=list[WishlistItemWithProduct])
def get_my_wishlist(
    session: Session = Depends(get_session),
    claims: SessionClaims = Depends(require_session),
):
    """Saved products, most recently added first."""
    return service.list_items(session, claims.subject)


@router.post(
    "",
    response_model=WishlistItemRead,
    status_code=status.HTTP_201_CREATED,
)
def add_to_wishlist(
    payload: WishlistItemCreate,
    session: Session = Depends(get_session),
    claims: SessionClaims = Depends(require_session),
):
    """
    Save a product. Saving it twice keeps a single entry.
    """
    return service.add(session, claims.subject, payload.product_id)


@router.delete("/{product_id}", response_model=MessageResponse)
def remove_from_wishlist(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    claims: SessionClaims = Depends(require_session),
):
    service.remove(session, claims.subject, product_id)
    return MessageResponse(message="Item removed from wishlist")
