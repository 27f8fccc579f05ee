# goodie/routers/products.py
import uuid

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from goodie.database import get_session
from goodie.repositories.cart_repo import CartRepository
from goodie.repositories.product_repo import ProductRepository
from goodie.repositories.rating_repo import RatingRepository
from goodie.repositories.wishlist_repo import WishlistRepository
from goodie.schemas.product import ProductDetail, ProductRead
from goodie.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
service = ProductService(repo, RatingRepository(), CartRepository(), WishlistRepository())


@router.get("", response_model=list[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
):
    """
    List products, newest first.

    - Public endpoint.
    """
    return service.list_products(session, skip=skip, limit=limit)


@router.get("/{product_id}", response_model=ProductDetail)
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Product page: the product, its ratings (newest first, with the
    reviewer's name and avatar) and the average rating.

    - Public endpoint.
    """
    return service.get_product_detail(session, product_id)
