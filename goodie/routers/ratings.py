# goodie/routers/ratings.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from goodie.core.auth import require_session
from goodie.core.tokens import SessionClaims
from goodie.database import get_session
from goodie.repositories.product_repo import ProductRepository
from goodie.repositories.rating_repo import RatingRepository
from goodie.schemas.rating import RatingCreate, RatingRead
from goodie.services.rating_service import RatingService

router = APIRouter(prefix="/ratings", tags=["Ratings"])

service = RatingService(RatingRepository(), ProductRepository())


@router.post("", response_model=RatingRead, status_code=status.HTTP_201_CREATED)
def rate_product(
    payload: RatingCreate,
    session: Session = Depends(get_session),
    claims: SessionClaims = Depends(require_session),
):
    """
    Rate a product (1-5 stars, optional comment).

    One rating per user and product; rating again replaces it.
    """
    return service.rate(session, claims.subject, payload)
