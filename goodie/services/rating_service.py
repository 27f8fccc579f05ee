# goodie/services/rating_service.py
import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from goodie.core.errors import NotFoundError
from goodie.core.time import utc_now
from goodie.models.rating import Rating
from goodie.repositories.product_repo import ProductRepository
from goodie.repositories.rating_repo import RatingRepository
from goodie.schemas.rating import RatingCreate

logger = logging.getLogger(__name__)


class RatingService:

    def __init__(self, rating_repo: RatingRepository, product_repo: ProductRepository):
        self.rating_repo = rating_repo
        self.product_repo = product_repo

    def _overwrite(self, session: Session, rating: Rating, payload: RatingCreate) -> Rating:
        rating.value = payload.value
        rating.comment = payload.comment
        rating.updated_at = utc_now()
        return self.rating_repo.update(session, rating)

    def rate(self, session: Session, user_id: uuid.UUID, payload: RatingCreate) -> Rating:
        """
        Create or replace the user's rating of a product.
        """
        if self.product_repo.get_by_id(session, payload.product_id) is None:
            raise NotFoundError("Product not found")

        existing = self.rating_repo.get_item(session, user_id, payload.product_id)
        if existing:
            rating = self._overwrite(session, existing, payload)
        else:
            try:
                rating = self.rating_repo.create(
                    session,
                    Rating(
                        user_id=user_id,
                        product_id=payload.product_id,
                        value=payload.value,
                        comment=payload.comment,
                    ),
                )
            except IntegrityError:
                session.rollback()
                existing = self.rating_repo.get_item(session, user_id, payload.product_id)
                if existing is None:
                    raise
                rating = self._overwrite(session, existing, payload)

        logger.info(
            "User %s rated product %s with %d stars",
            user_id,
            payload.product_id,
            payload.value,
        )
        return rating
