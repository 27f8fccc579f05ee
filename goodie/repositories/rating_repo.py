# goodie/repositories/rating_repo.py
import uuid

from sqlalchemy import delete
from sqlmodel import Session, select

from goodie.models.rating import Rating
from goodie.models.user import User


class RatingRepository:

    def get_item(
        self, session: Session, user_id: uuid.UUID, product_id: uuid.UUID
    ) -> Rating | None:
        stmt = select(Rating).where(
            Rating.user_id == user_id, Rating.product_id == product_id
        )
        return session.exec(stmt).first()

    def list_for_product(
        self,
        session: Session,
        product_id: uuid.UUID,
    ) -> list[tuple[Rating, User]]:
        """Ratings with their authors, newest first."""
        stmt = (
            select(Rating, User)
            .join(User, User.id == Rating.user_id)
            .where(Rating.product_id == product_id)
            .order_by(Rating.created_at.desc())
        )
        return list(session.exec(stmt).all())

    def create(self, session: Session, rating: Rating) -> Rating:
        session.add(rating)
        session.commit()
        session.refresh(rating)
        return rating

    def update(self, session: Session, rating: Rating) -> Rating:
        session.add(rating)
        session.commit()
        session.refresh(rating)
        return rating

    def delete_for_product(self, session: Session, product_id: uuid.UUID) -> None:
        """Remove every rating of the product. Caller commits."""
        session.exec(delete(Rating).where(Rating.product_id == product_id))
