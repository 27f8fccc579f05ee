# goodie/repositories/wishlist_repo.py
import uuid

from sqlalchemy import delete
from sqlmodel import Session, select

from goodie.models.wishlist import WishlistItem


class WishlistRepository:

    def list_for_user(self, session: Session, user_id: uuid.UUID) -> list[WishlistItem]:
        stmt = (
            select(WishlistItem)
            .where(WishlistItem.user_id == user_id)
            .order_by(WishlistItem.created_at.desc())
        )
        return list(session.exec(stmt).all())

    def get_item(
        self, session: Session, user_id: uuid.UUID, product_id: uuid.UUID
    ) -> WishlistItem | None:
        stmt = select(WishlistItem).where(
            WishlistItem.user_id == user_id, WishlistItem.product_id == product_id
        )
        return session.exec(stmt).first()

    def create(self, session: Session, item: WishlistItem) -> WishlistItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def delete(self, session: Session, item: WishlistItem) -> None:
        session.delete(item)
        session.commit()

    def delete_for_product(self, session: Session, product_id: uuid.UUID) -> None:
        """Remove the product from every wishlist. Caller commits."""
        session.exec(delete(WishlistItem).where(WishlistItem.product_id == product_id))
