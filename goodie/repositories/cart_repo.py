# goodie/repositories/cart_repo.py
import uuid

from sqlalchemy import delete, update
from sqlmodel import Session, select

from goodie.models.cart import CartItem


class CartRepository:

    # Oldest first, the order items were added
    def list_for_user(self, session: Session, user_id: uuid.UUID) -> list[CartItem]:
        stmt = (
            select(CartItem)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.created_at)
        )
        return list(session.exec(stmt).all())

    def get_item(
        self, session: Session, user_id: uuid.UUID, product_id: uuid.UUID
    ) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.user_id == user_id, CartItem.product_id == product_id
        )
        return session.exec(stmt).first()

    # CRUD
    def create(self, session: Session, item: CartItem) -> CartItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def update(self, session: Session, item: CartItem) -> CartItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def increment_quantity(
        self,
        session: Session,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
        quantity: int,
    ) -> CartItem | None:
        """
        Add to the stored quantity in one UPDATE statement.

        Returns the refreshed row, or None if the user has no such line.
        """
        stmt = (
            update(CartItem)
            .where(CartItem.user_id == user_id, CartItem.product_id == product_id)
            .values(quantity=CartItem.quantity + quantity)
            .execution_options(synchronize_session=False)
        )
        result = session.exec(stmt)
        session.commit()
        if result.rowcount == 0:
            return None
        return self.get_item(session, user_id, product_id)

    def delete(self, session: Session, item: CartItem) -> None:
        session.delete(item)
        session.commit()

    def clear_user_cart(self, session: Session, user_id: uuid.UUID) -> None:
        session.exec(delete(CartItem).where(CartItem.user_id == user_id))
        session.commit()

    def delete_for_product(self, session: Session, product_id: uuid.UUID) -> None:
        """Remove the product from every cart. Caller commits."""
        session.exec(delete(CartItem).where(CartItem.product_id == product_id))
