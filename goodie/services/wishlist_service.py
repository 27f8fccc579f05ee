# goodie/services/wishlist_service.py
import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from goodie.core.errors import NotFoundError
from goodie.models.wishlist import WishlistItem
from goodie.repositories.product_repo import ProductRepository
from goodie.repositories.wishlist_repo import WishlistRepository
from goodie.schemas.product import ProductRead
from goodie.schemas.wishlist import WishlistItemWithProduct

logger = logging.getLogger(__name__)


class WishlistService:

    def __init__(self, wishlist_repo: WishlistRepository, product_repo: ProductRepository):
        self.wishlist_repo = wishlist_repo
        self.product_repo = product_repo

    def list_items(self, session: Session, user_id: uuid.UUID) -> list[WishlistItemWithProduct]:
        items = self.wishlist_repo.list_for_user(session, user_id)
        products = self.product_repo.get_many(session, [it.product_id for it in items])

        return [
            WishlistItemWithProduct(
                id=it.id,
                user_id=it.user_id,
                product_id=it.product_id,
                created_at=it.created_at,
                product=ProductRead.model_validate(products[it.product_id]),
            )
            for it in items
            if it.product_id in products
        ]

    def add(self, session: Session, user_id: uuid.UUID, product_id: uuid.UUID) -> WishlistItem:
        """
        Save a product. Adding it again returns the existing row.
        """
        if self.product_repo.get_by_id(session, product_id) is None:
            raise NotFoundError("Product not found")

        existing = self.wishlist_repo.get_item(session, user_id, product_id)
        if existing:
            return existing

        try:
            item = self.wishlist_repo.create(
                session, WishlistItem(user_id=user_id, product_id=product_id)
            )
        except IntegrityError:
            # Concurrent add already created it
            session.rollback()
            item = self.wishlist_repo.get_item(session, user_id, product_id)
            if item is None:
                raise

        logger.info("Wishlist item added: product %s, user %s", product_id, user_id)
        return item

    def remove(self, session: Session, user_id: uuid.UUID, product_id: uuid.UUID) -> None:
        item = self.wishlist_repo.get_item(session, user_id, product_id)
        if not item:
            raise NotFoundError("Item not found in wishlist.")

        self.wishlist_repo.delete(session, item)
        logger.info("Wishlist item removed: product %s, user %s", product_id, user_id)
