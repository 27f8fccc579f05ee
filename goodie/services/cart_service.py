# goodie/services/cart_service.py
import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from goodie.core.errors import NotFoundError
from goodie.models.cart import CartItem
from goodie.models.product import Product
from goodie.repositories.cart_repo import CartRepository
from goodie.repositories.product_repo import ProductRepository
from goodie.schemas.cart import (
    CartItemCreate,
    CartItemUpdate,
    CartItemWithProduct,
    CheckoutSummary,
)
from goodie.schemas.product import ProductRead

logger = logging.getLogger(__name__)

# Checkout is a preview only; shipping is free for now
SHIPPING_FLAT_RATE = 0.0


class CartService:
    """
    Business logic for cart operations.

    Responsibilities:
      - validate product existence
      - add-or-increase with the (user, product) unique key
      - expose items with live product data and line totals
      - checkout summary (no order is created)
    """

    def __init__(self, cart_repo: CartRepository, product_repo: ProductRepository):
        self.cart_repo = cart_repo
        self.product_repo = product_repo

    # ---- internal helpers ----

    def _get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.product_repo.get_by_id(session, product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    # ---- public operations ----

    def list_items(self, session: Session, user_id: uuid.UUID) -> list[CartItemWithProduct]:
        """
        Cart lines in the order they were added, each with its product
        and line_total. Lines whose product disappeared are skipped.
        """
        items = self.cart_repo.list_for_user(session, user_id)
        products = self.product_repo.get_many(session, [it.product_id for it in items])

        lines: list[CartItemWithProduct] = []
        for it in items:
            product = products.get(it.product_id)
            if product is None:
                continue
            lines.append(
                CartItemWithProduct(
                    id=it.id,
                    user_id=it.user_id,
                    product_id=it.product_id,
                    quantity=it.quantity,
                    created_at=it.created_at,
                    product=ProductRead.model_validate(product),
                    line_total=it.quantity * product.price,
                )
            )
        return lines

    def add_to_cart(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: CartItemCreate,
    ) -> CartItem:
        """
        Add a product to the user's cart, or increase its quantity.

        The increase happens in SQL, so concurrent adds of the same
        product all count. A near-simultaneous first add hits the
        unique key; the losing request adds its quantity to the row
        that won instead of failing.
        """
        self._get_product(session, payload.product_id)

        item = self.cart_repo.increment_quantity(
            session, user_id, payload.product_id, payload.quantity
        )
        if item is not None:
            logger.info("Cart quantity updated: product %s, user %s", payload.product_id, user_id)
            return item

        try:
            item = self.cart_repo.create(
                session,
                CartItem(
                    user_id=user_id,
                    product_id=payload.product_id,
                    quantity=payload.quantity,
                ),
            )
        except IntegrityError:
            session.rollback()
            item = self.cart_repo.increment_quantity(
                session, user_id, payload.product_id, payload.quantity
            )
            if item is None:
                raise

        logger.info("Cart item added: product %s, user %s", payload.product_id, user_id)
        return item

    def update_quantity(
        self,
        session: Session,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
        payload: CartItemUpdate,
    ) -> CartItem:
        """
        Set the quantity of an item already in the cart.
        """
        item = self.cart_repo.get_item(session, user_id, product_id)
        if not item:
            raise NotFoundError("Item not in cart")

        item.quantity = payload.quantity
        return self.cart_repo.update(session, item)

    def remove_item(
        self,
        session: Session,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
    ) -> None:
        item = self.cart_repo.get_item(session, user_id, product_id)
        if not item:
            raise NotFoundError("Item not found in cart")

        self.cart_repo.delete(session, item)

    def clear_cart(self, session: Session, user_id: uuid.UUID) -> None:
        self.cart_repo.clear_user_cart(session, user_id)

    def checkout_summary(self, session: Session, user_id: uuid.UUID) -> CheckoutSummary:
        lines = self.list_items(session, user_id)
        subtotal = sum(line.line_total for line in lines)
        shipping = SHIPPING_FLAT_RATE if lines else 0.0

        return CheckoutSummary(
            items=lines,
            total_quantity=sum(line.quantity for line in lines),
            subtotal=subtotal,
            shipping=shipping,
            total=subtotal + shipping,
        )
