# goodie/services/product_service.py
import logging
import uuid

from sqlmodel import Session

from goodie.core.errors import NotFoundError, ValidationError
from goodie.core.image_host import ImageHost
from goodie.core.time import utc_now
from goodie.models.product import Product
from goodie.repositories.cart_repo import CartRepository
from goodie.repositories.product_repo import ProductRepository
from goodie.repositories.rating_repo import RatingRepository
from goodie.repositories.wishlist_repo import WishlistRepository
from goodie.schemas.product import (
    ProductDetail,
    ProductFormData,
    ProductRatingRead,
    ProductRead,
    RatingAuthor,
)

logger = logging.getLogger(__name__)


def average_rating(values: list[int]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


class ProductService:
    """
    Business logic for the catalog and admin product management.

    Responsibilities:
      - public listing and product page (with ratings)
      - admin create / update / delete
      - image upload/replace/delete orchestration with the image host
    """

    def __init__(
        self,
        repo: ProductRepository,
        rating_repo: RatingRepository,
        cart_repo: CartRepository,
        wishlist_repo: WishlistRepository,
    ):
        self.repo = repo
        self.rating_repo = rating_repo
        self.cart_repo = cart_repo
        self.wishlist_repo = wishlist_repo

    # ----- Public -----

    def list_products(self, session: Session, skip: int = 0, limit: int = 50) -> list[Product]:
        return self.repo.list(session, skip=skip, limit=limit)

    def get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    def get_product_detail(self, session: Session, product_id: uuid.UUID) -> ProductDetail:
        """
        Product page: product, reviews newest first with reviewer
        name/avatar, and the average rating.
        """
        product = self.get_product(session, product_id)
        rows = self.rating_repo.list_for_product(session, product_id)

        ratings = [
            ProductRatingRead(
                id=rating.id,
                value=rating.value,
                comment=rating.comment,
                created_at=rating.created_at,
                user=RatingAuthor(name=user.name, image=user.image),
            )
            for rating, user in rows
        ]

        return ProductDetail(
            **ProductRead.model_validate(product).model_dump(),
            ratings=ratings,
            average_rating=average_rating([r.value for r in ratings]),
            rating_count=len(ratings),
        )

    # ----- Admin -----

    def create_product(
        self,
        session: Session,
        image_host: ImageHost,
        form: ProductFormData,
        content_type: str | None,
        image_bytes: bytes | None,
    ) -> Product:
        """
        Create a product. An image is required.

        The image is uploaded first; if the row cannot be written the
        uploaded file is removed again.
        """
        if not image_bytes:
            raise ValidationError("Name, price, and image are required.")

        uploaded = image_host.upload(image_bytes, content_type)

        product = Product(
            name=form.name.strip(),
            description=form.description,
            price=form.price,
            image_url=uploaded.url,
            image_public_id=uploaded.public_id,
        )
        try:
            product = self.repo.create(session, product)
        except Exception:
            session.rollback()
            image_host.destroy(uploaded.public_id)
            raise

        logger.info("Product created: %s", product.id)
        return product

    def update_product(
        self,
        session: Session,
        image_host: ImageHost,
        product_id: uuid.UUID,
        form: ProductFormData,
        content_type: str | None = None,
        image_bytes: bytes | None = None,
    ) -> Product:
        """
        Replace name/description/price, and the image when a new one
        is sent. The previous image is destroyed once the row points
        at the new one; if the row cannot be written the new upload is
        removed instead.
        """
        product = self.get_product(session, product_id)
        old_public_id = None
        uploaded = None

        if image_bytes:
            uploaded = image_host.upload(image_bytes, content_type)
            old_public_id = product.image_public_id
            product.image_url = uploaded.url
            product.image_public_id = uploaded.public_id

        product.name = form.name.strip()
        product.description = form.description
        product.price = form.price
        product.updated_at = utc_now()
        try:
            product = self.repo.update(session, product)
        except Exception:
            session.rollback()
            if uploaded is not None:
                self._destroy_image(image_host, uploaded.public_id)
            raise

        if old_public_id:
            self._destroy_image(image_host, old_public_id)

        logger.info("Product updated: %s", product.id)
        return product

    def delete_product(
        self,
        session: Session,
        image_host: ImageHost,
        product_id: uuid.UUID,
    ) -> None:
        """
        Delete a product together with its cart, wishlist and rating
        rows, then remove its image from the host.
        """
        product = self.get_product(session, product_id)
        public_id = product.image_public_id

        self.cart_repo.delete_for_product(session, product_id)
        self.wishlist_repo.delete_for_product(session, product_id)
        self.rating_repo.delete_for_product(session, product_id)
        self.repo.delete(session, product)

        if public_id:
            self._destroy_image(image_host, public_id)

        logger.info("Product deleted: %s", product_id)

    @staticmethod
    def _destroy_image(image_host: ImageHost, public_id: str) -> None:
        # The row no longer references the file; an orphan is only logged
        try:
            image_host.destroy(public_id)
        except Exception:
            logger.exception("Failed to delete image %s from the image host", public_id)
