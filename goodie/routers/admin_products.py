# goodie/routers/admin_products.py
import uuid

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    UploadFile,
    status,
)
from pydantic import ValidationError as PydanticValidationError
from sqlmodel import Session

from goodie.core.auth import require_admin
from goodie.core.errors import ValidationError
from goodie.core.image_host import MAX_IMAGE_BYTES, ImageHost, get_image_host
from goodie.database import get_session
from goodie.repositories.cart_repo import CartRepository
from goodie.repositories.product_repo import ProductRepository
from goodie.repositories.rating_repo import RatingRepository
from goodie.repositories.wishlist_repo import WishlistRepository
from goodie.schemas.auth import MessageResponse
from goodie.schemas.product import ProductFormData, ProductRead
from goodie.services.product_service import ProductService

# The route guard already redirects non-admins away from this prefix;
# require_admin keeps the router safe when mounted without it.
router = APIRouter(
    prefix="/admin/products",
    tags=["Admin Products"],
    dependencies=[Depends(require_admin)],
)

repo = ProductRepository()
service = ProductService(repo, RatingRepository(), CartRepository(), WishlistRepository())


def _form_data(name: str, price: str, description: str | None) -> ProductFormData:
    """
    Validate multipart text fields.

    Multipart bodies arrive as strings; a bad price or blank name is a
    400 with a readable message rather than a schema error.
    """
    try:
        return ProductFormData(
            name=name.strip(),
            price=price,
            description=(description or "").strip() or None,
        )
    except PydanticValidationError:
        raise ValidationError("Name is required and price must be a positive number.")


def _read_upload(image: UploadFile | None) -> tuple[str | None, bytes | None]:
    if image is None or not image.filename:
        return None, None
    # One byte past the limit is enough for validate_image to reject it
    return image.content_type, image.file.read(MAX_IMAGE_BYTES + 1)


@router.get("", response_model=list[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
):
    """
    List all products for the admin dashboard (admin only).
    """
    return service.list_products(session, skip=skip, limit=limit)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a single product for the edit form (admin only).
    """
    return service.get_product(session, product_id)


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    name: str = Form(...),
    price: str = Form(...),
    description: str | None = Form(None),
    image: UploadFile | None = File(None),
    session: Session = Depends(get_session),
    image_host: ImageHost = Depends(get_image_host),
):
    """
    Create a product from a multipart form (admin only).

    - name, price and image are required.
    - Accepts JPEG, PNG, WEBP up to 5MB.
    """
    form = _form_data(name, price, description)
    content_type, image_bytes = _read_upload(image)
    return service.create_product(session, image_host, form, content_type, image_bytes)


@router.put("/{product_id}", response_model=ProductRead)
def update_product(
    product_id: uuid.UUID,
    name: str = Form(...),
    price: str = Form(...),
    description: str | None = Form(None),
    image: UploadFile | None = File(None),
    session: Session = Depends(get_session),
    image_host: ImageHost = Depends(get_image_host),
):
    """
    Update a product (admin only).

    - Sending a new image replaces the stored one; the old file is
      removed from the image host.
    - Without an image, the current image is kept.
    """
    form = _form_data(name, price, description)
    content_type, image_bytes = _read_upload(image)
    return service.update_product(
        session,
        image_host,
        product_id,
        form,
        content_type=content_type,
        image_bytes=image_bytes,
    )


@router.delete("/{product_id}", response_model=MessageResponse)
def delete_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    image_host: ImageHost = Depends(get_image_host),
):
    """
    Delete a product, its cart/wishlist/rating rows and its image (admin only).
    """
    service.delete_product(session, image_host, product_id)
    return MessageResponse(message="Product deleted successfully")
