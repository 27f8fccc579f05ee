# goodie/core/image_host.py
import uuid
from dataclasses import dataclass
from functools import lru_cache

from supabase import Client

from goodie.core.config import get_settings
from goodie.core.errors import AppError, ValidationError
from goodie.core.supabase_client import supabase_admin

MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB per image

ALLOWED_IMAGE_CONTENT_TYPES: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}

PRODUCT_FOLDER = "products"


class ImageTooLargeError(AppError):
    status_code = 413
    default_detail = "Image too large (max 5MB)."


@dataclass(frozen=True)
class UploadedImage:
    url: str
    public_id: str


def validate_image(content_type: str | None, file_bytes: bytes) -> str:
    """
    Check content type and size of an uploaded image.

    Returns:
        The file extension to store it under (e.g. "png").
    """
    if not content_type or content_type not in ALLOWED_IMAGE_CONTENT_TYPES:
        raise ValidationError("Unsupported image type. Allowed: JPEG, PNG, WEBP.")

    if not file_bytes:
        raise ValidationError("Image file is empty.")

    if len(file_bytes) > MAX_IMAGE_BYTES:
        raise ImageTooLargeError()

    return ALLOWED_IMAGE_CONTENT_TYPES[content_type]


class ImageHost:
    """
    Product image storage on Supabase Storage.

    upload() takes raw bytes and returns the public URL plus an opaque
    public_id (the object path inside the bucket); destroy() takes that
    public_id back.
    """

    def __init__(self, client: Client, bucket: str):
        self.client = client
        self.bucket = bucket

    def upload(self, file_bytes: bytes, content_type: str, folder: str = PRODUCT_FOLDER) -> UploadedImage:
        """
        Validate and upload an image to a random filename.

        Path pattern:
            <folder>/<uuid4>.<ext>

        Raises:
            ValidationError / ImageTooLargeError for bad input, or any
            exception raised by the Supabase client if upload fails.
        """
        ext = validate_image(content_type, file_bytes)
        path = f"{folder}/{uuid.uuid4()}.{ext}"

        storage = self.client.storage.from_(self.bucket)
        storage.upload(path, file_bytes, {"content-type": content_type, "upsert": "true"})
        return UploadedImage(url=storage.get_public_url(path), public_id=path)

    def destroy(self, public_id: str) -> None:
        """Delete a stored image by its public_id."""
        self.client.storage.from_(self.bucket).remove([public_id])


@lru_cache
def get_image_host() -> ImageHost:
    """Process-wide image host, built on first use."""
    return ImageHost(supabase_admin(), get_settings().SUPABASE_STORAGE_BUCKET)
