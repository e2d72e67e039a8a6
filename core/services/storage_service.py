# =============================================================================
# core/services/storage_service.py - Supabase Storage Operations
# =============================================================================
# Validates listing photos and uploads them to Supabase Storage.
# Images are stored under listings/{user_id}/{uuid}.{ext} in the public
# IMAGE_BUCKET and referenced from food_listings.image_url.
# =============================================================================

import logging
import mimetypes
from uuid import UUID, uuid4

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid
from app.config import settings
from app.exceptions import FileTooLargeError, InvalidFileTypeError, StorageUploadError

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}


class StorageService:
    """
    Service for Supabase Storage operations.

    Handles validating and uploading listing images.
    """

    @staticmethod
    def validate_image(content: bytes, content_type: str | None) -> str:
        """
        Check an uploaded image against the allowed types and size limit.

        Args:
            content: Image bytes
            content_type: MIME type reported by the client

        Returns:
            The normalized MIME type

        Raises:
            InvalidFileTypeError: If the type isn't allowed
            FileTooLargeError: If the image exceeds MAX_IMAGE_SIZE_MB
        """
        allowed = settings.allowed_image_types_list
        mime = (content_type or "").split(";")[0].strip().lower()

        if mime not in allowed:
            raise InvalidFileTypeError(mime or "unknown", allowed)

        if len(content) > settings.max_image_size_bytes:
            size_mb = len(content) / (1024 * 1024)
            raise FileTooLargeError(size_mb, settings.MAX_IMAGE_SIZE_MB)

        return mime

    @staticmethod
    def upload_image(
        user_id: str | UUID,
        content: bytes,
        content_type: str,
        filename: str | None = None,
    ) -> str:
        """
        Upload a listing image and return its public URL.

        Args:
            user_id: Uploader, used in the storage path
            content: Image bytes
            content_type: MIME type
            filename: Original filename (only used to guess the extension)

        Returns:
            Public URL of the stored image

        Raises:
            StorageUploadError: If upload fails
        """
        client = SupabaseClient.get_client()

        ext = _EXTENSIONS.get(content_type)
        if not ext and filename and "." in filename:
            ext = filename.rsplit(".", 1)[-1].lower()
        if not ext:
            ext = (mimetypes.guess_extension(content_type) or ".bin").lstrip(".")

        path = f"listings/{normalize_uuid(user_id)}/{uuid4()}.{ext}"
        bucket = client.storage.from_(settings.IMAGE_BUCKET)

        try:
            bucket.upload(
                path=path,
                file=content,
                file_options={"content-type": content_type, "upsert": "false"}
            )
            url = bucket.get_public_url(path)

            logger.info(f"Uploaded image to storage: {path}")
            return url

        except Exception as e:
            logger.error(f"Storage upload failed: {e}")
            raise StorageUploadError(str(e))

    @staticmethod
    def delete_image(public_url: str) -> bool:
        """
        Remove an image previously returned by upload_image.

        Used to clean up after a listing insert fails. Failures are logged,
        not raised, so the original error reaches the caller.

        Returns:
            True if the object was removed
        """
        marker = f"/object/public/{settings.IMAGE_BUCKET}/"
        if marker not in public_url:
            logger.warning(f"Not an image bucket URL, skipping delete: {public_url}")
            return False

        path = public_url.split(marker, 1)[1].split("?", 1)[0]
        try:
            client = SupabaseClient.get_client()
            client.storage.from_(settings.IMAGE_BUCKET).remove([path])
        except Exception as e:
            logger.warning(f"Failed to delete orphaned image {path}: {e}")
            return False

        logger.info(f"Deleted image from storage: {path}")
        return True
