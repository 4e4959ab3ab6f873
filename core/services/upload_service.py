# =============================================================================
# core/services/upload_service.py - Multipart Media Uploads
# =============================================================================
# Small files (recordings, images) are posted to the API and written to
# storage with the service key:
#
#   audio          -> audio/{business_id}_{content_id}.{ext}
#   image          -> images/{business_id}_{content_id}_{image_type}.{ext}
#   image replace  -> images/{asset_id}_{content_type}.{ext}
#
# Every file is checked (type, size, magic bytes) before it is stored.
# Large videos bypass this and go straight to storage over TUS
# (see video_upload_service.py).
# =============================================================================

import logging
import time
from typing import Any

from lib.file_validation import FileCategory, sanitize_filename, validate_file
from lib.supabase_client import SupabaseClient
from core.services.asset_service import AssetService
from core.services.storage_service import AUDIO_BUCKET, IMAGES_BUCKET, StorageService
from app.exceptions import (
    AccessDeniedError,
    ContentAssetNotFoundError,
    InvalidFileError,
)

logger = logging.getLogger(__name__)

DEFAULT_AUDIO_MIME_TYPE = "audio/webm"
DEFAULT_IMAGE_MIME_TYPE = "image/jpeg"


def _check_business(caller_business_id: str, business_id: str) -> None:
    if str(caller_business_id) != str(business_id):
        logger.warning(f"Business {caller_business_id} tried to upload for {business_id}")
        raise AccessDeniedError("business")


def _validated_extension(
    content: bytes,
    mime_type: str,
    category: FileCategory,
    filename: str | None,
) -> str:
    result = validate_file(content, mime_type, category)
    if not result.valid:
        raise InvalidFileError(result.error, filename=filename)
    return result.extension


class UploadService:
    """Validates and stores uploaded media."""

    @staticmethod
    def upload_audio(
        caller_business_id: str,
        business_id: str,
        content_id: str,
        content: bytes,
        mime_type: str | None,
        filename: str | None = None,
    ) -> dict[str, Any]:
        """
        Store a voice recording.

        Returns:
            {"success": True, "path": ..., "publicUrl": ...}
        """
        _check_business(caller_business_id, business_id)

        mime_type = mime_type or DEFAULT_AUDIO_MIME_TYPE
        extension = _validated_extension(content, mime_type, "audio", filename)
        path = f"{business_id}_{content_id}.{extension}"

        StorageService.upload_file(AUDIO_BUCKET, path, content, mime_type)
        return {
            "success": True,
            "path": path,
            "publicUrl": StorageService.get_public_url(AUDIO_BUCKET, path),
        }

    @staticmethod
    def upload_image(
        caller_business_id: str,
        business_id: str,
        content_id: str,
        content: bytes,
        mime_type: str | None,
        image_type: str | None = None,
        filename: str | None = None,
    ) -> dict[str, Any]:
        """Store an image for a content item; image_type defaults to blog."""
        _check_business(caller_business_id, business_id)

        mime_type = mime_type or DEFAULT_IMAGE_MIME_TYPE
        extension = _validated_extension(content, mime_type, "image", filename)
        image_type = sanitize_filename(image_type or "") or "blog"
        path = f"{business_id}_{content_id}_{image_type}.{extension}"

        StorageService.upload_file(IMAGES_BUCKET, path, content, mime_type)
        return {
            "success": True,
            "path": path,
            "publicUrl": StorageService.get_public_url(IMAGES_BUCKET, path),
        }

    @staticmethod
    def replace_asset_image(
        caller_business_id: str,
        asset_id: str,
        content_type: str,
        content: bytes,
        mime_type: str | None,
        filename: str | None = None,
    ) -> dict[str, Any]:
        """
        Replace an asset's image with an uploaded file.

        The stored URL gets a ?v= cache buster so the new image shows up
        immediately.

        Returns:
            {"success": True, "imageUrl": ..., "contentAsset": {...}}
        """
        AssetService.get_owned_asset(asset_id, caller_business_id)

        mime_type = mime_type or DEFAULT_IMAGE_MIME_TYPE
        extension = _validated_extension(content, mime_type, "image", filename)
        path = f"{asset_id}_{sanitize_filename(content_type)}.{extension}"

        StorageService.upload_file(IMAGES_BUCKET, path, content, mime_type)
        image_url = f"{StorageService.get_public_url(IMAGES_BUCKET, path)}?v={int(time.time() * 1000)}"

        updated = SupabaseClient.update_content_asset(asset_id, {"image_url": image_url})
        if not updated:
            raise ContentAssetNotFoundError(asset_id)

        logger.info(f"Replaced image for asset {asset_id}")
        return {"success": True, "imageUrl": image_url, "contentAsset": updated}
