# =============================================================================
# core/services/asset_service.py - Content Asset Operations
# =============================================================================
# Generated assets (blog posts, emails, social posts) are reviewed by the
# user before publication:
# - Editing the image URL / prompt
# - Promoting or discarding a regenerated "temporary" image
# - Approval and per-asset scheduling
# - Requesting a new image from the image regeneration workflow
#
# Ownership is resolved through the parent content row's business_id.
# =============================================================================

import logging
import re
import time
from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.parse import urlparse

import httpx

from lib.supabase_client import SupabaseClient
from lib.n8n import N8nClient, N8nError, N8nNotConfiguredError
from lib.content_status import can_schedule_content
from core.models.content import ContentAssetUpdateRequest
from core.services.storage_service import IMAGES_BUCKET, StorageService
from app.config import settings
from app.exceptions import (
    AccessDeniedError,
    ContentAssetNotFoundError,
    InvalidRequestError,
    RateLimitExceededError,
    StorageUploadError,
    TransformoException,
)

logger = logging.getLogger(__name__)

IMAGE_DOWNLOAD_TIMEOUT = 30.0
_IMAGE_EXTENSION = re.compile(r"\.(jpg|jpeg|png|webp|gif)$", re.IGNORECASE)

# Columns returned to the asset editor
ASSET_COLUMNS = (
    "id, content_id, content_type, image_url, temporary_image_url, "
    "image_prompt, headline, content, created_at"
)


def _cache_busted(url: str) -> str:
    """Append a millisecond version so browsers drop the old image."""
    return f"{url}?v={int(time.time() * 1000)}"


def image_extension_from_url(url: str) -> str:
    """File extension of an image URL's path, defaulting to jpg."""
    match = _IMAGE_EXTENSION.search(urlparse(url).path)
    return match.group(1).lower() if match else "jpg"


class AssetService:
    """
    Service for content asset operations.

    Usage:
        asset = AssetService.get_asset(asset_id, business_id)
        AssetService.update_asset(asset_id, business_id, request)
    """

    @staticmethod
    def get_owned_asset(asset_id: str, business_id: str) -> dict[str, Any]:
        """
        Fetch an asset and check its content belongs to the caller's business.

        Raises:
            ContentAssetNotFoundError: If the asset doesn't exist
            AccessDeniedError: If it belongs to another business
        """
        asset = SupabaseClient.fetch_content_asset(asset_id)
        if not asset:
            raise ContentAssetNotFoundError(asset_id)

        owner = (asset.get("content") or {}).get("business_id")
        if str(owner) != str(business_id):
            logger.warning(f"Business {business_id} denied access to asset {asset_id}")
            raise AccessDeniedError("content_asset")
        return asset

    @staticmethod
    def get_asset(asset_id: str, business_id: str) -> dict[str, Any]:
        """Asset fields used by the editor."""
        AssetService.get_owned_asset(asset_id, business_id)

        client = SupabaseClient.get_client()
        response = (
            client.table("content_assets")
            .select(ASSET_COLUMNS)
            .eq("id", asset_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            raise ContentAssetNotFoundError(asset_id)
        return response.data[0]

    # -------------------------------------------------------------------------
    # Updates
    # -------------------------------------------------------------------------

    @staticmethod
    def update_asset(
        asset_id: str,
        business_id: str,
        request: ContentAssetUpdateRequest,
    ) -> dict[str, Any]:
        """
        Apply an editor update.

        Exactly one image action is applied, in this order:
        use_temporary_image, cancel_temporary_image, image_url.
        image_prompt is stored alongside any of them.

        Raises:
            InvalidRequestError: If nothing would change
        """
        asset = AssetService.get_owned_asset(asset_id, business_id)
        update: dict[str, Any] = {}

        if request.use_temporary_image:
            if not asset.get("temporary_image_url"):
                raise InvalidRequestError("No temporary image available to use")
            update["image_url"] = AssetService.store_temporary_image(asset)
            update["temporary_image_url"] = None
        elif request.cancel_temporary_image:
            update["temporary_image_url"] = None
        elif request.image_url is not None:
            update["image_url"] = request.image_url

        if request.image_prompt is not None:
            update["image_prompt"] = request.image_prompt

        if not update:
            raise InvalidRequestError("No valid fields to update")

        updated = SupabaseClient.update_content_asset(asset_id, update)
        if not updated:
            raise ContentAssetNotFoundError(asset_id)

        logger.info(f"Updated content asset {asset_id}: {sorted(update)}")
        return updated

    @staticmethod
    def store_temporary_image(asset: dict[str, Any]) -> str:
        """
        Copy an asset's temporary image into the images bucket.

        Workflow-hosted image URLs expire, so the file is downloaded and
        stored as {asset_id}_{content_type}.{ext}.

        Returns:
            Cache-busted public URL of the stored image
        """
        temp_url = asset["temporary_image_url"]

        try:
            response = httpx.get(temp_url, timeout=IMAGE_DOWNLOAD_TIMEOUT, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to download temporary image for asset {asset['id']}: {e}")
            raise TransformoException(
                message="Failed to download and store image",
                code="IMAGE_DOWNLOAD_FAILED",
                details={"error": str(e)},
            )

        extension = image_extension_from_url(temp_url)
        content_type = response.headers.get("content-type") or f"image/{extension}"
        path = f"{asset['id']}_{asset.get('content_type')}.{extension}"

        try:
            StorageService.upload_file(IMAGES_BUCKET, path, response.content, content_type)
        except StorageUploadError as e:
            raise TransformoException(
                message="Failed to store image to storage",
                code="STORAGE_UPLOAD_ERROR",
                details=e.details,
            )

        return _cache_busted(StorageService.get_public_url(IMAGES_BUCKET, path))

    @staticmethod
    def set_approval(asset_id: str, business_id: str, approved: bool) -> dict[str, Any]:
        AssetService.get_owned_asset(asset_id, business_id)
        updated = SupabaseClient.update_content_asset(asset_id, {"approved": approved})
        if not updated:
            raise ContentAssetNotFoundError(asset_id)
        return updated

    @staticmethod
    def schedule_asset(
        asset_id: str,
        business_id: str,
        scheduled_at: datetime,
    ) -> dict[str, Any]:
        """
        Schedule one asset for publication.

        Raises:
            InvalidRequestError: Unless every asset of the content is approved
        """
        asset = AssetService.get_owned_asset(asset_id, business_id)

        siblings = SupabaseClient.fetch_content_assets(asset["content_id"])
        if not can_schedule_content(siblings):
            raise InvalidRequestError(
                "All assets must be approved before scheduling",
                details={"content_id": asset["content_id"]},
            )

        updated = SupabaseClient.update_content_asset(
            asset_id, {"asset_scheduled_at": scheduled_at.isoformat()}
        )
        if not updated:
            raise ContentAssetNotFoundError(asset_id)

        logger.info(f"Scheduled asset {asset_id} for {scheduled_at.isoformat()}")
        return updated

    # -------------------------------------------------------------------------
    # Image Regeneration
    # -------------------------------------------------------------------------

    @staticmethod
    def count_recent_images(business_id: str, since: datetime) -> int | None:
        """
        Count assets with images created since `since` across a business.

        Returns None when the count can't be read; the limit is then skipped.
        """
        client = SupabaseClient.get_client()

        try:
            content_rows = (
                client.table("content")
                .select("id")
                .eq("business_id", business_id)
                .execute()
            ).data or []
            if not content_rows:
                return 0

            response = (
                client.table("content_assets")
                .select("id", count="exact")
                .in_("content_id", [row["id"] for row in content_rows])
                .gte("created_at", since.isoformat())
                .not_.is_("image_url", "null")
                .execute()
            )
            return response.count or 0

        except Exception as e:
            logger.error(f"Error checking image regeneration rate limit: {e}")
            return None

    @staticmethod
    def regenerate_image(
        asset_id: str,
        business_id: str,
        image_prompt: str,
    ) -> dict[str, Any]:
        """
        Ask the image workflow for a new image.

        The result arrives later through the n8n callback as a temporary
        image on the asset.

        Raises:
            RateLimitExceededError: Over the per-business limit (when enabled)
            TransformoException: If the workflow isn't configured or fails
        """
        if not asset_id or not image_prompt:
            raise InvalidRequestError("Missing required fields: content_asset_id and image_prompt")

        asset = AssetService.get_owned_asset(asset_id, business_id)

        if settings.ENABLE_IMAGE_REGENERATION_RATE_LIMIT:
            limit = settings.IMAGE_REGENERATION_LIMIT
            window = settings.IMAGE_REGENERATION_WINDOW_MINUTES
            since = datetime.now(timezone.utc) - timedelta(minutes=window)

            count = AssetService.count_recent_images(business_id, since)
            if count is not None and count >= limit:
                raise RateLimitExceededError(
                    f"Rate limit exceeded. You can only regenerate {limit} images "
                    f"every {window} minutes. Please try again later.",
                    retry_after=window * 60,
                )
            logger.info(f"Rate limit check passed: {count}/{limit} requests used")

        business = SupabaseClient.fetch_business(business_id) or {}

        try:
            N8nClient.trigger_image_regeneration(
                asset, image_prompt, business_id, business.get("business_name")
            )
        except N8nNotConfiguredError:
            raise TransformoException(
                message="Image regeneration service not configured",
                code="WORKFLOW_NOT_CONFIGURED",
            )
        except N8nError:
            raise TransformoException(
                message="Failed to start image regeneration. Please try again.",
                code="WORKFLOW_TRIGGER_FAILED",
            )

        try:
            SupabaseClient.update_content_asset(asset_id, {"image_prompt": image_prompt})
        except Exception as e:
            # The workflow is already running; a stale prompt is not fatal
            logger.error(f"Error updating image prompt for asset {asset_id}: {e}")

        logger.info(f"Image regeneration started for asset {asset_id}")
        return {
            "success": True,
            "message": "Image regeneration started",
            "content_asset_id": asset_id,
        }
