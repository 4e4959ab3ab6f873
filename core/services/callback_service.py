# =============================================================================
# core/services/callback_service.py - n8n Completion Callbacks
# =============================================================================
# n8n reports every finished workflow by POSTing to /api/n8n/callback.
# One endpoint receives several payload shapes, routed in this order:
#
#   workflow_type == "content_creation"      -> content_generation_status
#   workflow_type == "avatar_video"          -> heygen_status (+ video URL)
#   workflow_type == "image_regeneration"
#     or an image URL without transcript/title -> asset temporary_image_url
#   anything else                            -> transcription result
#
# A successful transcription chains straight into the content creation
# workflow. Responses keep the exact shapes the workflows expect, so this
# service returns (status_code, body) instead of raising.
# =============================================================================

import logging
from typing import Any

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.n8n import N8nClient, N8nError
from core.models.content import (
    CallbackPayload,
    ContentStatus,
    GenerationStatus,
    HeygenStatus,
)
from app.config import settings

logger = logging.getLogger(__name__)

CallbackResult = tuple[int, dict[str, Any]]


class CallbackService:
    """Applies n8n callback payloads to content and asset rows."""

    @staticmethod
    def handle(payload: CallbackPayload) -> CallbackResult:
        """
        Route a callback payload to its branch.

        Returns:
            (status_code, response body)
        """
        content_id = payload.resolved_content_id
        is_image = payload.is_image_regeneration

        logger.info(
            f"N8N callback received from {payload.environment or 'unknown'}: "
            f"content_id={content_id} "
            f"workflow_type={payload.workflow_type or ('image_regeneration' if is_image else 'unknown')} "
            f"success={payload.success} has_transcript={bool(payload.transcript)} "
            f"has_title={bool(payload.content_title)} has_image={bool(payload.resolved_image_url)}"
        )

        if not content_id and not payload.content_asset_id:
            logger.error("Missing content_id/contentId and content_asset_id in callback")
            return 400, {"error": "Missing content_id or content_asset_id"}

        try:
            if payload.workflow_type == "content_creation":
                return CallbackService.handle_content_creation(content_id, payload)
            if payload.workflow_type == "avatar_video":
                return CallbackService.handle_avatar_video(content_id, payload)
            if payload.workflow_type == "image_regeneration" or is_image:
                return CallbackService.handle_image_regeneration(content_id, payload)
            return CallbackService.handle_transcription(content_id, payload)

        except Exception as e:
            logger.exception(f"N8N callback error: {e}")
            return 500, {"error": "Internal server error", "details": str(e)}

    # -------------------------------------------------------------------------
    # Content creation finished
    # -------------------------------------------------------------------------

    @staticmethod
    def handle_content_creation(content_id: str | None, payload: CallbackPayload) -> CallbackResult:
        if not payload.failed:
            update = {
                "content_generation_status": GenerationStatus.COMPLETED.value,
                "error_message": None,
            }
        else:
            update = {
                "content_generation_status": GenerationStatus.FAILED.value,
                "error_message": payload.error_text or "Content creation workflow failed",
            }
            logger.warning(f"Content creation failed for {content_id}: {payload.error}")

        client = SupabaseClient.get_client()
        try:
            response = client.table("content").update(update).eq("id", content_id).execute()
        except Exception as e:
            logger.error(f"Error updating content generation status: {e}")
            return 500, {"error": "Database update failed", "details": str(e)}

        row = SupabaseClient._first(response.data)
        if not row:
            logger.error(f"No content found with ID: {content_id}")
            return 404, {"error": "Content not found"}

        logger.info(
            f"Updated content generation status for {content_id} "
            f"to: {update['content_generation_status']}"
        )
        return 200, {
            "success": True,
            "updated": {
                "id": row.get("id"),
                "content_generation_status": row.get("content_generation_status"),
            },
        }

    # -------------------------------------------------------------------------
    # AI avatar video finished
    # -------------------------------------------------------------------------

    @staticmethod
    def handle_avatar_video(content_id: str | None, payload: CallbackPayload) -> CallbackResult:
        """Record the rendered video URL (or the failure) on the content row."""
        if not content_id:
            return 400, {"error": "Missing content_id"}

        if not payload.failed and payload.video_url:
            column = f"video_{payload.resolved_video_type}_url"
            update = {
                "heygen_status": HeygenStatus.COMPLETED.value,
                column: payload.video_url,
                "error_message": None,
            }
        else:
            update = {
                "heygen_status": HeygenStatus.FAILED.value,
                "error_message": payload.error_text or "Avatar video generation failed",
            }

        client = SupabaseClient.get_client()
        try:
            response = client.table("content").update(update).eq("id", content_id).execute()
        except Exception as e:
            logger.error(f"Error updating avatar video status: {e}")
            return 500, {"error": "Database update failed", "details": str(e)}

        row = SupabaseClient._first(response.data)
        if not row:
            return 404, {"error": "Content not found"}

        logger.info(f"Avatar video for {content_id}: {update['heygen_status']}")
        return 200, {"success": True, "updated": {"id": row.get("id"), "heygen_status": row.get("heygen_status")}}

    # -------------------------------------------------------------------------
    # Image regeneration finished
    # -------------------------------------------------------------------------

    @staticmethod
    def find_regenerated_asset_id(content_id: str) -> str | None:
        """
        Pick the asset an image callback belongs to when n8n omits its id.

        Newest asset with an image, preferring one that has an image_prompt
        (the prompt is written when a regeneration is requested).
        """
        client = SupabaseClient.get_client()
        response = (
            client.table("content_assets")
            .select("id, content_type, image_url, image_prompt")
            .eq("content_id", content_id)
            .not_.is_("image_url", "null")
            .order("created_at", desc=True)
            .execute()
        )
        assets = response.data or []
        if not assets:
            return None

        selected = next((a for a in assets if a.get("image_prompt")), assets[0])
        logger.info(
            f"Found content asset {selected['id']} for image regeneration "
            f"(has prompt: {bool(selected.get('image_prompt'))}, total: {len(assets)})"
        )
        return selected["id"]

    @staticmethod
    def handle_image_regeneration(content_id: str | None, payload: CallbackPayload) -> CallbackResult:
        image_url = payload.resolved_image_url
        if not image_url:
            logger.error("Missing image_url in image regeneration callback")
            return 400, {"error": "Missing image_url"}

        asset_id = payload.content_asset_id
        if not asset_id and content_id:
            try:
                asset_id = CallbackService.find_regenerated_asset_id(content_id)
            except Exception as e:
                logger.error(f"Could not look up content asset for image regeneration: {e}")
                asset_id = None
            if not asset_id:
                return 404, {"error": "Could not find content asset to update"}

        if payload.failed:
            logger.warning(f"Image regeneration failed for asset {asset_id}: {payload.error}")
            return 200, {
                "success": False,
                "error": payload.error_text or "Image regeneration failed",
                "content_asset_id": asset_id,
            }

        # Parked until the user promotes or discards it
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("content_assets")
                .update({"temporary_image_url": image_url})
                .eq("id", asset_id)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error storing temporary image: {e}")
            return 500, {"error": "Failed to store temporary image", "details": str(e)}

        if not response.data:
            logger.error(f"No content asset found with ID: {asset_id}")
            return 404, {"error": "Content asset not found"}

        logger.info(f"Stored temporary image for asset {asset_id}, waiting for user approval")
        return 200, {
            "success": True,
            "content_asset_id": asset_id,
            "temporary_image_url": image_url,
            "message": "Image regeneration completed - pending user approval",
        }

    # -------------------------------------------------------------------------
    # Audio / video transcription finished
    # -------------------------------------------------------------------------

    @staticmethod
    def handle_transcription(content_id: str | None, payload: CallbackPayload) -> CallbackResult:
        is_success = bool(
            not payload.failed and payload.transcript and payload.content_title
        )

        if is_success:
            update: dict[str, Any] = {
                "status": ContentStatus.COMPLETED.value,
                "transcript": payload.transcript,
                "content_title": payload.content_title,
                "error_message": None,
            }
            if payload.video_script:
                update["video_script"] = payload.video_script
        else:
            # Stays in processing; there is no stored error status
            update = {
                "status": ContentStatus.PROCESSING.value,
                "error_message": payload.error_text or "N8N workflow failed without specific error",
            }

        client = SupabaseClient.get_client()
        try:
            response = client.table("content").update(update).eq("id", content_id).execute()
        except Exception as e:
            logger.error(f"Error updating content: {e}")
            return 500, {"error": "Database update failed", "details": str(e)}

        if not response.data:
            logger.error(f"No content found with ID: {content_id}")
            return 404, {"error": "Content not found"}

        content = response.data[0]
        try:
            content = SupabaseClient.fetch_content(content_id, with_business=True) or content
        except SupabaseClientError as e:
            # The update already landed; chain with the bare row
            logger.error(f"Could not reload content {content_id} with its business: {e}")
        logger.info(f"Updated content {content_id} - Status: {update['status']}")

        if is_success:
            CallbackService.chain_content_creation(content)

        return 200, {"success": True, "updated": content}

    @staticmethod
    def chain_content_creation(content: dict[str, Any]) -> None:
        """
        Start the content creation workflow after a successful transcription.

        content_generation_status is set to generating first (a failed write
        is logged and the webhook still fires) and reverted to null if n8n
        can't be reached. Failures never fail the callback.
        """
        content_id = content["id"]
        business = content.get("businesses") or {}

        if not settings.N8N_WEBHOOK_URL_CONTENT_CREATION:
            logger.warning(
                "N8N_WEBHOOK_URL_CONTENT_CREATION not configured - skipping automatic content creation"
            )
            return

        try:
            SupabaseClient.update_content(
                content_id, {"content_generation_status": GenerationStatus.GENERATING.value}
            )
        except SupabaseClientError as e:
            logger.error(f"Could not mark content {content_id} as generating: {e}")

        try:
            N8nClient.trigger_content_creation(content, business)
            logger.info(f"Triggered content creation workflow for {content_id}")
        except N8nError as e:
            logger.error(f"Failed to trigger content creation workflow: {e.message}")
            CallbackService._reset_generation_status(content_id)

    @staticmethod
    def _reset_generation_status(content_id: str) -> None:
        try:
            SupabaseClient.update_content(content_id, {"content_generation_status": None})
        except Exception as e:
            logger.error(f"Could not revert content_generation_status for {content_id}: {e}")

