# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Defines background tasks that should not hold up an API request.
#
# Tasks:
# - trigger_avatar_video: Hand a video script to the AI avatar workflow
# - cleanup_orphaned_email_secrets: Periodic vault housekeeping
# =============================================================================

import logging
from typing import Any

from celery import shared_task

logger = logging.getLogger(__name__)


def _reset_heygen_status(content_id: str) -> None:
    """Clear the processing marker so the user can try again."""
    from lib.supabase_client import SupabaseClient, SupabaseClientError

    try:
        SupabaseClient.update_content(content_id, {"heygen_status": None})
    except SupabaseClientError as e:
        logger.error(f"Failed to reset heygen_status for {content_id}: {e}")


# =============================================================================
# AI Avatar Video
# =============================================================================

@shared_task(bind=True, name="workers.tasks.trigger_avatar_video")
def trigger_avatar_video(
    self,
    content_id: str,
    video_type: str = "long",
) -> dict[str, Any]:
    """
    Start an AI avatar render for a piece of content.

    The render itself happens in n8n; the finished video arrives through
    the workflow callback. On any failure here heygen_status is cleared.

    Args:
        content_id: The content UUID
        video_type: "long" or "short", picks which video URL the callback fills

    Returns:
        Dict with success flag, or an error message
    """
    from app.exceptions import TransformoException
    from core.services.integration_service import IntegrationService
    from lib.n8n import N8nClient, N8nError
    from lib.supabase_client import SupabaseClient, SupabaseClientError

    logger.info(f"Triggering {video_type} avatar video for content {content_id}")

    try:
        content = SupabaseClient.fetch_content(content_id)
        if not content:
            return {
                "success": False,
                "error": f"Content not found: {content_id}",
            }

        avatar_config = IntegrationService.get_avatar_config(content["business_id"])

        N8nClient.trigger_avatar_video(content, avatar_config, video_type)

    except (N8nError, TransformoException, SupabaseClientError) as e:
        logger.error(f"Avatar video trigger failed for {content_id}: {e}")
        _reset_heygen_status(content_id)
        return {
            "success": False,
            "error": str(e),
        }

    logger.info(f"Avatar workflow started for content {content_id}")
    return {
        "success": True,
        "content_id": content_id,
        "video_type": video_type,
    }


# =============================================================================
# Maintenance
# =============================================================================

@shared_task(bind=True, name="workers.tasks.cleanup_orphaned_email_secrets")
def cleanup_orphaned_email_secrets(self) -> dict[str, Any]:
    """Delete vault secrets left behind by removed email integrations."""
    from core.services.integration_service import IntegrationService
    from lib.supabase_client import SupabaseClientError

    try:
        result = IntegrationService.cleanup_orphaned_email_secrets()
    except SupabaseClientError as e:
        logger.error(f"Orphaned email secret cleanup failed: {e}")
        return {
            "success": False,
            "error": str(e),
        }

    return {
        "success": True,
        "result": result,
    }
