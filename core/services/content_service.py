# =============================================================================
# core/services/content_service.py - Content Business Logic
# =============================================================================
# Handles the content lifecycle outside the n8n callback:
# - Creating content rows for voice recordings
# - Finalizing a recording and starting transcription
# - Listing content with its derived status
# - In-place edits of transcript / research / video script
# - Workflow-facing status updates and content creation triggers
# - Queueing AI avatar videos
#
# Every user-facing method takes the caller's business_id and refuses
# content owned by another business.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any

from lib.supabase_client import SupabaseClient
from lib.n8n import N8nClient, N8nError, N8nNotConfiguredError
from lib.content_status import (
    DerivedStatus,
    can_schedule_content,
    determine_content_status,
    get_status_actions,
    matches_status_filter,
)
from core.models.content import (
    EDITABLE_CONTENT_FIELDS,
    WORKFLOW_SETTABLE_STATUSES,
    ContentStatus,
    HeygenStatus,
)
from app.exceptions import (
    AccessDeniedError,
    BusinessNotFoundError,
    ContentNotFoundError,
    IntegrationNotConfiguredError,
    InvalidRequestError,
    TransformoException,
    workflow_error_from,
)

logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ContentService:
    """
    Service for content operations.

    Provides a clean interface between API routes and database.
    """

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    @staticmethod
    def get_owned_content(
        content_id: str,
        business_id: str,
        with_business: bool = False,
    ) -> dict[str, Any]:
        """
        Fetch a content row and check it belongs to the caller's business.

        Raises:
            ContentNotFoundError: If the row doesn't exist
            AccessDeniedError: If it belongs to another business
        """
        content = SupabaseClient.fetch_content(content_id, with_business=with_business)
        if not content:
            raise ContentNotFoundError(content_id)
        if str(content.get("business_id")) != str(business_id):
            logger.warning(f"Business {business_id} denied access to content {content_id}")
            raise AccessDeniedError("content")
        return content

    # -------------------------------------------------------------------------
    # Voice Recordings
    # -------------------------------------------------------------------------

    @staticmethod
    def create_recording(business_id: str) -> dict[str, Any]:
        """
        Create the content row a voice recording will be attached to.

        Returns:
            {"id": ..., "business_id": ...}
        """
        client = SupabaseClient.get_client()

        data = {
            "business_id": business_id,
            "content_title": f"New Recording - {_utc_now_iso()}",
            "status": ContentStatus.CREATING.value,
        }

        response = client.table("content").insert(data).execute()
        if not response.data:
            raise TransformoException(
                message="Failed to insert content record",
                code="CONTENT_CREATE_FAILED",
            )

        content = response.data[0]
        logger.info(f"Created content {content['id']} for business {business_id}")
        return {"id": content["id"], "business_id": content["business_id"]}

    @staticmethod
    def finalize_recording(
        content_id: str,
        business_id: str,
        audio_url: str,
    ) -> dict[str, Any]:
        """
        Attach the uploaded audio and start the transcription workflow.

        The row is moved to `processing` before n8n is called; n8n reports
        back through the callback endpoint.

        Raises:
            WorkflowNotConfiguredError / WorkflowTriggerError: If n8n can't be called
        """
        ContentService.get_owned_content(content_id, business_id)

        updated = SupabaseClient.update_content(
            content_id,
            {"audio_url": audio_url, "status": ContentStatus.PROCESSING.value},
        )
        if not updated:
            raise ContentNotFoundError(content_id)

        try:
            N8nClient.trigger_audio_transcription(
                audio_url=audio_url,
                content_id=updated["id"],
                business_id=updated["business_id"],
            )
        except N8nError as e:
            raise workflow_error_from(e)

        return {"message": "Content finalized successfully"}

    # -------------------------------------------------------------------------
    # Listing / Detail
    # -------------------------------------------------------------------------

    @staticmethod
    def list_content(
        business_id: str,
        status: DerivedStatus | None = None,
    ) -> list[dict[str, Any]]:
        """
        List a business's content, newest first, with derived status.

        Args:
            business_id: The caller's business
            status: Optional derived-status filter (drafts include failed)
        """
        client = SupabaseClient.get_client()

        response = (
            client.table("content")
            .select("*, content_assets(*)")
            .eq("business_id", business_id)
            .order("created_at", desc=True)
            .execute()
        )

        items = []
        for row in response.data or []:
            assets = row.pop("content_assets", None) or []
            derived = determine_content_status(row, assets)
            if status is not None and not matches_status_filter(derived, status):
                continue
            items.append({
                "content": row,
                "derived_status": derived.value,
                "status_label": derived.label,
                "asset_count": len(assets),
            })

        return items

    @staticmethod
    def get_content_detail(content_id: str, business_id: str) -> dict[str, Any]:
        """Content row, its assets, derived status and the allowed actions."""
        content = ContentService.get_owned_content(content_id, business_id)
        assets = SupabaseClient.fetch_content_assets(content_id)

        derived = determine_content_status(content, assets)
        actions = get_status_actions(derived).model_dump()
        # Draft scheduling also needs every asset approved
        actions["can_schedule"] = actions["can_schedule"] and can_schedule_content(assets)

        return {
            "content": content,
            "assets": assets,
            "derived_status": derived.value,
            "status_label": derived.label,
            "actions": actions,
        }

    # -------------------------------------------------------------------------
    # Edits
    # -------------------------------------------------------------------------

    @staticmethod
    def update_field(
        content_id: str,
        business_id: str,
        field_name: str,
        value: str,
    ) -> dict[str, Any]:
        """
        Update one user-editable text field.

        Raises:
            InvalidRequestError: If the field isn't editable
        """
        if field_name not in EDITABLE_CONTENT_FIELDS:
            raise InvalidRequestError("Invalid field name.", details={"field_name": field_name})

        ContentService.get_owned_content(content_id, business_id)
        SupabaseClient.update_content(content_id, {field_name: value})
        logger.info(f"Updated {field_name} on content {content_id}")
        return {"success": True}

    # -------------------------------------------------------------------------
    # Workflow-facing operations
    # -------------------------------------------------------------------------

    @staticmethod
    def set_status_from_workflow(content_id: str, status: str) -> dict[str, Any]:
        """
        Status update requested by n8n (processing, draft or failed).

        Raises:
            InvalidRequestError: If the status is not settable
        """
        if status not in WORKFLOW_SETTABLE_STATUSES:
            raise InvalidRequestError("Invalid status", details={"status": status})

        SupabaseClient.update_content(content_id, {"status": status})
        logger.info(f"Content {content_id} status updated to {status}")
        return {
            "success": True,
            "message": f"Content {content_id} status updated to {status}",
        }

    @staticmethod
    def trigger_content_creation(content_id: str) -> dict[str, Any]:
        """
        Start asset generation for a content item on demand.

        Raises:
            ContentNotFoundError / BusinessNotFoundError: Missing rows
            TransformoException: If the webhook is unset or n8n fails
        """
        content = SupabaseClient.fetch_content(content_id, with_business=True)
        if not content:
            raise ContentNotFoundError(content_id)

        business = content.get("businesses")
        if not business:
            raise BusinessNotFoundError()

        try:
            N8nClient.trigger_content_creation(content, business)
        except N8nNotConfiguredError:
            raise TransformoException(
                message="Content creation webhook not configured",
                code="WORKFLOW_NOT_CONFIGURED",
            )
        except N8nError as e:
            raise TransformoException(
                message=f"Failed to trigger content creation: {e.message}",
                code="WORKFLOW_TRIGGER_FAILED",
                details={"upstream_status": e.status},
            )

        return {
            "success": True,
            "message": f"Content creation workflow triggered for {content_id}",
        }

    # -------------------------------------------------------------------------
    # AI Avatar Video
    # -------------------------------------------------------------------------

    @staticmethod
    def request_avatar_video(
        content_id: str,
        business_id: str,
        video_type: str = "long",
    ) -> dict[str, Any]:
        """
        Mark the content as rendering and queue the avatar video workflow.

        The n8n call runs in a Celery task; heygen_status is reverted there
        if the workflow can't be started.

        Raises:
            InvalidRequestError: If there is no video script to render
            IntegrationNotConfiguredError: If no AI avatar integration is active
        """
        from core.services.integration_service import IntegrationService
        from workers.tasks import trigger_avatar_video

        content = ContentService.get_owned_content(content_id, business_id)
        if not (content.get("video_script") or "").strip():
            raise InvalidRequestError("Content has no video script to render")

        if not IntegrationService.get_avatar_integration(business_id):
            raise IntegrationNotConfiguredError("AI avatar integration not configured")

        SupabaseClient.update_content(
            content_id, {"heygen_status": HeygenStatus.PROCESSING.value}
        )

        task = trigger_avatar_video.delay(content_id, video_type)
        logger.info(f"Queued avatar video for content {content_id} (task {task.id})")
        return {"success": True, "task_id": task.id}
