# =============================================================================
# core/services/video_upload_service.py - Resumable Video Upload Projects
# =============================================================================
# The browser streams large videos straight to Supabase Storage over the
# TUS resumable protocol. This service only does the bookkeeping around it:
#
#   1. create_project      -> content row (video_upload / creating / pending)
#   2. get_upload_config   -> TUS endpoint, bucket, object name, limits
#   3. finalize            -> store video_long_url and start transcription
#
# Retry and resume live in the client's TUS library.
# =============================================================================

import logging
from typing import Any

from lib.supabase_client import SupabaseClient
from lib.n8n import N8nClient, N8nError
from lib.file_validation import (
    ALLOWED_MIME_TYPES,
    FILE_SIZE_LIMITS,
    get_safe_file_extension,
    validate_file_size,
    validate_file_type,
)
from core.models.content import (
    ContentStatus,
    GenerationStatus,
    ProjectType,
    UploadConfigResponse,
)
from core.services.content_service import ContentService
from core.services.storage_service import VIDEOS_BUCKET
from app.config import settings
from app.exceptions import (
    ContentNotFoundError,
    InvalidFileError,
    TransformoException,
    workflow_error_from,
)

logger = logging.getLogger(__name__)

# Supabase's resumable endpoint only accepts 6MB chunks
TUS_CHUNK_SIZE = 6 * 1024 * 1024
DEFAULT_VIDEO_MIME_TYPE = "video/mp4"


class VideoUploadService:
    """Content rows and upload parameters for resumable video uploads."""

    @staticmethod
    def create_project(business_id: str) -> dict[str, Any]:
        """
        Create the content row an uploaded video will be attached to.

        Returns:
            {"contentId": ..., "businessId": ...}
        """
        client = SupabaseClient.get_client()

        response = (
            client.table("content")
            .insert({
                "business_id": business_id,
                "project_type": ProjectType.VIDEO_UPLOAD.value,
                "status": ContentStatus.CREATING.value,
                "content_generation_status": GenerationStatus.PENDING.value,
            })
            .execute()
        )
        if not response.data:
            raise TransformoException(
                message="Failed to create video upload project",
                code="CONTENT_CREATE_FAILED",
            )

        content = response.data[0]
        logger.info(f"Created video upload project {content['id']} for business {business_id}")
        return {"contentId": content["id"], "businessId": business_id}

    @staticmethod
    def get_upload_config(
        content_id: str,
        business_id: str,
        mime_type: str | None = None,
        file_size: int | None = None,
    ) -> UploadConfigResponse:
        """
        Issue the TUS upload parameters for one content row.

        Args:
            content_id: Content row created by create_project
            business_id: The caller's business
            mime_type: MIME type of the file the browser will send
            file_size: Size in bytes, checked against the video limit

        Raises:
            InvalidFileError: If the type or size is not allowed
        """
        ContentService.get_owned_content(content_id, business_id)

        mime_type = mime_type or DEFAULT_VIDEO_MIME_TYPE
        for check in (
            validate_file_type(mime_type, "video"),
            validate_file_size(file_size, "video") if file_size is not None else None,
        ):
            if check is not None and not check.valid:
                raise InvalidFileError(check.error)

        extension = get_safe_file_extension(mime_type)

        return UploadConfigResponse(
            endpoint=f"{settings.SUPABASE_URL.rstrip('/')}/storage/v1/upload/resumable",
            bucket_name=VIDEOS_BUCKET,
            object_name=f"{business_id}_{content_id}.{extension}",
            content_type=mime_type,
            chunk_size=TUS_CHUNK_SIZE,
            max_file_size=FILE_SIZE_LIMITS["video"],
            allowed_types=list(ALLOWED_MIME_TYPES["video"]),
            headers={"x-upsert": "true"},
        )

    @staticmethod
    def finalize(content_id: str, business_id: str, video_url: str) -> dict[str, Any]:
        """
        Record the uploaded video and start the video transcription workflow.

        Raises:
            WorkflowNotConfiguredError / WorkflowTriggerError: If n8n can't be called
        """
        ContentService.get_owned_content(content_id, business_id)

        updated = SupabaseClient.update_content(
            content_id,
            {
                "video_long_url": video_url,
                "status": ContentStatus.PROCESSING.value,
                "content_generation_status": GenerationStatus.PENDING.value,
            },
        )
        if not updated:
            raise ContentNotFoundError(content_id)

        try:
            N8nClient.trigger_video_transcription(
                video_url=video_url,
                content_id=content_id,
                business_id=business_id,
            )
        except N8nError as e:
            raise workflow_error_from(e)

        logger.info(f"Video upload finalized for content {content_id}")
        return {"success": True, "contentId": content_id}
