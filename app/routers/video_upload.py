# =============================================================================
# app/routers/video_upload.py - Resumable Video Upload Endpoints
# =============================================================================
# The three server-side steps around a browser TUS upload:
#   POST /projects                      create the content row
#   GET  /{content_id}/upload-config    TUS endpoint, bucket, object name
#   POST /{content_id}/finalize         store the URL, start transcription
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path, Query

from app.dependencies import BusinessId
from core.models.content import FinalizeVideoUploadRequest, UploadConfigResponse
from core.services.video_upload_service import VideoUploadService

router = APIRouter()

ContentIdPath = Annotated[str, Path(description="Content UUID")]


@router.post("/projects")
async def create_video_project(business_id: BusinessId):
    """Create a video_upload content row in `creating` state."""
    project = VideoUploadService.create_project(business_id)
    return {"success": True, **project}


@router.get("/{content_id}/upload-config", response_model=UploadConfigResponse)
async def get_upload_config(
    content_id: ContentIdPath,
    business_id: BusinessId,
    content_type: Annotated[str | None, Query(description="MIME type of the video")] = None,
    file_size: Annotated[int | None, Query(ge=0, description="File size in bytes")] = None,
):
    """
    Parameters for the browser's resumable upload.

    The object name is {business_id}_{content_id}.{ext}; the browser
    authenticates to storage with its own access token.
    """
    return VideoUploadService.get_upload_config(
        content_id, business_id, mime_type=content_type, file_size=file_size
    )


@router.post("/{content_id}/finalize")
async def finalize_video_upload(
    content_id: ContentIdPath,
    request: FinalizeVideoUploadRequest,
    business_id: BusinessId,
):
    """Store the uploaded video URL and start video transcription."""
    return VideoUploadService.finalize(content_id, business_id, request.video_url)
