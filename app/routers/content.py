# =============================================================================
# app/routers/content.py - Content Endpoints
# =============================================================================
# User endpoints (bearer JWT, scoped to the caller's business):
#   POST  /recordings                     new voice recording row
#   POST  /{content_id}/finalize-recording attach audio, start transcription
#   GET   ""                               list with derived status
#   GET   /{content_id}                    detail + assets + allowed actions
#   PATCH /{content_id}/fields             edit transcript/research/script
#   POST  /{content_id}/avatar-video       queue an AI avatar render
#
# Workflow endpoints (shared n8n secret):
#   POST  /update-status
#   POST  /trigger-creation
# =============================================================================

import hmac
import json
import logging
from typing import Annotated

from fastapi import APIRouter, Path, Query, Request
from pydantic import ValidationError

from app.config import settings
from app.dependencies import BusinessId
from app.exceptions import InvalidRequestError, TransformoException, UnauthorizedError
from core.models.content import (
    AvatarVideoRequest,
    ContentAssetResponse,
    ContentFieldUpdateRequest,
    ContentListItem,
    FinalizeRecordingRequest,
    TriggerCreationRequest,
    UpdateStatusRequest,
)
from core.services.content_service import ContentService
from lib.content_status import DerivedStatus
from lib.webhook_security import SIGNATURE_HEADER, validate_webhook_headers

logger = logging.getLogger(__name__)

router = APIRouter()

ContentIdPath = Annotated[str, Path(description="Content UUID")]


def _secret_matches(secret: str | None) -> bool:
    expected = settings.N8N_CALLBACK_SECRET
    if not expected or not secret:
        return False
    return hmac.compare_digest(secret, expected)


# =============================================================================
# Workflow Endpoints
# =============================================================================

@router.post("/update-status")
async def update_status(request: UpdateStatusRequest):
    """
    Set content.status from a workflow (processing, draft or failed).

    The body must carry the shared callback secret.
    """
    if not _secret_matches(request.secret):
        raise UnauthorizedError()

    if not request.content_id or not request.status:
        raise InvalidRequestError("Missing content_id or status")

    return ContentService.set_status_from_workflow(request.content_id, request.status)


@router.post("/trigger-creation")
async def trigger_creation(request: Request):
    """
    Start the content creation workflow for a content item.

    Authenticated by HMAC headers (x-webhook-signature/-timestamp) when
    present, otherwise by the `secret` field of the body.
    """
    if not settings.N8N_CALLBACK_SECRET:
        logger.error("N8N_CALLBACK_SECRET not configured")
        raise TransformoException(
            message="Server configuration error",
            code="SERVER_CONFIGURATION_ERROR",
        )

    raw_body = await request.body()
    try:
        body = TriggerCreationRequest.model_validate(json.loads(raw_body or b"{}"))
    except (ValueError, ValidationError):
        raise InvalidRequestError("Invalid JSON body")

    if request.headers.get(SIGNATURE_HEADER):
        check = validate_webhook_headers(request.headers, raw_body, settings.N8N_CALLBACK_SECRET)
        if not check.valid:
            logger.warning(f"Webhook signature validation failed: {check.error}")
            raise UnauthorizedError()
    elif not _secret_matches(body.secret):
        raise UnauthorizedError()

    if not body.content_id:
        raise InvalidRequestError("Missing content_id")

    return ContentService.trigger_content_creation(body.content_id)


# =============================================================================
# Voice Recordings
# =============================================================================

@router.post("/recordings")
async def create_recording(business_id: BusinessId):
    """Create the content row a new voice recording will be uploaded to."""
    return ContentService.create_recording(business_id)


@router.post("/{content_id}/finalize-recording")
async def finalize_recording(
    content_id: ContentIdPath,
    request: FinalizeRecordingRequest,
    business_id: BusinessId,
):
    """
    Attach the uploaded audio and start transcription.

    The content moves to `processing`; n8n reports back through
    /api/n8n/callback.
    """
    return ContentService.finalize_recording(content_id, business_id, request.audio_url)


# =============================================================================
# Listing / Detail / Edits
# =============================================================================

@router.get("")
async def list_content(
    business_id: BusinessId,
    status: Annotated[DerivedStatus | None, Query(description="Filter by derived status")] = None,
):
    """
    List the business's content, newest first.

    status=draft also returns failed items.
    """
    items = [
        ContentListItem.model_validate(item)
        for item in ContentService.list_content(business_id, status=status)
    ]
    return {"success": True, "content": items, "total": len(items)}


@router.get("/{content_id}")
async def get_content(content_id: ContentIdPath, business_id: BusinessId):
    """Content with its assets, derived status and the actions it allows."""
    detail = ContentService.get_content_detail(content_id, business_id)
    detail["assets"] = [ContentAssetResponse.model_validate(a) for a in detail["assets"]]
    return {"success": True, **detail}


@router.patch("/{content_id}/fields")
async def update_content_field(
    content_id: ContentIdPath,
    request: ContentFieldUpdateRequest,
    business_id: BusinessId,
):
    return ContentService.update_field(
        content_id, business_id, request.field_name, request.value
    )


@router.post("/{content_id}/avatar-video")
async def request_avatar_video(
    content_id: ContentIdPath,
    business_id: BusinessId,
    request: AvatarVideoRequest | None = None,
):
    """
    Render the video script with the business's AI avatar.

    Returns immediately; heygen_status tracks progress and the callback
    stores the finished video URL.
    """
    video_type = request.video_type if request else "long"
    return ContentService.request_avatar_video(content_id, business_id, video_type)
