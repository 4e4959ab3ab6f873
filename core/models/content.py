# =============================================================================
# core/models/content.py - Content & Content Asset Schemas
# =============================================================================
# These models define the API contract for content operations:
# - ContentStatus / GenerationStatus / HeygenStatus: stored lifecycle enums
# - ContentResponse / ContentAssetResponse: rows returned to clients
# - CallbackPayload: the loosely-typed body n8n posts back
# - Request bodies for the content, asset and workflow endpoints
#
# A content item is one piece of source material (a voice recording or an
# uploaded video). Its generated derivatives are content assets.
# =============================================================================

import json
from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ContentStatus(str, Enum):
    """
    Stored `content.status` values.

    Flow: creating -> processing -> completed
    Recordings move to processing once the audio is uploaded; n8n marks
    them completed when the transcript arrives.
    """
    CREATING = "creating"
    PROCESSING = "processing"
    COMPLETED = "completed"
    DRAFT = "draft"
    FAILED = "failed"


class GenerationStatus(str, Enum):
    """`content.content_generation_status`: asset generation progress."""
    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


class HeygenStatus(str, Enum):
    """`content.heygen_status`: AI avatar video progress."""
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ProjectType(str, Enum):
    VOICE_RECORDING = "voice_recording"
    VIDEO_UPLOAD = "video_upload"


# Statuses the workflow engine may set through /api/content/update-status
WORKFLOW_SETTABLE_STATUSES = (
    ContentStatus.PROCESSING.value,
    ContentStatus.DRAFT.value,
    ContentStatus.FAILED.value,
)

# Content columns the user may edit in place
EDITABLE_CONTENT_FIELDS = ("transcript", "research", "video_script")


# =============================================================================
# Row Models
# =============================================================================

class ContentAssetResponse(BaseModel):
    """
    One generated asset (blog post, email, social post, ...).

    Example:
        {
            "id": "7d1e...",
            "content_id": "550e...",
            "content_type": "blog_post",
            "headline": "5 ways to ...",
            "approved": false,
            "asset_status": null
        }
    """
    id: str
    content_id: str | None = None
    content_type: str | None = None
    name: str | None = None
    headline: str | None = None
    content: str | None = None
    image_url: str | None = None
    temporary_image_url: str | None = None
    image_prompt: str | None = None
    blog_url: str | None = None
    blog_meta_description: str | None = None
    approved: bool | None = None
    asset_status: str | None = None
    asset_scheduled_at: datetime | None = None
    asset_published_at: datetime | None = None
    error_message: str | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(extra="ignore")


class ContentResponse(BaseModel):
    """A content row as returned to clients."""
    id: str
    business_id: str | None = None
    project_type: str | None = None
    content_title: str | None = None
    status: str | None = None
    content_generation_status: str | None = None
    heygen_status: str | None = None
    audio_url: str | None = None
    video_long_url: str | None = None
    video_short_url: str | None = None
    transcript: str | None = None
    research: str | None = None
    video_script: str | None = None
    keyword: str | None = None
    error_message: str | None = None
    scheduled_at: datetime | None = None
    published_at: datetime | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(extra="ignore")


# =============================================================================
# Workflow Engine Payloads
# =============================================================================

class CallbackPayload(BaseModel):
    """
    Body of POST /api/n8n/callback.

    n8n sends several shapes (transcription, content creation, image
    regeneration, avatar video) with overlapping optional fields. Values
    are taken as sent: ids may arrive as numbers, `error` as an object and
    `success` as anything, so nothing here is type-checked.
    """
    content_id: Any = None
    # Legacy camelCase id sent by older workflows
    contentId: Any = None
    content_asset_id: Any = None
    transcript: Any = None
    content_title: Any = None
    video_script: Any = None
    # Only an explicit false counts as failure
    success: Any = None
    error: Any = None
    environment: Any = None
    workflow_type: Any = None
    new_image_url: Any = None
    image_url: Any = None
    video_url: Any = None
    # Which avatar render a video_url belongs to
    video_type: Any = None

    model_config = ConfigDict(extra="allow")

    @property
    def resolved_content_id(self) -> Any:
        return self.content_id or self.contentId

    @property
    def resolved_image_url(self) -> Any:
        return self.new_image_url or self.image_url

    @property
    def resolved_video_type(self) -> str:
        """"short" only when asked for; anything else is the long render."""
        return "short" if self.video_type == "short" else "long"

    @property
    def failed(self) -> bool:
        return self.success is False

    @property
    def error_text(self) -> str | None:
        """`error` as a string for the error_message column."""
        if not self.error:
            return None
        if isinstance(self.error, str):
            return self.error
        return json.dumps(self.error, default=str)

    @property
    def is_image_regeneration(self) -> bool:
        """An image URL without transcript/title means an image callback."""
        return bool(self.resolved_image_url) and not self.transcript and not self.content_title


class UpdateStatusRequest(BaseModel):
    """Body of POST /api/content/update-status (called by n8n)."""
    content_id: str | None = None
    status: str | None = None
    secret: str | None = None


class TriggerCreationRequest(BaseModel):
    """Body of POST /api/content/trigger-creation."""
    content_id: str | None = None
    secret: str | None = None

    model_config = ConfigDict(extra="allow")


# =============================================================================
# User Requests
# =============================================================================

class FinalizeRecordingRequest(BaseModel):
    """Audio URL of an uploaded recording."""
    audio_url: str = Field(..., min_length=1, description="Public URL of the uploaded audio")


class FinalizeVideoUploadRequest(BaseModel):
    """Public URL of a video the browser finished uploading."""
    video_url: str = Field(..., min_length=1)


class ContentFieldUpdateRequest(BaseModel):
    """
    Update one editable text field of a content item.

    Example:
        {"field_name": "transcript", "value": "Corrected transcript..."}
    """
    field_name: Literal["transcript", "research", "video_script"]
    value: str


class ContentAssetUpdateRequest(BaseModel):
    """
    PATCH /api/content-assets/{id}.

    use_temporary_image and cancel_temporary_image are mutually exclusive
    with image_url; image_prompt may accompany any of them.
    """
    image_url: str | None = None
    image_prompt: str | None = None
    use_temporary_image: bool = False
    cancel_temporary_image: bool = False

    model_config = ConfigDict(extra="ignore")


class AvatarVideoRequest(BaseModel):
    """Render the video script as a long or short AI avatar video."""
    video_type: Literal["long", "short"] = "long"


class AssetApprovalRequest(BaseModel):
    approved: bool = True


class AssetScheduleRequest(BaseModel):
    """Schedule a single asset for publication."""
    scheduled_at: datetime


class ImageRegenerationRequest(BaseModel):
    """POST /api/image-regeneration."""
    content_asset_id: str | None = None
    image_prompt: str | None = None

    @field_validator("image_prompt")
    @classmethod
    def strip_prompt(cls, value: str | None) -> str | None:
        return value.strip() if value is not None else None


class UploadConfigResponse(BaseModel):
    """Parameters the browser needs for a resumable (TUS) upload."""
    endpoint: str
    bucket_name: str
    object_name: str
    content_type: str
    chunk_size: int
    max_file_size: int
    allowed_types: list[str]
    headers: dict[str, Any]


class ContentListItem(BaseModel):
    """Content row plus derived status, for list views."""
    content: ContentResponse
    derived_status: str
    status_label: str
    asset_count: int
