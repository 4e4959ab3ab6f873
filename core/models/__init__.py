# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - content.py: Content, content asset and workflow callback schemas
# - integrations.py: Email, blog and AI avatar integration requests
# - business.py: Business settings schemas
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Content Models - source media and generated assets
# -----------------------------------------------------------------------------
from .content import (
    EDITABLE_CONTENT_FIELDS,
    WORKFLOW_SETTABLE_STATUSES,
    AssetApprovalRequest,
    AvatarVideoRequest,
    AssetScheduleRequest,
    CallbackPayload,
    ContentAssetResponse,
    ContentAssetUpdateRequest,
    ContentFieldUpdateRequest,
    ContentListItem,
    ContentResponse,
    ContentStatus,
    FinalizeRecordingRequest,
    FinalizeVideoUploadRequest,
    GenerationStatus,
    HeygenStatus,
    ImageRegenerationRequest,
    ProjectType,
    TriggerCreationRequest,
    UpdateStatusRequest,
    UploadConfigResponse,
)

# -----------------------------------------------------------------------------
# Integration Models - third-party providers
# -----------------------------------------------------------------------------
from .integrations import (
    AvatarIntegrationRequest,
    BlogIntegrationRequest,
    BlogValidationRequest,
    CredentialsRequest,
    EmailIntegrationRequest,
    EmailValidationRequest,
)

# -----------------------------------------------------------------------------
# Business Models
# -----------------------------------------------------------------------------
from .business import BusinessResponse, BusinessUpdate

__all__ = [
    # Content
    "EDITABLE_CONTENT_FIELDS",
    "WORKFLOW_SETTABLE_STATUSES",
    "AssetApprovalRequest",
    "AvatarVideoRequest",
    "AssetScheduleRequest",
    "CallbackPayload",
    "ContentAssetResponse",
    "ContentAssetUpdateRequest",
    "ContentFieldUpdateRequest",
    "ContentListItem",
    "ContentResponse",
    "ContentStatus",
    "FinalizeRecordingRequest",
    "FinalizeVideoUploadRequest",
    "GenerationStatus",
    "HeygenStatus",
    "ImageRegenerationRequest",
    "ProjectType",
    "TriggerCreationRequest",
    "UpdateStatusRequest",
    "UploadConfigResponse",
    # Integrations
    "AvatarIntegrationRequest",
    "BlogIntegrationRequest",
    "BlogValidationRequest",
    "CredentialsRequest",
    "EmailIntegrationRequest",
    "EmailValidationRequest",
    # Business
    "BusinessResponse",
    "BusinessUpdate",
]
