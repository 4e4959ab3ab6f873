# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .storage_service import StorageService
from .content_service import ContentService
from .video_upload_service import VideoUploadService
from .asset_service import AssetService
from .callback_service import CallbackService
from .upload_service import UploadService
from .integration_service import IntegrationService
from .business_service import BusinessService

__all__ = [
    "StorageService",
    "ContentService",
    "VideoUploadService",
    "AssetService",
    "CallbackService",
    "UploadService",
    "IntegrationService",
    "BusinessService",
]
