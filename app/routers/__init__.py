# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - n8n.py: Workflow callback and credential endpoints
# - content.py: Recordings, listing, edits and workflow status updates
# - video_upload.py: Resumable video upload bookkeeping
# - content_assets.py: Asset review, approval and scheduling
# - image_regeneration.py: New images for an asset
# - uploads.py: Multipart audio/image uploads
# - integrations.py: Email, blog and AI avatar integrations
# - business.py: Business settings
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import n8n
from . import content
from . import video_upload
from . import content_assets
from . import image_regeneration
from . import uploads
from . import integrations
from . import business

__all__ = [
    "health",
    "n8n",
    "content",
    "video_upload",
    "content_assets",
    "image_regeneration",
    "uploads",
    "integrations",
    "business",
]
