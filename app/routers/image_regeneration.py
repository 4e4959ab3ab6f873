# =============================================================================
# app/routers/image_regeneration.py - Image Regeneration Endpoint
# =============================================================================

from fastapi import APIRouter

from app.dependencies import BusinessId
from core.models.content import ImageRegenerationRequest
from core.services.asset_service import AssetService

router = APIRouter()


@router.post("")
async def regenerate_image(request: ImageRegenerationRequest, business_id: BusinessId):
    """
    Ask the image workflow for a new image for one asset.

    When ENABLE_IMAGE_REGENERATION_RATE_LIMIT is on, a business gets 5
    regenerations per 10 minutes. The new image arrives as the asset's
    temporary image.
    """
    return AssetService.regenerate_image(
        request.content_asset_id or "",
        business_id,
        request.image_prompt or "",
    )
