# =============================================================================
# app/routers/content_assets.py - Content Asset Endpoints
# =============================================================================
# Review of generated assets:
#   GET   /{asset_id}            editor fields
#   PATCH /{asset_id}            image URL/prompt, promote or discard temp image
#   POST  /{asset_id}/approve    approval flag
#   POST  /{asset_id}/schedule   per-asset publication time
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path

from app.dependencies import BusinessId
from core.models.content import (
    AssetApprovalRequest,
    AssetScheduleRequest,
    ContentAssetUpdateRequest,
)
from core.services.asset_service import AssetService

router = APIRouter()

AssetIdPath = Annotated[str, Path(description="Content asset UUID")]


@router.get("/{asset_id}")
async def get_content_asset(asset_id: AssetIdPath, business_id: BusinessId):
    return {"success": True, "contentAsset": AssetService.get_asset(asset_id, business_id)}


@router.patch("/{asset_id}")
async def update_content_asset(
    asset_id: AssetIdPath,
    request: ContentAssetUpdateRequest,
    business_id: BusinessId,
):
    """
    Update an asset's image.

    - use_temporary_image: copy the regenerated image into storage and
      make it the asset image
    - cancel_temporary_image: discard the regenerated image
    - image_url / image_prompt: set directly
    """
    asset = AssetService.update_asset(asset_id, business_id, request)
    return {"success": True, "contentAsset": asset}


@router.post("/{asset_id}/approve")
async def approve_content_asset(
    asset_id: AssetIdPath,
    business_id: BusinessId,
    request: AssetApprovalRequest | None = None,
):
    approved = request.approved if request else True
    asset = AssetService.set_approval(asset_id, business_id, approved)
    return {"success": True, "contentAsset": asset}


@router.post("/{asset_id}/schedule")
async def schedule_content_asset(
    asset_id: AssetIdPath,
    request: AssetScheduleRequest,
    business_id: BusinessId,
):
    """Schedule the asset; every asset of its content must be approved."""
    asset = AssetService.schedule_asset(asset_id, business_id, request.scheduled_at)
    return {"success": True, "contentAsset": asset}
