# =============================================================================
# app/routers/business.py - Business Settings Endpoints
# =============================================================================

from fastapi import APIRouter

from app.dependencies import BusinessId
from core.models.business import BusinessResponse, BusinessUpdate
from core.services.business_service import BusinessService

router = APIRouter()


@router.get("", response_model=BusinessResponse)
async def get_business(business_id: BusinessId):
    return BusinessService.get_business(business_id)


@router.patch("", response_model=BusinessResponse)
async def update_business(request: BusinessUpdate, business_id: BusinessId):
    """
    Update business settings.

    Only fields present in the body change; send null to clear a field.
    """
    return BusinessService.update_business(business_id, request)
