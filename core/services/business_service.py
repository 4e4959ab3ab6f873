# =============================================================================
# core/services/business_service.py - Business Settings
# =============================================================================
# Read and partial update of the caller's business: brand voice, calls to
# action, colours and contact details. These fields feed every content
# creation payload sent to n8n.
# =============================================================================

import logging
from typing import Any

from lib.supabase_client import SupabaseClient
from core.models.business import BusinessUpdate
from app.exceptions import BusinessNotFoundError, InvalidRequestError

logger = logging.getLogger(__name__)


class BusinessService:
    """Service for business settings."""

    @staticmethod
    def get_business(business_id: str) -> dict[str, Any]:
        business = SupabaseClient.fetch_business(business_id)
        if not business:
            raise BusinessNotFoundError()
        return business

    @staticmethod
    def update_business(business_id: str, update: BusinessUpdate) -> dict[str, Any]:
        """
        Apply the fields present in the request; omitted fields are untouched.

        Raises:
            InvalidRequestError: If the request sets no fields
            BusinessNotFoundError: If no row matched
        """
        data = update.model_dump(exclude_unset=True)
        if not data:
            raise InvalidRequestError("No valid fields to update")

        client = SupabaseClient.get_client()
        response = (
            client.table("businesses")
            .update(data)
            .eq("id", business_id)
            .execute()
        )
        if not response.data:
            raise BusinessNotFoundError()

        logger.info(f"Updated business {business_id}: {sorted(data)}")
        return response.data[0]
