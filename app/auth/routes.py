# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Sign-up and login happen client-side against Supabase Auth. These routes
# only describe the caller behind a token.
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, UserResponse
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    user: AuthUser = Depends(get_current_user)
) -> UserResponse:
    """
    Current user with their profile (business, name, admin flag).

    A user whose profile row doesn't exist yet gets token data only.
    """
    client = SupabaseClient.get_client()
    profile: dict = {}

    try:
        response = (
            client.table("profiles")
            .select("business_id, first_name, last_name, is_admin")
            .eq("id", str(user.id))
            .limit(1)
            .execute()
        )
        profile = SupabaseClient._first(response.data) or {}
    except Exception as e:
        logger.warning(f"Could not fetch profile for {user.id}: {e}")

    return UserResponse(
        id=user.id,
        email=user.email,
        business_id=profile.get("business_id"),
        first_name=profile.get("first_name"),
        last_name=profile.get("last_name"),
        is_admin=bool(profile.get("is_admin")),
    )


@router.get("/verify")
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """Cheap check that a stored token is still valid."""
    return {
        "valid": True,
        "user_id": str(user.id),
        "email": user.email
    }
