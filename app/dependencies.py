# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources:
# - CurrentUser / BusinessId: the caller and the business they belong to
# - rate_limit(preset): per-caller Redis request budget
# =============================================================================

import logging
from typing import Annotated, Callable

from fastapi import Depends, Request

from lib.supabase_client import SupabaseClient
from lib.rate_limit import RATE_LIMIT_PRESETS, RateLimiter, get_request_identifier
from app.auth import AuthUser, get_current_user
from app.exceptions import BusinessNotFoundError, RateLimitExceededError

logger = logging.getLogger(__name__)

CurrentUser = Annotated[AuthUser, Depends(get_current_user)]


def get_current_business_id(user: CurrentUser) -> str:
    """
    Resolve the caller's business from profiles.business_id.

    Raises:
        BusinessNotFoundError: If the profile has no business yet
    """
    business_id = SupabaseClient.fetch_business_id_for_user(user.id)
    if not business_id:
        logger.info(f"User {user.id} has no business")
        raise BusinessNotFoundError(str(user.id))
    return str(business_id)


BusinessId = Annotated[str, Depends(get_current_business_id)]


def rate_limit(preset: str = "default") -> Callable[[Request], None]:
    """
    Build a dependency that spends one request of a rate limit preset.

    Usage:
        @router.post("/upload-audio", dependencies=[Depends(rate_limit("upload"))])
    """
    config = RATE_LIMIT_PRESETS[preset]

    def check_rate_limit(request: Request) -> None:
        identifier = get_request_identifier(
            request.headers,
            client_host=request.client.host if request.client else None,
        )
        result = RateLimiter.check(identifier, config)
        if not result.allowed:
            logger.warning(f"Rate limit {preset} exceeded for {identifier}")
            raise RateLimitExceededError(
                "Too many requests. Please try again later.",
                retry_after=result.retry_after,
            )

    return check_rate_limit
