# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Supabase JWT verification for the user-facing endpoints. Workflow-facing
# endpoints authenticate with the shared n8n secret instead.
# =============================================================================

from app.auth.dependencies import (
    decode_access_token,
    get_current_user,
)
from app.auth.models import AuthUser, UserResponse

__all__ = [
    "decode_access_token",
    "get_current_user",
    "AuthUser",
    "UserResponse",
]
