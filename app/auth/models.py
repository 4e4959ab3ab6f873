# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================

from uuid import UUID
from typing import Optional

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """
    Caller identity taken from a verified Supabase JWT.

    Only the token claims; the business is resolved separately from
    the profiles table.
    """
    id: UUID
    email: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class UserResponse(BaseModel):
    """
    GET /auth/me: token identity joined with the caller's profile row.
    """
    id: UUID
    email: Optional[str] = None
    business_id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_admin: bool = False
