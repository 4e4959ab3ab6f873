# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Verifies Supabase access tokens sent as `Authorization: Bearer <jwt>`.
#
# Two signing schemes are accepted:
# - HS256 with the project JWT secret (legacy projects, local stacks)
# - ES256 (and other asymmetric algs) through the project JWKS, which is
#   fetched from {SUPABASE_URL}/auth/v1/.well-known/jwks.json and cached
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

import logging
import time
from typing import Any
from uuid import UUID

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError

from app.config import settings
from app.auth.models import AuthUser

logger = logging.getLogger(__name__)

security = HTTPBearer()

TOKEN_AUDIENCE = "authenticated"
JWKS_CACHE_TTL = 3600  # seconds

_jwks_cache: dict[str, Any] = {}
_jwks_fetched_at: float = 0


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _fetch_jwks() -> dict[str, Any]:
    """Project JWKS, refreshed hourly. A stale copy is kept if refresh fails."""
    global _jwks_cache, _jwks_fetched_at

    now = time.time()
    if _jwks_cache and (now - _jwks_fetched_at) < JWKS_CACHE_TTL:
        return _jwks_cache

    jwks_url = f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1/.well-known/jwks.json"
    try:
        response = httpx.get(jwks_url, timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        _jwks_fetched_at = now
        logger.debug(f"Fetched JWKS from {jwks_url}")
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch JWKS: {e}")

    return _jwks_cache or {"keys": []}


def _signing_key_for(token: str) -> tuple[Any, str]:
    """
    Pick the verification key and algorithm from the token header.

    Returns:
        (key, algorithm); falls back to the HS256 secret when no JWK matches
    """
    try:
        header = jwt.get_unverified_header(token)
    except JWTError:
        return settings.SUPABASE_JWT_SECRET, "HS256"

    alg = header.get("alg", "HS256")
    kid = header.get("kid")

    if alg != "HS256" and kid:
        for key in _fetch_jwks().get("keys", []):
            if key.get("kid") == kid:
                return key, alg
        logger.warning(f"No JWK found for alg={alg}, kid={kid}, falling back to HS256")

    return settings.SUPABASE_JWT_SECRET, "HS256"


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify a Supabase access token and return its claims.

    Raises:
        ExpiredSignatureError: Token expired
        JWTError: Bad signature, audience or format
    """
    key, algorithm = _signing_key_for(token)
    return jwt.decode(token, key, algorithms=[algorithm], audience=TOKEN_AUDIENCE)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> AuthUser:
    """
    Resolve the caller from their bearer token.

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
    """
    try:
        claims = decode_access_token(credentials.credentials)
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized(f"Invalid token: {e}")

    subject = claims.get("sub")
    if not subject:
        raise _unauthorized("Invalid token: missing user ID")

    try:
        user_id = UUID(subject)
    except ValueError:
        logger.warning(f"Invalid UUID in token: {subject}")
        raise _unauthorized("Invalid token: malformed user ID")

    return AuthUser(id=user_id, email=claims.get("email"))
