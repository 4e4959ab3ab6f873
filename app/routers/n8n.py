# =============================================================================
# app/routers/n8n.py - Workflow Engine Endpoints
# =============================================================================
# Endpoints called by n8n, not by users:
# - POST /api/n8n/callback            workflow completion reports
# - POST /api/n8n/email-credentials   decrypted email provider config
# - POST /api/n8n/blog-credentials    decrypted blog config
#
# The workflows depend on these exact response bodies, so errors are
# returned as plain {"error": ...} JSON rather than raised.
# =============================================================================

import hmac
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.config import settings
from core.models.content import CallbackPayload
from core.models.integrations import CredentialsRequest
from core.services.callback_service import CallbackService
from core.services.integration_service import IntegrationService

logger = logging.getLogger(__name__)

router = APIRouter()

CALLBACK_SECRET_HEADER = "x-n8n-callback-secret"


def callback_secret_mismatch(received: str | None) -> bool:
    """
    True only when a secret was sent, one is configured, and they differ.

    Workflows that send no header are let through.
    """
    expected = settings.N8N_CALLBACK_SECRET
    if not received or not expected:
        return False
    return not hmac.compare_digest(received, expected)


def bearer_matches_callback_secret(authorization: str | None) -> bool:
    """Credential endpoints require `Authorization: Bearer <callback secret>`."""
    expected = settings.N8N_CALLBACK_SECRET
    if not expected or not authorization:
        return False
    return hmac.compare_digest(authorization, f"Bearer {expected}")


async def _business_id_from_body(request: Request) -> str | None:
    body = await request.json()
    if not isinstance(body, dict):
        return None
    return CredentialsRequest.model_validate(body).business_id


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/callback")
async def workflow_callback(request: Request):
    """
    Receive a workflow completion report.

    Handles transcription, content creation, image regeneration and AI
    avatar results; see CallbackService for the routing rules.
    """
    if callback_secret_mismatch(request.headers.get(CALLBACK_SECRET_HEADER)):
        logger.warning("N8N callback secret mismatch")
        return JSONResponse(status_code=401, content={"error": "Unauthorized"})

    try:
        payload = CallbackPayload.model_validate(await request.json())
    except Exception as e:
        logger.error(f"N8N callback error: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "details": str(e)},
        )

    status_code, body = CallbackService.handle(payload)
    return JSONResponse(status_code=status_code, content=body)


@router.post("/email-credentials")
async def email_credentials(request: Request):
    """Email provider, decrypted API key and sender settings for a business."""
    if not bearer_matches_callback_secret(request.headers.get("authorization")):
        return JSONResponse(status_code=401, content={"error": "Unauthorized access"})

    try:
        business_id = await _business_id_from_body(request)
        status_code, body = IntegrationService.email_credentials_for_workflow(business_id)
    except Exception as e:
        logger.error(f"Email credentials API error: {e}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    return JSONResponse(status_code=status_code, content=body)


@router.post("/blog-credentials")
async def blog_credentials(request: Request):
    """Active blog provider, site and decrypted app password for a business."""
    if not bearer_matches_callback_secret(request.headers.get("authorization")):
        return JSONResponse(status_code=401, content={"error": "Unauthorized access"})

    try:
        business_id = await _business_id_from_body(request)
        status_code, body = IntegrationService.blog_credentials_for_workflow(business_id)
    except Exception as e:
        logger.error(f"Blog credentials API error: {e}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    return JSONResponse(status_code=status_code, content=body)
