# =============================================================================
# app/routers/integrations.py - Integration Settings Endpoints
# =============================================================================
# Email provider:
#   POST       /email-integration/validate   check a key before saving
#   GET|POST   /email-integration/groups     groups of the saved provider
#   PUT|DELETE /email-integration
# Blog:
#   POST       /blog-integration/validate
#   PUT|DELETE /blog-integration
# AI avatar:
#   PUT|DELETE /ai-avatar-integration
#
# Secrets are stored through vault RPCs and never returned to the client.
# =============================================================================

import logging

from fastapi import APIRouter

from app.dependencies import BusinessId, CurrentUser
from core.models.integrations import (
    AvatarIntegrationRequest,
    BlogIntegrationRequest,
    BlogValidationRequest,
    EmailIntegrationRequest,
    EmailValidationRequest,
)
from core.services.integration_service import IntegrationService

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Email
# =============================================================================

@router.post("/email-integration/validate")
async def validate_email_integration(request: EmailValidationRequest, user: CurrentUser):
    """
    Validate an email provider API key.

    Returns the number of groups/lists the key can see.
    """
    return IntegrationService.validate_email_key(request.provider, request.api_key)


@router.get("/email-integration/groups")
async def get_email_groups(business_id: BusinessId):
    """Groups (MailerLite), lists (Mailchimp) or contact lists (Brevo)."""
    return IntegrationService.list_email_groups(business_id)


@router.post("/email-integration/groups")
async def refresh_email_groups(business_id: BusinessId):
    return IntegrationService.list_email_groups(business_id)


@router.put("/email-integration")
async def save_email_integration(request: EmailIntegrationRequest, business_id: BusinessId):
    return IntegrationService.save_email_integration(business_id, request)


@router.delete("/email-integration")
async def delete_email_integration(business_id: BusinessId):
    return IntegrationService.delete_email_integration(business_id)


# =============================================================================
# Blog
# =============================================================================

@router.post("/blog-integration/validate")
async def validate_blog_integration(request: BlogValidationRequest, user: CurrentUser):
    """
    Validate WordPress (site URL + username + application password) or
    Wix (API key) credentials.
    """
    return IntegrationService.validate_blog_credentials(
        request.provider, request.credential, request.site_url, request.username
    )


@router.put("/blog-integration")
async def save_blog_integration(request: BlogIntegrationRequest, business_id: BusinessId):
    return IntegrationService.save_blog_integration(business_id, request)


@router.delete("/blog-integration")
async def delete_blog_integration(business_id: BusinessId):
    return IntegrationService.delete_blog_integration(business_id)


# =============================================================================
# AI Avatar
# =============================================================================

@router.put("/ai-avatar-integration")
async def save_avatar_integration(request: AvatarIntegrationRequest, business_id: BusinessId):
    """Store the HeyGen API key with the avatar and voice to render with."""
    return IntegrationService.save_avatar_integration(business_id, request)


@router.delete("/ai-avatar-integration")
async def delete_avatar_integration(business_id: BusinessId):
    return IntegrationService.delete_avatar_integration(business_id)
