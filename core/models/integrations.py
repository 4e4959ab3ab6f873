# =============================================================================
# core/models/integrations.py - Third-Party Integration Schemas
# =============================================================================
# Request bodies for connecting a business to:
# - an email marketing provider (MailerLite, Mailchimp, Brevo)
# - a blog platform (WordPress, Wix)
# - an AI avatar video provider (HeyGen)
#
# Secrets in these bodies go straight to the vault RPCs and are never
# stored in plain columns or logged.
# =============================================================================

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


EmailProviderName = Literal["mailerlite", "mailchimp", "brevo"]
BlogProviderName = Literal["wordpress", "wix"]


class EmailValidationRequest(BaseModel):
    """
    POST /api/email-integration/validate.

    Kept loose (plain str) so unknown providers get the
    "Invalid email provider" message instead of a 422.
    """
    provider: str | None = None
    api_key: str | None = Field(default=None, alias="apiKey")

    model_config = ConfigDict(populate_by_name=True)


class EmailIntegrationRequest(BaseModel):
    """
    PUT /api/email-integration.

    Example:
        {
            "provider": "mailerlite",
            "api_key": "ml-...",
            "sender_name": "Jane from Acme",
            "sender_email": "jane@acme.com",
            "selected_group_id": "123",
            "selected_group_name": "Newsletter"
        }
    """
    provider: EmailProviderName
    api_key: str = Field(..., min_length=1)
    sender_name: str | None = None
    sender_email: str | None = None
    selected_group_id: str | None = None
    selected_group_name: str | None = None


class BlogValidationRequest(BaseModel):
    """POST /api/blog-integration/validate (camelCase keys from the form)."""
    provider: str | None = None
    credential: str | None = None
    site_url: str | None = Field(default=None, alias="siteUrl")
    username: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class BlogIntegrationRequest(BaseModel):
    """PUT /api/blog-integration."""
    provider: BlogProviderName
    credential: str = Field(..., min_length=1, description="App password or API key")
    username: str | None = None
    site_url: str | None = None


class AvatarIntegrationRequest(BaseModel):
    """PUT /api/ai-avatar-integration (HeyGen)."""
    provider: Literal["heygen"] = "heygen"
    api_key: str = Field(..., min_length=1)
    avatar_id: str = Field(..., min_length=1, description="Avatar ID is required.")
    voice_id: str = Field(..., min_length=1, description="Voice ID is required.")
    config: dict[str, Any] = Field(default_factory=dict)


class CredentialsRequest(BaseModel):
    """Body of the n8n credential lookups."""
    business_id: str | None = None
