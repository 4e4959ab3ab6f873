# =============================================================================
# core/models/business.py - Business Settings Schemas
# =============================================================================
# The business profile feeds every generation run: brand voice, calls to
# action, sign-offs and colours are all forwarded to the content creation
# workflow.
# =============================================================================

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class BusinessResponse(BaseModel):
    """A business row as returned to its members."""
    id: str
    business_name: str | None = None
    website_url: str | None = None
    contact_email: str | None = None
    contact_url: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    writing_style_guide: str | None = None
    cta_youtube: str | None = None
    cta_email: str | None = None
    cta_social_long: str | None = None
    cta_social_short: str | None = None
    booking_link: str | None = None
    email_name_token: str | None = None
    email_sign_off: str | None = None
    social_media_profiles: Any = None
    social_media_integrations: Any = None
    color_primary: str | None = None
    color_secondary: str | None = None
    color_background: str | None = None
    color_highlight: str | None = None
    timezone: str | None = None

    model_config = ConfigDict(extra="ignore")


class BusinessUpdate(BaseModel):
    """
    PATCH /api/business. Only fields present in the body are written.

    Example:
        {"writing_style_guide": "Friendly, short sentences", "color_primary": "#0f172a"}
    """
    business_name: str | None = Field(default=None, max_length=200)
    website_url: str | None = None
    contact_email: str | None = None
    contact_url: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    writing_style_guide: str | None = None
    cta_youtube: str | None = None
    cta_email: str | None = None
    cta_social_long: str | None = None
    cta_social_short: str | None = None
    booking_link: str | None = None
    email_name_token: str | None = None
    email_sign_off: str | None = None
    social_media_profiles: Any = None
    color_primary: str | None = None
    color_secondary: str | None = None
    color_background: str | None = None
    color_highlight: str | None = None
    timezone: str | None = None

    model_config = ConfigDict(extra="forbid")
