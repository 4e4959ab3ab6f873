# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# One Settings object shared by the API and the Celery worker. Values come
# from the process environment first, then from .env in the working
# directory; empty variables count as unset.
#
# Workflow webhook URLs are optional: endpoints that need a missing URL
# fail with a clear "not configured" error instead of blocking startup.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key (handed to upload clients)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        default="",
        description="Legacy HS256 JWT secret for verifying access tokens"
    )

    # Public URL of the storage API when running Supabase locally.
    # Local public URLs (127.0.0.1:54321) are rewritten to this so that
    # n8n can reach uploaded media.
    SUPABASE_EXTERNAL_URL: str | None = Field(
        default=None,
        description="Externally reachable Supabase URL for local development"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (Celery broker + rate limit counters)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery and rate limiting"
    )

    # -------------------------------------------------------------------------
    # n8n Workflow Engine
    # -------------------------------------------------------------------------

    N8N_WEBHOOK_URL: str | None = Field(
        default=None,
        description="Webhook for the audio transcription workflow"
    )

    N8N_API_KEY: str | None = Field(
        default=None,
        description="API key sent as X-N8N-API-KEY to the audio workflow"
    )

    N8N_WEBHOOK_URL_VIDEO_TRANSCRIPTION: str | None = Field(
        default=None,
        description="Webhook for the uploaded-video transcription workflow"
    )

    N8N_WEBHOOK_URL_CONTENT_CREATION: str | None = Field(
        default=None,
        description="Webhook for the content creation workflow"
    )

    N8N_WEBHOOK_IMAGE_REGENERATION: str | None = Field(
        default=None,
        description="Webhook for the image regeneration workflow"
    )

    N8N_WEBHOOK_URL_AVATAR_VIDEO: str | None = Field(
        default=None,
        description="Webhook for the AI avatar video workflow"
    )

    N8N_CALLBACK_SECRET: str | None = Field(
        default=None,
        description="Shared secret n8n sends back on callbacks"
    )

    N8N_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for outbound webhook calls"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment (forwarded to n8n as 'environment')"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, error details)"
    )

    APP_URL: str = Field(
        default="http://localhost:8000",
        description="Public base URL of this API (used to build callback URLs)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Rate Limiting
    # -------------------------------------------------------------------------

    RATE_LIMIT_ENABLED: bool = Field(
        default=True,
        description="Enable Redis-backed request rate limiting"
    )

    ENABLE_IMAGE_REGENERATION_RATE_LIMIT: bool = Field(
        default=False,
        description="Limit image regenerations per business"
    )

    IMAGE_REGENERATION_LIMIT: int = Field(
        default=5,
        ge=1,
        description="Image regenerations allowed per business per window"
    )

    IMAGE_REGENERATION_WINDOW_MINUTES: int = Field(
        default=10,
        ge=1,
        description="Window for the image regeneration limit"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """CORS_ORIGINS split on commas, blanks dropped."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def callback_url(self) -> str:
        """URL n8n should POST workflow results to."""
        return f"{self.APP_URL.rstrip('/')}/api/n8n/callback"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """Built once per process; tests patch attributes on the instance."""
    return Settings()


settings = get_settings()
