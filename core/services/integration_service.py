# =============================================================================
# core/services/integration_service.py - Third-Party Integrations
# =============================================================================
# Email (MailerLite / Mailchimp / Brevo), blog (WordPress / Wix) and AI
# avatar (HeyGen) integrations.
#
# Secrets never touch our tables: they are written and read through vault
# RPCs that encrypt server-side. The *_integrations tables only hold the
# provider name, status and non-secret settings.
#
# Two audiences:
# - Users configure integrations (validate, save, delete); errors raise
# - n8n fetches decrypted credentials; these return (status, body) because
#   the workflows depend on the exact response shapes
# =============================================================================

import logging
from typing import Any

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.email_providers import (
    SUPPORTED_EMAIL_PROVIDERS,
    validate_email_provider_and_fetch_groups,
)
from lib.blog_providers import (
    TROUBLESHOOTING_STEPS,
    BlogValidationError,
    validate_blog_provider,
)
from core.models.integrations import (
    AvatarIntegrationRequest,
    BlogIntegrationRequest,
    EmailIntegrationRequest,
)
from app.exceptions import (
    BusinessNotFoundError,
    IntegrationNotConfiguredError,
    InvalidRequestError,
    ProviderValidationError,
    VaultError,
)

logger = logging.getLogger(__name__)

ACTIVE = "active"

# Decrypts the active email_integrations secret for a business
EMAIL_SECRET_RPC = "get_email_secret_v2"

EMAIL_INTEGRATION_COLUMNS = (
    "provider, secret_id, sender_name, sender_email, "
    "selected_group_id, selected_group_name, status"
)
BLOG_INTEGRATION_COLUMNS = "provider, username, site_url, status"
AVATAR_INTEGRATION_COLUMNS = "provider, avatar_id, voice_id, config, status"

WorkflowResult = tuple[int, dict[str, Any]]


def _active_integration(table: str, columns: str, business_id: str) -> dict[str, Any] | None:
    client = SupabaseClient.get_client()
    response = (
        client.table(table)
        .select(columns)
        .eq("business_id", business_id)
        .eq("status", ACTIVE)
        .limit(1)
        .execute()
    )
    return SupabaseClient._first(response.data)


class IntegrationService:
    """
    Service for email, blog and AI avatar integrations.

    Usage:
        IntegrationService.validate_email_key("mailerlite", api_key)
        IntegrationService.save_email_integration(business_id, request)
    """

    # -------------------------------------------------------------------------
    # Email
    # -------------------------------------------------------------------------

    @staticmethod
    def get_email_integration(business_id: str) -> dict[str, Any] | None:
        return _active_integration("email_integrations", EMAIL_INTEGRATION_COLUMNS, business_id)

    @staticmethod
    def validate_email_key(provider: str | None, api_key: str | None) -> dict[str, Any]:
        """
        Check an API key against the provider before it is saved.

        Returns:
            {"success": True, "message": "API key is valid", "groupCount": n}

        Raises:
            InvalidRequestError: Missing fields or unknown provider
            ProviderValidationError: The provider rejected the key
        """
        if not provider or not api_key:
            raise InvalidRequestError("Provider and API key are required")
        if provider not in SUPPORTED_EMAIL_PROVIDERS:
            raise InvalidRequestError("Invalid email provider", details={"provider": provider})

        result = validate_email_provider_and_fetch_groups(provider, api_key)
        if not result.success:
            raise ProviderValidationError(result.error or "Validation failed", provider)

        return {
            "success": True,
            "message": "API key is valid",
            "groupCount": len(result.groups or []),
        }

    @staticmethod
    def list_email_groups(business_id: str) -> dict[str, Any]:
        """
        Fetch the groups/lists of the business's configured email provider.

        Raises:
            BusinessNotFoundError: If the business is gone
            IntegrationNotConfiguredError: No active email integration
            VaultError: The stored key can't be read
            ProviderValidationError: The provider rejected the stored key
        """
        if not SupabaseClient.fetch_business(business_id):
            raise BusinessNotFoundError()

        integration = IntegrationService.get_email_integration(business_id)
        if not integration or not integration.get("provider") or not integration.get("secret_id"):
            raise IntegrationNotConfiguredError(
                "Email provider not configured. Please set up your email integration first."
            )

        provider = integration["provider"]
        try:
            api_key = SupabaseClient.call_rpc(EMAIL_SECRET_RPC, {"p_business_id": business_id})
        except SupabaseClientError as e:
            logger.error(f"Error retrieving email API key: {e.message}")
            api_key = None
        if not api_key:
            raise VaultError(
                "Unable to retrieve API key. Please reconfigure your email integration."
            )

        result = validate_email_provider_and_fetch_groups(provider, api_key)
        if not result.success:
            raise ProviderValidationError(result.error or "Validation failed", provider)

        if not result.groups:
            return {
                "success": True,
                "groups": [],
                "message": f"No email groups found in your {provider} account. Please create a group first.",
            }
        return result.model_dump()

    @staticmethod
    def save_email_integration(business_id: str, request: EmailIntegrationRequest) -> dict[str, Any]:
        """
        Validate and store an email integration.

        The key goes to the vault through set_email_integration; the chosen
        group is written on the integration row afterwards.
        """
        IntegrationService.validate_email_key(request.provider, request.api_key)

        try:
            integration_id = SupabaseClient.call_rpc(
                "set_email_integration",
                {
                    "p_business_id": business_id,
                    "p_provider": request.provider,
                    "p_api_key": request.api_key,
                    "p_sender_name": request.sender_name,
                    "p_sender_email": request.sender_email,
                },
            )
        except SupabaseClientError as e:
            logger.error(f"Error saving email integration for {business_id}: {e.message}")
            raise VaultError("Failed to save email integration", error=e.message)

        if request.selected_group_id is not None:
            client = SupabaseClient.get_client()
            (
                client.table("email_integrations")
                .update({
                    "selected_group_id": request.selected_group_id,
                    "selected_group_name": request.selected_group_name,
                })
                .eq("business_id", business_id)
                .execute()
            )

        logger.info(f"Saved {request.provider} email integration for business {business_id}")
        return {"success": True, "integration_id": integration_id}

    @staticmethod
    def delete_email_integration(business_id: str) -> dict[str, Any]:
        try:
            SupabaseClient.call_rpc("delete_email_integration", {"p_business_id": business_id})
        except SupabaseClientError as e:
            raise VaultError("Failed to delete email integration", error=e.message)
        logger.info(f"Deleted email integration for business {business_id}")
        return {"success": True}

    # -------------------------------------------------------------------------
    # Blog
    # -------------------------------------------------------------------------

    @staticmethod
    def validate_blog_credentials(
        provider: str | None,
        credential: str | None,
        site_url: str | None = None,
        username: str | None = None,
    ) -> dict[str, Any]:
        """
        Check blog credentials and describe what they can do.

        Returns:
            {"success": True, "siteInfo": {...}}

        Raises:
            InvalidRequestError: Missing fields or unsupported provider
            ProviderValidationError: The site rejected the credentials
        """
        if not provider or not credential:
            raise InvalidRequestError("Provider and credential are required")

        try:
            site_info = validate_blog_provider(provider, credential, site_url, username)
        except ValueError as e:
            raise InvalidRequestError(str(e))
        except BlogValidationError as e:
            logger.info(f"{provider} credentials rejected: {e.message}")
            raise ProviderValidationError(e.message, provider, troubleshooting=TROUBLESHOOTING_STEPS)

        return {"success": True, "siteInfo": site_info.model_dump(by_alias=True)}

    @staticmethod
    def save_blog_integration(business_id: str, request: BlogIntegrationRequest) -> dict[str, Any]:
        result = IntegrationService.validate_blog_credentials(
            request.provider, request.credential, request.site_url, request.username
        )

        try:
            integration_id = SupabaseClient.call_rpc(
                "set_blog_integration",
                {
                    "p_business_id": business_id,
                    "p_provider": request.provider,
                    "p_credential": request.credential,
                    "p_username": request.username,
                    "p_site_url": request.site_url,
                },
            )
        except SupabaseClientError as e:
            logger.error(f"Error saving blog integration for {business_id}: {e.message}")
            raise VaultError("Failed to save blog integration", error=e.message)

        logger.info(f"Saved {request.provider} blog integration for business {business_id}")
        return {"success": True, "integration_id": integration_id, "siteInfo": result["siteInfo"]}

    @staticmethod
    def delete_blog_integration(business_id: str) -> dict[str, Any]:
        try:
            SupabaseClient.call_rpc("delete_blog_integration", {"p_business_id": business_id})
        except SupabaseClientError as e:
            raise VaultError("Failed to delete blog integration", error=e.message)
        logger.info(f"Deleted blog integration for business {business_id}")
        return {"success": True}

    # -------------------------------------------------------------------------
    # AI Avatar (HeyGen)
    # -------------------------------------------------------------------------

    @staticmethod
    def get_avatar_integration(business_id: str) -> dict[str, Any] | None:
        return _active_integration("ai_avatar_integrations", AVATAR_INTEGRATION_COLUMNS, business_id)

    @staticmethod
    def get_avatar_config(business_id: str) -> dict[str, Any]:
        """
        Integration settings plus the decrypted API key, for the avatar workflow.

        Raises:
            IntegrationNotConfiguredError: No active integration
            VaultError: The key can't be read
        """
        integration = IntegrationService.get_avatar_integration(business_id)
        if not integration:
            raise IntegrationNotConfiguredError("AI avatar integration not configured")

        try:
            api_key = SupabaseClient.call_rpc("get_ai_avatar_secret", {"p_business_id": business_id})
        except SupabaseClientError as e:
            raise VaultError("Unable to retrieve AI avatar API key", error=e.message)
        if not api_key:
            raise VaultError("Unable to retrieve AI avatar API key")

        return {**integration, "api_key": api_key}

    @staticmethod
    def save_avatar_integration(business_id: str, request: AvatarIntegrationRequest) -> dict[str, Any]:
        try:
            integration_id = SupabaseClient.call_rpc(
                "set_ai_avatar_integration",
                {
                    "p_business_id": business_id,
                    "p_provider": request.provider,
                    "p_api_key": request.api_key,
                    "p_avatar_id": request.avatar_id,
                    "p_voice_id": request.voice_id,
                    "p_config": request.config,
                },
            )
        except SupabaseClientError as e:
            logger.error(f"Error saving AI avatar integration for {business_id}: {e.message}")
            raise VaultError("Failed to save AI avatar integration", error=e.message)

        logger.info(f"Saved AI avatar integration for business {business_id}")
        return {"success": True, "integration_id": integration_id}

    @staticmethod
    def delete_avatar_integration(business_id: str) -> dict[str, Any]:
        try:
            SupabaseClient.call_rpc("delete_ai_avatar_integration", {"p_business_id": business_id})
        except SupabaseClientError as e:
            raise VaultError("Failed to delete AI avatar integration", error=e.message)
        logger.info(f"Deleted AI avatar integration for business {business_id}")
        return {"success": True}

    # -------------------------------------------------------------------------
    # Credentials for n8n
    # -------------------------------------------------------------------------

    @staticmethod
    def email_credentials_for_workflow(business_id: str | None) -> WorkflowResult:
        """Decrypted email configuration for the email sending workflow."""
        if not business_id:
            return 400, {"error": "Business ID is required"}

        try:
            integration = IntegrationService.get_email_integration(business_id)
        except Exception as e:
            logger.error(f"Error fetching business email configuration: {e}")
            integration = None
        if not integration:
            return 404, {"error": "Business email configuration not found"}

        if not integration.get("provider") or not integration.get("secret_id"):
            return 400, {"error": "Email integration not configured for this business"}

        try:
            api_key = SupabaseClient.call_rpc(EMAIL_SECRET_RPC, {"p_business_id": business_id})
        except SupabaseClientError as e:
            logger.error(f"Error retrieving email API key: {e.message}")
            api_key = None
        if not api_key:
            return 500, {"error": "Unable to retrieve email API key"}

        return 200, {
            "success": True,
            "email_config": {
                "provider": integration["provider"],
                "api_key": api_key,
                "sender_name": integration.get("sender_name"),
                "sender_email": integration.get("sender_email"),
                "selected_group_id": integration.get("selected_group_id"),
                "selected_group_name": integration.get("selected_group_name"),
            },
            "business_id": business_id,
        }

    @staticmethod
    def blog_credentials_for_workflow(business_id: str | None) -> WorkflowResult:
        """Active blog configuration and app password for the publishing workflow."""
        if not business_id:
            return 400, {"error": "Business ID is required"}

        try:
            integration = _active_integration(
                "blog_integrations", BLOG_INTEGRATION_COLUMNS, business_id
            )
        except Exception as e:
            logger.error(f"Error fetching blog integration: {e}")
            integration = None
        if not integration:
            return 404, {"error": "Blog integration not found or not active"}

        try:
            app_password = SupabaseClient.call_rpc("get_blog_secret_v2", {"p_business_id": business_id})
        except SupabaseClientError as e:
            logger.error(f"Error retrieving blog secret: {e.message}")
            return 500, {"error": "Unable to retrieve blog credentials"}
        if not app_password:
            return 404, {"error": "Blog credentials not found"}

        return 200, {
            "success": True,
            "blog_config": {
                "provider": integration["provider"],
                "site_url": integration.get("site_url"),
                "username": integration.get("username"),
                "app_password": app_password,
            },
            "business_id": business_id,
        }

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    @staticmethod
    def cleanup_orphaned_email_secrets() -> Any:
        """Remove vault secrets no email integration points to any more."""
        result = SupabaseClient.call_rpc("cleanup_orphaned_email_secrets")
        logger.info(f"Orphaned email secret cleanup finished: {result}")
        return result
