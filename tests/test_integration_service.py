# =============================================================================
# tests/test_integration_service.py - Integration Service Tests
# =============================================================================

from unittest.mock import patch

import pytest

from app.exceptions import (
    BusinessNotFoundError,
    IntegrationNotConfiguredError,
    InvalidRequestError,
    ProviderValidationError,
    VaultError,
)
from core.models.integrations import EmailIntegrationRequest
from core.services.integration_service import IntegrationService
from lib.blog_providers import BlogValidationError, SiteInfo
from lib.email_providers import EmailGroup, EmailProviderResponse
from lib.supabase_client import SupabaseClientError

from tests.conftest import BUSINESS_ID

EMAIL_VALIDATOR = "core.services.integration_service.validate_email_provider_and_fetch_groups"
BLOG_VALIDATOR = "core.services.integration_service.validate_blog_provider"

GROUPS = EmailProviderResponse(
    success=True,
    groups=[EmailGroup(id="1", name="Newsletter", subscriber_count=120)],
)


@pytest.fixture
def email_integration():
    return {
        "provider": "mailerlite",
        "secret_id": "secret-1",
        "sender_name": "Jane",
        "sender_email": "jane@acme.example",
        "selected_group_id": "1",
        "selected_group_name": "Newsletter",
        "status": "active",
    }


class TestValidateEmailKey:

    def test_missing_fields(self):
        with pytest.raises(InvalidRequestError, match="Provider and API key are required"):
            IntegrationService.validate_email_key("mailerlite", "")

    def test_unknown_provider(self):
        with pytest.raises(InvalidRequestError, match="Invalid email provider"):
            IntegrationService.validate_email_key("sendgrid", "key")

    def test_rejected_key(self):
        rejected = EmailProviderResponse(success=False, error="Invalid API key")
        with patch(EMAIL_VALIDATOR, return_value=rejected):
            with pytest.raises(ProviderValidationError) as exc:
                IntegrationService.validate_email_key("brevo", "bad")
        assert exc.value.message == "Invalid API key"
        assert exc.value.status_code == 400

    def test_valid_key(self):
        with patch(EMAIL_VALIDATOR, return_value=GROUPS) as validator:
            result = IntegrationService.validate_email_key("mailerlite", "good")

        validator.assert_called_once_with("mailerlite", "good")
        assert result == {"success": True, "message": "API key is valid", "groupCount": 1}


class TestListEmailGroups:

    def test_missing_business(self, fake_db):
        with pytest.raises(BusinessNotFoundError):
            IntegrationService.list_email_groups(BUSINESS_ID)

    def test_not_configured(self, fake_db, sample_business):
        fake_db.queue("businesses", [sample_business])
        with pytest.raises(IntegrationNotConfiguredError):
            IntegrationService.list_email_groups(BUSINESS_ID)

    def test_vault_failure(self, fake_db, sample_business, email_integration):
        fake_db.queue("businesses", [sample_business])
        fake_db.queue("email_integrations", [email_integration])
        fake_db.queue_error("rpc:get_email_secret_v2", RuntimeError("vault down"))

        with pytest.raises(VaultError):
            IntegrationService.list_email_groups(BUSINESS_ID)

    def test_no_groups(self, fake_db, sample_business, email_integration):
        fake_db.queue("businesses", [sample_business])
        fake_db.queue("email_integrations", [email_integration])
        fake_db.queue("rpc:get_email_secret_v2", "ml-key")

        with patch(EMAIL_VALIDATOR, return_value=EmailProviderResponse(success=True, groups=[])):
            result = IntegrationService.list_email_groups(BUSINESS_ID)

        assert result["groups"] == []
        assert "No email groups found in your mailerlite account" in result["message"]

    def test_groups(self, fake_db, sample_business, email_integration):
        fake_db.queue("businesses", [sample_business])
        fake_db.queue("email_integrations", [email_integration])
        fake_db.queue("rpc:get_email_secret_v2", "ml-key")

        with patch(EMAIL_VALIDATOR, return_value=GROUPS) as validator:
            result = IntegrationService.list_email_groups(BUSINESS_ID)

        validator.assert_called_once_with("mailerlite", "ml-key")
        assert result["groups"] == [{"id": "1", "name": "Newsletter", "subscriber_count": 120}]
        rpc = fake_db.queries("rpc:get_email_secret_v2")[0]
        assert rpc.args("rpc") == ({"p_business_id": BUSINESS_ID},)


class TestSaveEmailIntegration:

    def test_stores_key_and_group(self, fake_db):
        fake_db.queue("rpc:set_email_integration", "integration-1")
        request = EmailIntegrationRequest(
            provider="mailerlite",
            api_key="ml-key",
            sender_name="Jane",
            sender_email="jane@acme.example",
            selected_group_id="1",
            selected_group_name="Newsletter",
        )

        with patch(EMAIL_VALIDATOR, return_value=GROUPS):
            result = IntegrationService.save_email_integration(BUSINESS_ID, request)

        assert result == {"success": True, "integration_id": "integration-1"}
        params = fake_db.queries("rpc:set_email_integration")[0].args("rpc")[0]
        assert params["p_api_key"] == "ml-key"
        assert fake_db.updates("email_integrations") == [
            {"selected_group_id": "1", "selected_group_name": "Newsletter"}
        ]

    def test_without_group(self, fake_db):
        fake_db.queue("rpc:set_email_integration", "integration-1")
        request = EmailIntegrationRequest(provider="brevo", api_key="bv-key")

        with patch(EMAIL_VALIDATOR, return_value=GROUPS):
            IntegrationService.save_email_integration(BUSINESS_ID, request)

        assert fake_db.updates("email_integrations") == []

    def test_vault_failure(self, fake_db):
        fake_db.queue_error("rpc:set_email_integration", RuntimeError("boom"))
        request = EmailIntegrationRequest(provider="brevo", api_key="bv-key")

        with patch(EMAIL_VALIDATOR, return_value=GROUPS):
            with pytest.raises(VaultError):
                IntegrationService.save_email_integration(BUSINESS_ID, request)


class TestBlogValidation:

    def test_missing_fields(self):
        with pytest.raises(InvalidRequestError):
            IntegrationService.validate_blog_credentials("wordpress", None)

    def test_unsupported_provider(self):
        with pytest.raises(InvalidRequestError, match="Unsupported blog provider"):
            IntegrationService.validate_blog_credentials("ghost", "token")

    def test_rejected_credentials_include_troubleshooting(self):
        with patch(BLOG_VALIDATOR, side_effect=BlogValidationError("Invalid username or application password")):
            with pytest.raises(ProviderValidationError) as exc:
                IntegrationService.validate_blog_credentials(
                    "wordpress", "app pass", "https://blog.example", "jane"
                )

        body = exc.value.to_dict()
        assert body["errorCode"] == "VALIDATION_FAILED"
        assert body["troubleshooting"]["steps"][0] == "Check your credentials are correct"

    def test_site_info(self):
        info = SiteInfo(
            name="Acme Blog",
            url="https://blog.example",
            platform="wordpress",
            can_publish_posts=True,
            can_upload_media=False,
        )
        with patch(BLOG_VALIDATOR, return_value=info):
            result = IntegrationService.validate_blog_credentials(
                "wordpress", "app pass", "https://blog.example", "jane"
            )

        assert result["siteInfo"]["canPublishPosts"] is True
        assert result["siteInfo"]["canUploadMedia"] is False


class TestWorkflowCredentials:

    def test_email_requires_business(self, fake_db):
        assert IntegrationService.email_credentials_for_workflow(None) == (
            400, {"error": "Business ID is required"}
        )

    def test_email_not_found(self, fake_db):
        status, body = IntegrationService.email_credentials_for_workflow(BUSINESS_ID)
        assert status == 404
        assert body == {"error": "Business email configuration not found"}

    def test_email_missing_secret(self, fake_db, email_integration):
        fake_db.queue("email_integrations", [{**email_integration, "secret_id": None}])
        status, _ = IntegrationService.email_credentials_for_workflow(BUSINESS_ID)
        assert status == 400

    def test_email_vault_empty(self, fake_db, email_integration):
        fake_db.queue("email_integrations", [email_integration])
        fake_db.queue("rpc:get_email_secret_v2", None)

        assert IntegrationService.email_credentials_for_workflow(BUSINESS_ID) == (
            500, {"error": "Unable to retrieve email API key"}
        )

    def test_email_credentials(self, fake_db, email_integration):
        fake_db.queue("email_integrations", [email_integration])
        fake_db.queue("rpc:get_email_secret_v2", "ml-key")

        status, body = IntegrationService.email_credentials_for_workflow(BUSINESS_ID)

        assert status == 200
        assert body["email_config"]["api_key"] == "ml-key"
        assert body["email_config"]["selected_group_name"] == "Newsletter"
        assert body["business_id"] == BUSINESS_ID

    def test_blog_inactive(self, fake_db):
        assert IntegrationService.blog_credentials_for_workflow(BUSINESS_ID) == (
            404, {"error": "Blog integration not found or not active"}
        )

    def test_blog_vault_error(self, fake_db):
        fake_db.queue("blog_integrations", [{"provider": "wordpress", "status": "active"}])
        fake_db.queue_error("rpc:get_blog_secret_v2", RuntimeError("boom"))

        status, body = IntegrationService.blog_credentials_for_workflow(BUSINESS_ID)

        assert status == 500
        assert body == {"error": "Unable to retrieve blog credentials"}

    def test_blog_credentials(self, fake_db):
        fake_db.queue("blog_integrations", [{
            "provider": "wordpress",
            "site_url": "https://blog.example",
            "username": "jane",
            "status": "active",
        }])
        fake_db.queue("rpc:get_blog_secret_v2", "app pass")

        status, body = IntegrationService.blog_credentials_for_workflow(BUSINESS_ID)

        assert status == 200
        assert body["blog_config"] == {
            "provider": "wordpress",
            "site_url": "https://blog.example",
            "username": "jane",
            "app_password": "app pass",
        }


class TestAvatarConfig:

    def test_not_configured(self, fake_db):
        with pytest.raises(IntegrationNotConfiguredError):
            IntegrationService.get_avatar_config(BUSINESS_ID)

    def test_includes_key(self, fake_db):
        fake_db.queue("ai_avatar_integrations", [{"provider": "heygen", "avatar_id": "av-1", "status": "active"}])
        fake_db.queue("rpc:get_ai_avatar_secret", "hg-key")

        config = IntegrationService.get_avatar_config(BUSINESS_ID)

        assert config["api_key"] == "hg-key"
        assert config["avatar_id"] == "av-1"

    def test_vault_error(self, fake_db):
        fake_db.queue("ai_avatar_integrations", [{"provider": "heygen", "status": "active"}])
        fake_db.queue_error("rpc:get_ai_avatar_secret", SupabaseClientError("nope"))

        with pytest.raises(VaultError):
            IntegrationService.get_avatar_config(BUSINESS_ID)
