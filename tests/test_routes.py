# =============================================================================
# tests/test_routes.py - HTTP Endpoint Tests
# =============================================================================
# Drives the FastAPI app through TestClient. Services run against the
# FakeSupabase; n8n and storage calls are patched.
# =============================================================================

import json
import time
from unittest.mock import patch

import pytest
from jose import jwt

from app.config import settings
from core.services.content_service import ContentService
from core.services.storage_service import StorageService
from lib.n8n import N8nClient
from lib.rate_limit import RateLimiter, RateLimitResult
from lib.webhook_security import SIGNATURE_HEADER, TIMESTAMP_HEADER, generate_webhook_signature

from tests.conftest import BUSINESS_ID, OTHER_BUSINESS_ID, USER_ID

SECRET = "test-callback-secret"
WEBM_BYTES = b"\x1a\x45\xdf\xa3" + b"\x00" * 32


@pytest.fixture(autouse=True)
def callback_secret(monkeypatch):
    monkeypatch.setattr(settings, "N8N_CALLBACK_SECRET", SECRET)


# =============================================================================
# Root / Health
# =============================================================================

class TestRootAndHealth:

    def test_root(self, api_client):
        response = api_client.get("/")
        assert response.status_code == 200
        assert response.json()["name"] == "Transformo API"

    def test_health(self, api_client):
        response = api_client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready(self, api_client):
        response = api_client.get("/api/v1/health/ready")
        assert response.json()["status"] == "ready"

    def test_ready_degraded(self, api_client, fake_db):
        fake_db.storage.list_buckets.side_effect = RuntimeError("storage offline")
        body = api_client.get("/api/v1/health/ready").json()
        assert body["status"] == "degraded"
        assert body["checks"]["storage"].startswith("unhealthy")


# =============================================================================
# Auth
# =============================================================================

class TestAuth:

    def token(self, expires_in: int) -> str:
        claims = {
            "sub": str(USER_ID),
            "email": "owner@example.com",
            "aud": "authenticated",
            "exp": int(time.time()) + expires_in,
        }
        return jwt.encode(claims, settings.SUPABASE_JWT_SECRET, algorithm="HS256")

    def test_verify(self, anonymous_client):
        response = anonymous_client.get(
            "/api/v1/auth/verify",
            headers={"Authorization": f"Bearer {self.token(3600)}"},
        )
        assert response.status_code == 200
        assert response.json() == {"valid": True, "user_id": str(USER_ID), "email": "owner@example.com"}

    def test_expired(self, anonymous_client):
        response = anonymous_client.get(
            "/api/v1/auth/verify",
            headers={"Authorization": f"Bearer {self.token(-60)}"},
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Token has expired"

    def test_wrong_secret(self, anonymous_client):
        token = jwt.encode(
            {"sub": str(USER_ID), "aud": "authenticated", "exp": int(time.time()) + 60},
            "some-other-secret",
            algorithm="HS256",
        )
        response = anonymous_client.get("/api/v1/auth/verify", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_me_with_profile(self, anonymous_client, fake_db):
        fake_db.queue("profiles", [{"business_id": BUSINESS_ID, "first_name": "Jane", "is_admin": False}])
        response = anonymous_client.get(
            "/api/v1/auth/me",
            headers={"Authorization": f"Bearer {self.token(3600)}"},
        )
        assert response.status_code == 200
        assert response.json()["business_id"] == BUSINESS_ID


# =============================================================================
# n8n
# =============================================================================

class TestWorkflowCallback:

    def test_secret_mismatch(self, api_client):
        response = api_client.post(
            "/api/n8n/callback",
            json={"content_id": "content-1", "transcript": "hi", "content_title": "T"},
            headers={"x-n8n-callback-secret": "wrong"},
        )
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_missing_ids(self, api_client):
        response = api_client.post(
            "/api/n8n/callback",
            json={"transcript": "hi"},
            headers={"x-n8n-callback-secret": SECRET},
        )
        assert response.status_code == 400

    def test_content_creation_result(self, api_client, fake_db):
        fake_db.queue("content", [{"id": "content-1"}])

        response = api_client.post(
            "/api/n8n/callback",
            json={"content_id": "content-1", "workflow_type": "content_creation", "success": True},
            headers={"x-n8n-callback-secret": SECRET},
        )

        assert response.status_code == 200
        assert fake_db.updates("content") == [{"content_generation_status": "completed", "error_message": None}]

    def post(self, api_client, body):
        return api_client.post("/api/n8n/callback", json=body, headers={"x-n8n-callback-secret": SECRET})

    def test_not_rate_limited(self, api_client, fake_db):
        fake_db.queue("content", [{"id": "content-1"}])
        exhausted = RateLimitResult(allowed=False, remaining=0, retry_after=30)

        with patch.object(RateLimiter, "check", return_value=exhausted) as check:
            response = self.post(api_client, {"content_id": "content-1", "workflow_type": "content_creation"})

        assert response.status_code == 200
        check.assert_not_called()

    def test_structured_error_is_stored_as_text(self, api_client, fake_db, sample_content):
        fake_db.queue("content", [sample_content])

        response = self.post(api_client, {"content_id": "content-1", "success": False, "error": {"message": "boom"}})

        assert response.status_code == 200
        assert fake_db.updates("content") == [
            {"status": "processing", "error_message": '{"message": "boom"}'}
        ]

    def test_numeric_content_id(self, api_client, fake_db):
        fake_db.queue("content", [{"id": 42, "content_generation_status": "completed"}])

        response = self.post(api_client, {"content_id": 42, "workflow_type": "content_creation", "success": True})

        assert response.status_code == 200
        assert fake_db.queries("content")[0].args("eq") == ("id", 42)
        assert fake_db.updates("content") == [{"content_generation_status": "completed", "error_message": None}]

    def test_unknown_video_type_fills_long_video(self, api_client, fake_db):
        fake_db.queue("content", [{"id": "content-1", "heygen_status": "completed"}])

        response = self.post(api_client, {
            "content_id": "content-1",
            "workflow_type": "avatar_video",
            "video_type": "square",
            "video_url": "https://cdn.example/v.mp4",
        })

        assert response.status_code == 200
        assert fake_db.updates("content")[0]["video_long_url"] == "https://cdn.example/v.mp4"


class TestWorkflowCredentials:

    def test_requires_bearer_secret(self, api_client):
        response = api_client.post(
            "/api/n8n/email-credentials",
            json={"business_id": BUSINESS_ID},
            headers={"Authorization": "Bearer nope"},
        )
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized access"}

    def test_email_credentials(self, api_client, fake_db):
        fake_db.queue("email_integrations", [{"provider": "brevo", "secret_id": "s1", "status": "active"}])
        fake_db.queue("rpc:get_email_secret_v2", "bv-key")

        response = api_client.post(
            "/api/n8n/email-credentials",
            json={"business_id": BUSINESS_ID},
            headers={"Authorization": f"Bearer {SECRET}"},
        )

        assert response.status_code == 200
        assert response.json()["email_config"]["api_key"] == "bv-key"

    def test_blog_missing_business(self, api_client):
        response = api_client.post(
            "/api/n8n/blog-credentials",
            json={},
            headers={"Authorization": f"Bearer {SECRET}"},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Business ID is required"}


# =============================================================================
# Content: workflow endpoints
# =============================================================================

class TestUpdateStatus:

    def test_wrong_secret(self, api_client):
        response = api_client.post(
            "/api/content/update-status",
            json={"content_id": "content-1", "status": "draft", "secret": "wrong"},
        )
        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"

    def test_sets_status(self, api_client, fake_db):
        fake_db.queue("content", [{"id": "content-1"}])

        response = api_client.post(
            "/api/content/update-status",
            json={"content_id": "content-1", "status": "failed", "secret": SECRET},
        )

        assert response.status_code == 200
        assert fake_db.updates("content") == [{"status": "failed"}]

    def test_rejects_other_statuses(self, api_client):
        response = api_client.post(
            "/api/content/update-status",
            json={"content_id": "content-1", "status": "completed", "secret": SECRET},
        )
        assert response.status_code == 400


def signed_headers(body: bytes, secret: str) -> dict[str, str]:
    ts = int(time.time() * 1000)
    return {
        SIGNATURE_HEADER: generate_webhook_signature(body, secret, ts),
        TIMESTAMP_HEADER: str(ts),
        "content-type": "application/json",
    }


class TestTriggerCreation:

    URL = "/api/content/trigger-creation"

    def test_signed_request(self, api_client):
        body = json.dumps({"content_id": "content-1"}).encode()
        headers = signed_headers(body, SECRET)

        with patch.object(ContentService, "trigger_content_creation", return_value={"success": True}) as trigger:
            response = api_client.post(self.URL, content=body, headers=headers)

        assert response.status_code == 200
        trigger.assert_called_once_with("content-1")

    def test_bad_signature(self, api_client):
        body = json.dumps({"content_id": "content-1"}).encode()
        headers = signed_headers(body, "not-the-secret")

        with patch.object(ContentService, "trigger_content_creation") as trigger:
            response = api_client.post(self.URL, content=body, headers=headers)

        assert response.status_code == 401
        trigger.assert_not_called()

    def test_body_secret(self, api_client):
        with patch.object(ContentService, "trigger_content_creation", return_value={"success": True}):
            response = api_client.post(self.URL, json={"content_id": "content-1", "secret": SECRET})
        assert response.status_code == 200

    def test_invalid_json(self, api_client):
        response = api_client.post(
            self.URL, content=b"{not json", headers={"content-type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid JSON body"

    def test_missing_content_id(self, api_client):
        response = api_client.post(self.URL, json={"secret": SECRET})
        assert response.status_code == 400


# =============================================================================
# Content: user endpoints
# =============================================================================

class TestContentEndpoints:

    def test_list(self, api_client, fake_db, sample_content):
        fake_db.queue("content", [{**sample_content, "content_assets": [{"approved": False}]}])

        body = api_client.get("/api/content").json()

        assert body["total"] == 1
        assert body["content"][0]["derived_status"] == "draft"

    def test_list_rejects_unknown_status(self, api_client):
        assert api_client.get("/api/content", params={"status": "archived"}).status_code == 422

    def test_detail_of_other_business(self, api_client, fake_db, sample_content):
        fake_db.queue("content", [{**sample_content, "business_id": OTHER_BUSINESS_ID}])
        response = api_client.get("/api/content/content-1")
        assert response.status_code == 403

    def test_missing_content(self, api_client):
        response = api_client.get("/api/content/content-404")
        assert response.status_code == 404

    def test_create_recording(self, api_client, fake_db):
        fake_db.queue("content", [{"id": "c-new", "business_id": BUSINESS_ID}])
        response = api_client.post("/api/content/recordings")
        assert response.json() == {"id": "c-new", "business_id": BUSINESS_ID}

    def test_finalize_recording(self, api_client, fake_db, sample_content):
        fake_db.queue("content", [sample_content])
        fake_db.queue("content", [sample_content])

        with patch.object(N8nClient, "trigger_audio_transcription"):
            response = api_client.post(
                "/api/content/content-1/finalize-recording",
                json={"audio_url": "https://cdn/a.webm"},
            )

        assert response.status_code == 200
        assert response.json() == {"message": "Content finalized successfully"}

    def test_edit_unknown_field(self, api_client):
        response = api_client.patch(
            "/api/content/content-1/fields",
            json={"field_name": "status", "value": "completed"},
        )
        assert response.status_code == 422


# =============================================================================
# Uploads
# =============================================================================

class TestUploads:

    def test_missing_fields(self, api_client):
        response = api_client.post(
            "/api/upload-audio",
            files={"file": ("rec.webm", WEBM_BYTES, "audio/webm")},
            data={"businessId": BUSINESS_ID},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Missing required fields: file, businessId, or contentId"

    def test_upload_audio(self, api_client):
        with patch.object(StorageService, "upload_file") as upload, \
                patch.object(StorageService, "get_public_url", return_value="https://cdn/audio/x.webm"):
            response = api_client.post(
                "/api/upload-audio",
                files={"file": ("rec.webm", WEBM_BYTES, "audio/webm")},
                data={"businessId": BUSINESS_ID, "contentId": "content-1"},
            )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "path": f"{BUSINESS_ID}_content-1.webm",
            "publicUrl": "https://cdn/audio/x.webm",
        }
        upload.assert_called_once()

    def test_upload_for_other_business(self, api_client):
        with patch.object(StorageService, "upload_file") as upload:
            response = api_client.post(
                "/api/upload-audio",
                files={"file": ("rec.webm", WEBM_BYTES, "audio/webm")},
                data={"businessId": OTHER_BUSINESS_ID, "contentId": "content-1"},
            )

        assert response.status_code == 403
        upload.assert_not_called()

    def test_spoofed_image(self, api_client):
        with patch.object(StorageService, "upload_file") as upload:
            response = api_client.post(
                "/api/upload-image",
                files={"file": ("photo.png", b"GIF89a-not-a-png", "image/png")},
                data={"businessId": BUSINESS_ID, "contentId": "content-1"},
            )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_FILE"
        upload.assert_not_called()


# =============================================================================
# Image Regeneration
# =============================================================================

class TestImageRegeneration:

    URL = "/api/image-regeneration"

    def test_missing_prompt(self, api_client):
        response = api_client.post(self.URL, json={"content_asset_id": "asset-1", "image_prompt": "   "})
        assert response.status_code == 400

    def test_rate_limited(self, api_client, fake_db, sample_asset, monkeypatch):
        monkeypatch.setattr(settings, "ENABLE_IMAGE_REGENERATION_RATE_LIMIT", True)
        monkeypatch.setattr(settings, "IMAGE_REGENERATION_LIMIT", 5)
        monkeypatch.setattr(settings, "IMAGE_REGENERATION_WINDOW_MINUTES", 10)
        fake_db.queue("content_assets", [sample_asset])
        fake_db.queue("content", [{"id": "content-1"}])
        fake_db.queue("content_assets", [], count=7)

        response = api_client.post(self.URL, json={"content_asset_id": "asset-1", "image_prompt": "A sunrise"})

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "600"
        assert response.json()["code"] == "RATE_LIMITED"

    def test_started(self, api_client, fake_db, sample_asset):
        fake_db.queue("content_assets", [sample_asset])

        with patch.object(N8nClient, "trigger_image_regeneration"):
            response = api_client.post(
                self.URL, json={"content_asset_id": "asset-1", "image_prompt": "A sunrise"}
            )

        assert response.status_code == 200
        assert response.json()["message"] == "Image regeneration started"


# =============================================================================
# Integrations / Business
# =============================================================================

class TestIntegrationEndpoints:

    def test_unknown_email_provider(self, api_client):
        response = api_client.post(
            "/api/email-integration/validate",
            json={"provider": "sendgrid", "apiKey": "x"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid email provider"

    def test_avatar_requires_ids(self, api_client):
        response = api_client.put("/api/ai-avatar-integration", json={"api_key": "hg-key"})
        assert response.status_code == 422

    def test_delete_blog_integration(self, api_client, fake_db):
        response = api_client.delete("/api/blog-integration")

        assert response.json() == {"success": True}
        rpc = fake_db.queries("rpc:delete_blog_integration")[0]
        assert rpc.args("rpc") == ({"p_business_id": BUSINESS_ID},)


class TestBusinessEndpoints:

    def test_get(self, api_client, fake_db, sample_business):
        fake_db.queue("businesses", [sample_business])
        response = api_client.get("/api/business")
        assert response.status_code == 200
        assert response.json()["business_name"] == "Acme Coaching"

    def test_patch_only_sent_fields(self, api_client, fake_db, sample_business):
        fake_db.queue("businesses", [{**sample_business, "color_primary": "#0f172a"}])

        response = api_client.patch("/api/business", json={"color_primary": "#0f172a"})

        assert response.status_code == 200
        assert fake_db.updates("businesses") == [{"color_primary": "#0f172a"}]

    def test_patch_unknown_field(self, api_client):
        response = api_client.patch("/api/business", json={"plan": "enterprise"})
        assert response.status_code == 422
