# =============================================================================
# tests/test_n8n.py - n8n Webhook Client Tests
# =============================================================================

from unittest.mock import patch

import httpx
import pytest

from app.config import settings
from lib.n8n import (
    N8nClient,
    N8nError,
    N8nNotConfiguredError,
    build_content_creation_payload,
    rewrite_local_url,
)


@pytest.fixture
def webhooks(monkeypatch):
    monkeypatch.setattr(settings, "N8N_WEBHOOK_URL", "https://n8n.test/webhook/audio")
    monkeypatch.setattr(settings, "N8N_API_KEY", "n8n-key")
    monkeypatch.setattr(settings, "N8N_WEBHOOK_URL_VIDEO_TRANSCRIPTION", "https://n8n.test/webhook/video")
    monkeypatch.setattr(settings, "N8N_WEBHOOK_URL_CONTENT_CREATION", "https://n8n.test/webhook/create")
    monkeypatch.setattr(settings, "N8N_WEBHOOK_IMAGE_REGENERATION", "https://n8n.test/webhook/image")
    monkeypatch.setattr(settings, "N8N_WEBHOOK_URL_AVATAR_VIDEO", "https://n8n.test/webhook/avatar")


class TestAudioTranscription:

    def test_not_configured(self, monkeypatch):
        monkeypatch.setattr(settings, "N8N_WEBHOOK_URL", None)
        with pytest.raises(N8nNotConfiguredError) as exc:
            N8nClient.trigger_audio_transcription("https://x/a.webm", "c1", "b1")
        assert exc.value.setting == "N8N_WEBHOOK_URL"

    def test_api_key_required(self, webhooks, monkeypatch):
        monkeypatch.setattr(settings, "N8N_API_KEY", None)
        with pytest.raises(N8nNotConfiguredError):
            N8nClient.trigger_audio_transcription("https://x/a.webm", "c1", "b1")

    def test_posts_payload_with_api_key(self, webhooks):
        with patch("lib.n8n.httpx.post", return_value=httpx.Response(200)) as post:
            N8nClient.trigger_audio_transcription("https://cdn.example/a.webm", "c1", "b1")

        args, kwargs = post.call_args
        assert args[0] == "https://n8n.test/webhook/audio"
        assert kwargs["json"] == {
            "audio_url": "https://cdn.example/a.webm",
            "content_id": "c1",
            "business_id": "b1",
        }
        assert kwargs["headers"]["X-N8N-API-KEY"] == "n8n-key"

    def test_non_2xx_raises(self, webhooks):
        with patch("lib.n8n.httpx.post", return_value=httpx.Response(502, text="bad gateway")):
            with pytest.raises(N8nError) as exc:
                N8nClient.trigger_audio_transcription("https://x/a.webm", "c1", "b1")
        assert exc.value.status == 502
        assert "Status: 502" in exc.value.message

    def test_transport_error_raises(self, webhooks):
        with patch("lib.n8n.httpx.post", side_effect=httpx.ConnectError("refused")):
            with pytest.raises(N8nError) as exc:
                N8nClient.trigger_audio_transcription("https://x/a.webm", "c1", "b1")
        assert exc.value.status is None


class TestPayloads:

    def test_local_url_rewritten_in_development(self, monkeypatch):
        monkeypatch.setattr(settings, "ENVIRONMENT", "development")
        monkeypatch.setattr(settings, "APP_URL", "https://abc.ngrok.app/")
        url = "http://127.0.0.1:54321/storage/v1/object/public/audio/b_c.webm"
        assert rewrite_local_url(url) == "https://abc.ngrok.app/storage/v1/object/public/audio/b_c.webm"

    def test_local_url_kept_in_production(self, monkeypatch):
        monkeypatch.setattr(settings, "ENVIRONMENT", "production")
        url = "http://127.0.0.1:54321/storage/v1/object/public/audio/b_c.webm"
        assert rewrite_local_url(url) == url

    def test_content_creation_payload(self, sample_content, sample_business):
        payload = build_content_creation_payload(sample_content, sample_business)

        assert payload["contentId"] == "content-1"
        assert payload["transcript"] == sample_content["transcript"]
        assert payload["business_name"] == "Acme Coaching"
        assert payload["writing_style_guide"] == "Warm and direct"
        assert payload["booking_link"] is None
        assert payload["callbackUrl"] == settings.callback_url
        assert payload["callbackSecret"] == settings.N8N_CALLBACK_SECRET

    def test_video_transcription_payload(self, webhooks):
        with patch("lib.n8n.httpx.post", return_value=httpx.Response(200)) as post:
            N8nClient.trigger_video_transcription("https://cdn.example/v.mp4", "c1", "b1")

        body = post.call_args.kwargs["json"]
        assert body["project_type"] == "video_upload"
        assert body["callback_url"] == settings.callback_url
        assert body["video_url"] == "https://cdn.example/v.mp4"

    def test_image_regeneration_payload(self, webhooks, sample_asset):
        with patch("lib.n8n.httpx.post", return_value=httpx.Response(200)) as post:
            N8nClient.trigger_image_regeneration(sample_asset, "  a sunrise  ", "b1", None)

        body = post.call_args.kwargs["json"]
        assert body["content_asset_id"] == "asset-1"
        assert body["image_prompt"] == "a sunrise"
        assert body["business_name"] == "Unknown"
        assert body["workflow_type"] == "image_regeneration"

    def test_avatar_video_payload(self, webhooks, sample_content):
        config = {"provider": "heygen", "api_key": "hg-key", "avatar_id": "av1", "voice_id": "v1"}
        with patch("lib.n8n.httpx.post", return_value=httpx.Response(200)) as post:
            N8nClient.trigger_avatar_video(sample_content, config, "short")

        body = post.call_args.kwargs["json"]
        assert body["video_type"] == "short"
        assert body["video_script"] == sample_content["video_script"]
        assert body["api_key"] == "hg-key"
        assert body["workflow_type"] == "avatar_video"
