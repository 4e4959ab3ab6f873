# =============================================================================
# lib/n8n.py - n8n Workflow Webhook Client
# =============================================================================
# Outbound calls to the n8n workflows that do the heavy lifting:
# - Audio transcription (voice recordings)
# - Video transcription (uploaded videos)
# - Content creation (blog/email/social assets from a transcript)
# - Image regeneration (new image for one asset)
# - AI avatar video (HeyGen render of the video script)
#
# Workflows report back by POSTing to /api/n8n/callback; every payload
# except the audio one carries the callback URL and secret.
#
# Usage:
#   from lib.n8n import N8nClient
#   N8nClient.trigger_audio_transcription(audio_url, content_id, business_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from app.config import settings

logger = logging.getLogger(__name__)

LOCAL_SUPABASE_HOST = "127.0.0.1:54321"

# Business columns forwarded to the content creation workflow
BUSINESS_PAYLOAD_FIELDS = (
    "website_url",
    "social_media_profiles",
    "social_media_integrations",
    "writing_style_guide",
    "cta_youtube",
    "cta_email",
    "first_name",
    "last_name",
    "cta_social_long",
    "cta_social_short",
    "booking_link",
    "email_name_token",
    "email_sign_off",
    "color_primary",
    "color_secondary",
    "color_background",
    "color_highlight",
)


class N8nError(Exception):
    """A workflow webhook could not be called or answered with an error."""

    def __init__(self, workflow: str, message: str, status: int | None = None):
        super().__init__(message)
        self.workflow = workflow
        self.message = message
        self.status = status


class N8nNotConfiguredError(N8nError):
    """The webhook URL (or API key) for a workflow is not set."""

    def __init__(self, workflow: str, setting: str):
        super().__init__(workflow, f"{setting} is not configured")
        self.setting = setting


def build_content_creation_payload(
    content: Mapping[str, Any],
    business: Mapping[str, Any],
) -> dict[str, Any]:
    """
    Build the content creation payload from a content row and its business.

    The workflow expects camelCase `contentId`/`callbackUrl`/`callbackSecret`
    next to snake_case row fields.
    """
    payload: dict[str, Any] = {
        "contentId": content.get("id"),
        "content_title": content.get("content_title"),
        "transcript": content.get("transcript"),
        "research": content.get("research"),
        "video_script": content.get("video_script"),
        "keyword": content.get("keyword"),
        "business_name": business.get("business_name"),
    }
    for field in BUSINESS_PAYLOAD_FIELDS:
        payload[field] = business.get(field)

    payload.update(
        callbackUrl=settings.callback_url,
        callbackSecret=settings.N8N_CALLBACK_SECRET,
        environment=settings.ENVIRONMENT,
    )
    return payload


def rewrite_local_url(url: str) -> str:
    """
    Make a local Supabase storage URL reachable from n8n in development.

    http://127.0.0.1:54321/... is rewritten onto APP_URL.
    """
    if settings.is_development and LOCAL_SUPABASE_HOST in url:
        return url.replace(f"http://{LOCAL_SUPABASE_HOST}", settings.APP_URL.rstrip("/"))
    return url


class N8nClient:
    """
    Static helpers around the n8n webhooks.

    All methods raise N8nNotConfiguredError when the workflow URL is
    missing, and N8nError when the request fails or n8n answers non-2xx.
    """

    @staticmethod
    def post_webhook(
        workflow: str,
        url: str,
        payload: Mapping[str, Any],
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        """
        POST a JSON payload to a workflow webhook.

        Args:
            workflow: Workflow name used in logs and errors
            url: Webhook URL
            payload: JSON body
            headers: Extra headers (e.g. X-N8N-API-KEY)

        Returns:
            The successful httpx.Response

        Raises:
            N8nError: On transport failure or non-2xx response
        """
        request_headers = {"Content-Type": "application/json"}
        if headers:
            request_headers.update(headers)

        try:
            response = httpx.post(
                url,
                json=dict(payload),
                headers=request_headers,
                timeout=settings.N8N_TIMEOUT_SECONDS,
            )
        except httpx.HTTPError as e:
            logger.error(f"n8n {workflow} webhook unreachable: {e}")
            raise N8nError(workflow, f"Unable to reach {workflow} workflow: {e}")

        if not response.is_success:
            logger.error(
                f"n8n {workflow} webhook failed [{response.status_code}]: {response.text[:500]}"
            )
            raise N8nError(
                workflow,
                f"Failed to trigger {workflow} workflow. Status: {response.status_code}",
                status=response.status_code,
            )

        logger.info(f"n8n {workflow} workflow triggered")
        return response

    @staticmethod
    def trigger_audio_transcription(
        audio_url: str,
        content_id: str,
        business_id: str,
    ) -> dict[str, Any]:
        """Start transcription of a voice recording."""
        if not settings.N8N_WEBHOOK_URL:
            raise N8nNotConfiguredError("audio_transcription", "N8N_WEBHOOK_URL")
        if not settings.N8N_API_KEY:
            raise N8nNotConfiguredError("audio_transcription", "N8N_API_KEY")

        N8nClient.post_webhook(
            "audio_transcription",
            settings.N8N_WEBHOOK_URL,
            {
                "audio_url": rewrite_local_url(audio_url),
                "content_id": content_id,
                "business_id": business_id,
            },
            headers={"X-N8N-API-KEY": settings.N8N_API_KEY},
        )
        logger.info(f"n8n workflow triggered for content ID: {content_id}")
        return {"success": True}

    @staticmethod
    def trigger_video_transcription(
        video_url: str,
        content_id: str,
        business_id: str,
    ) -> dict[str, Any]:
        """Start transcription of an uploaded video."""
        if not settings.N8N_WEBHOOK_URL_VIDEO_TRANSCRIPTION:
            raise N8nNotConfiguredError(
                "video_transcription", "N8N_WEBHOOK_URL_VIDEO_TRANSCRIPTION"
            )

        N8nClient.post_webhook(
            "video_transcription",
            settings.N8N_WEBHOOK_URL_VIDEO_TRANSCRIPTION,
            {
                "content_id": content_id,
                "business_id": business_id,
                "video_url": rewrite_local_url(video_url),
                "project_type": "video_upload",
                "callback_url": settings.callback_url,
                "callback_secret": settings.N8N_CALLBACK_SECRET,
                "environment": settings.ENVIRONMENT,
            },
        )
        return {"success": True}

    @staticmethod
    def trigger_content_creation(
        content: Mapping[str, Any],
        business: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Start asset generation for a transcribed content item."""
        if not settings.N8N_WEBHOOK_URL_CONTENT_CREATION:
            raise N8nNotConfiguredError(
                "content_creation", "N8N_WEBHOOK_URL_CONTENT_CREATION"
            )

        payload = build_content_creation_payload(content, business)
        logger.info(
            f"Triggering content creation for {payload['contentId']} "
            f"(has transcript: {bool(payload['transcript'])}, business: {payload['business_name']})"
        )
        N8nClient.post_webhook(
            "content_creation",
            settings.N8N_WEBHOOK_URL_CONTENT_CREATION,
            payload,
        )
        return {"success": True}

    @staticmethod
    def trigger_image_regeneration(
        asset: Mapping[str, Any],
        image_prompt: str,
        business_id: str,
        business_name: str | None,
    ) -> dict[str, Any]:
        """Ask the image workflow for a new image for one asset."""
        if not settings.N8N_WEBHOOK_IMAGE_REGENERATION:
            raise N8nNotConfiguredError(
                "image_regeneration", "N8N_WEBHOOK_IMAGE_REGENERATION"
            )

        N8nClient.post_webhook(
            "image_regeneration",
            settings.N8N_WEBHOOK_IMAGE_REGENERATION,
            {
                "content_asset_id": asset.get("id"),
                "content_id": asset.get("content_id"),
                "content_type": asset.get("content_type"),
                "image_prompt": image_prompt.strip(),
                "business_id": business_id,
                "business_name": business_name or "Unknown",
                "callbackUrl": settings.callback_url,
                "callbackSecret": settings.N8N_CALLBACK_SECRET,
                "environment": settings.ENVIRONMENT,
                "workflow_type": "image_regeneration",
            },
        )
        return {"success": True}

    @staticmethod
    def trigger_avatar_video(
        content: Mapping[str, Any],
        avatar_config: Mapping[str, Any],
        video_type: str = "long",
    ) -> dict[str, Any]:
        """
        Start an AI avatar render of the content's video script.

        avatar_config carries the decrypted HeyGen api_key, avatar_id and
        voice_id from the vault.
        """
        if not settings.N8N_WEBHOOK_URL_AVATAR_VIDEO:
            raise N8nNotConfiguredError("avatar_video", "N8N_WEBHOOK_URL_AVATAR_VIDEO")

        N8nClient.post_webhook(
            "avatar_video",
            settings.N8N_WEBHOOK_URL_AVATAR_VIDEO,
            {
                "content_id": content.get("id"),
                "business_id": content.get("business_id"),
                "video_script": content.get("video_script"),
                "video_type": video_type,
                "provider": avatar_config.get("provider", "heygen"),
                "api_key": avatar_config.get("api_key"),
                "avatar_id": avatar_config.get("avatar_id"),
                "voice_id": avatar_config.get("voice_id"),
                "callbackUrl": settings.callback_url,
                "callbackSecret": settings.N8N_CALLBACK_SECRET,
                "environment": settings.ENVIRONMENT,
                "workflow_type": "avatar_video",
            },
        )
        return {"success": True}
