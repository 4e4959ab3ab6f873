# =============================================================================
# tests/test_exceptions.py - Error Response Shape Tests
# =============================================================================

from app.exceptions import (
    ProviderValidationError,
    RateLimitExceededError,
    WorkflowNotConfiguredError,
    WorkflowTriggerError,
    workflow_error_from,
)
from lib.n8n import N8nError, N8nNotConfiguredError


class TestErrorBodies:

    def test_base_shape(self):
        body = RateLimitExceededError("Too many requests. Please try again later.", retry_after=30).to_dict()
        assert body == {
            "success": False,
            "error": "Too many requests. Please try again later.",
            "code": "RATE_LIMITED",
            "details": {"retry_after": 30},
        }

    def test_provider_error_with_troubleshooting(self):
        body = ProviderValidationError("Invalid Wix API key.", "wix", troubleshooting=["Check it"]).to_dict()
        assert body["errorCode"] == "VALIDATION_FAILED"
        assert body["troubleshooting"] == {"title": "How to fix this", "steps": ["Check it"]}

    def test_provider_error_without_troubleshooting(self):
        body = ProviderValidationError("Invalid API key.", "brevo").to_dict()
        assert "troubleshooting" not in body


class TestWorkflowErrorFrom:

    def test_not_configured(self):
        error = workflow_error_from(N8nNotConfiguredError("audio_transcription", "N8N_WEBHOOK_URL"))
        assert isinstance(error, WorkflowNotConfiguredError)
        assert error.suggestion == "Set N8N_WEBHOOK_URL in the environment"

    def test_trigger_failure_keeps_upstream_status(self):
        error = workflow_error_from(N8nError("video_transcription", "boom", status=502))
        assert isinstance(error, WorkflowTriggerError)
        assert error.details["upstream_status"] == 502
