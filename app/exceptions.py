# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error response carries "success": false and an "error" message so
# clients can treat all failures the same way.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from lib.n8n import N8nError, N8nNotConfiguredError


class TransformoException(Exception):
    """
    Base exception for the Transformo API.

    Subclasses fix the HTTP status and error code; the handler below
    renders any of them as the standard error envelope.
    """

    def __init__(
        self,
        message: str,
        code: str = "TRANSFORMO_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "success": False,
            "error": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Ownership / Lookup Exceptions
# =============================================================================

class BusinessNotFoundError(TransformoException):
    """Raised when the caller has no business linked to their profile."""

    def __init__(self, user_id: str | None = None):
        super().__init__(
            message="Business not found",
            code="BUSINESS_NOT_FOUND",
            status_code=404,
            suggestion="Complete business setup before using this feature",
            details={"user_id": user_id} if user_id else None,
        )


class ContentNotFoundError(TransformoException):
    """Raised when a content ID doesn't exist (or isn't visible to the caller)."""

    def __init__(self, content_id: str):
        super().__init__(
            message="Content not found",
            code="CONTENT_NOT_FOUND",
            status_code=404,
            details={"content_id": content_id},
        )


class ContentAssetNotFoundError(TransformoException):
    """Raised when a content asset ID doesn't exist."""

    def __init__(self, asset_id: str):
        super().__init__(
            message="Content asset not found",
            code="CONTENT_ASSET_NOT_FOUND",
            status_code=404,
            details={"content_asset_id": asset_id},
        )


class UnauthorizedError(TransformoException):
    """Raised when a workflow-facing endpoint gets a bad shared secret."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            message=message,
            code="UNAUTHORIZED",
            status_code=401,
        )


class AccessDeniedError(TransformoException):
    """Raised when a resource belongs to another business."""

    def __init__(self, resource: str = "resource"):
        super().__init__(
            message="Access denied",
            code="ACCESS_DENIED",
            status_code=403,
            details={"resource": resource},
        )


class InvalidRequestError(TransformoException):
    """Raised for semantically invalid requests that pass schema validation."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="INVALID_REQUEST",
            status_code=400,
            details=details,
        )


# =============================================================================
# Upload Exceptions
# =============================================================================

class InvalidFileError(TransformoException):
    """Raised when an uploaded file fails type, size or signature checks."""

    def __init__(self, message: str, filename: str | None = None):
        super().__init__(
            message=message,
            code="INVALID_FILE",
            status_code=400,
            details={"filename": filename} if filename else None,
        )


class StorageUploadError(TransformoException):
    """Raised when file upload to storage fails."""

    def __init__(self, error: str, bucket: str | None = None):
        super().__init__(
            message="Failed to upload file",
            code="STORAGE_UPLOAD_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error, "bucket": bucket},
        )


# =============================================================================
# Workflow Exceptions
# =============================================================================

class WorkflowNotConfiguredError(TransformoException):
    """Raised when the webhook URL for a workflow isn't set."""

    def __init__(self, workflow: str, setting: str):
        super().__init__(
            message=f"{workflow} webhook is not configured",
            code="WORKFLOW_NOT_CONFIGURED",
            status_code=500,
            suggestion=f"Set {setting} in the environment",
            details={"workflow": workflow},
        )


class WorkflowTriggerError(TransformoException):
    """Raised when n8n rejects or cannot receive a webhook call."""

    def __init__(self, workflow: str, error: str, status: int | None = None):
        super().__init__(
            message=f"Failed to trigger {workflow}",
            code="WORKFLOW_TRIGGER_FAILED",
            status_code=500,
            suggestion="Please try again. If the problem persists, check the n8n workflow is active",
            details={"workflow": workflow, "error": error, "upstream_status": status},
        )


def workflow_error_from(exc: N8nError) -> TransformoException:
    """Translate an n8n client error into the matching API error."""
    if isinstance(exc, N8nNotConfiguredError):
        return WorkflowNotConfiguredError(exc.workflow, exc.setting)
    return WorkflowTriggerError(exc.workflow, exc.message, exc.status)


class RateLimitExceededError(TransformoException):
    """Raised when a caller exceeds a request budget."""

    def __init__(self, message: str, retry_after: int | None = None):
        super().__init__(
            message=message,
            code="RATE_LIMITED",
            status_code=429,
            details={"retry_after": retry_after} if retry_after else None,
        )
        self.retry_after = retry_after


# =============================================================================
# Integration Exceptions
# =============================================================================

class IntegrationNotConfiguredError(TransformoException):
    """Raised when an email/blog/avatar integration is missing."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="INTEGRATION_NOT_CONFIGURED",
            status_code=400,
            suggestion="Set up the integration in Settings > Integrations first",
        )


class VaultError(TransformoException):
    """Raised when a vault RPC fails to read or write a secret."""

    def __init__(self, message: str, error: str | None = None):
        super().__init__(
            message=message,
            code="VAULT_ERROR",
            status_code=500,
            details={"error": error} if error else None,
        )


class ProviderValidationError(TransformoException):
    """Raised when a third-party provider rejects the supplied credentials."""

    def __init__(
        self,
        message: str,
        provider: str,
        troubleshooting: list[str] | None = None,
    ):
        super().__init__(
            message=message,
            code="VALIDATION_FAILED",
            status_code=400,
            details={"provider": provider},
        )
        self.troubleshooting = troubleshooting

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["errorCode"] = self.code
        if self.troubleshooting:
            result["troubleshooting"] = {
                "title": "How to fix this",
                "steps": self.troubleshooting,
            }
        return result


# =============================================================================
# Exception Handlers
# =============================================================================

async def transformo_exception_handler(
    request: Request,
    exc: TransformoException
) -> JSONResponse:
    """
    Render the error envelope: success=false, error, code, plus suggestion
    and details when present. Rate limit errors also carry Retry-After.
    """
    headers = None
    if isinstance(exc, RateLimitExceededError) and exc.retry_after:
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=headers,
    )
