# =============================================================================
# lib/webhook_security.py - HMAC Webhook Signatures
# =============================================================================
# Verifies signed webhook requests sent by the workflow engine.
#
# Signature scheme:
#   hex(HMAC-SHA256(secret, f"{timestamp}.{payload}"))
#
# The timestamp is milliseconds since the epoch and travels in the
# x-webhook-timestamp header; the signature travels in x-webhook-signature.
# Requests older than five minutes, or more than one minute in the future,
# are rejected before the signature is compared.
#
# Usage:
#   from lib.webhook_security import validate_webhook_headers
#   result = validate_webhook_headers(request.headers, raw_body, secret)
#   if not result.valid:
#       ...
# =============================================================================

from __future__ import annotations

import hashlib
import hmac
import json
import time
from dataclasses import dataclass
from typing import Any, Mapping

SIGNATURE_HEADER = "x-webhook-signature"
TIMESTAMP_HEADER = "x-webhook-timestamp"

DEFAULT_MAX_AGE_MS = 5 * 60 * 1000
MAX_FUTURE_SKEW_MS = 60 * 1000


@dataclass(frozen=True)
class SignatureCheck:
    """Outcome of a signature verification."""
    valid: bool
    error: str | None = None


def _now_ms() -> int:
    return int(time.time() * 1000)


def _payload_to_string(payload: str | bytes | Mapping[str, Any]) -> str:
    if isinstance(payload, bytes):
        return payload.decode("utf-8")
    if isinstance(payload, str):
        return payload
    # Compact separators match JSON.stringify output
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def generate_webhook_signature(
    payload: str | bytes | Mapping[str, Any],
    secret: str,
    timestamp: int,
) -> str:
    """
    Generate the HMAC signature for a webhook payload.

    Args:
        payload: Raw body, or a dict that will be serialized compactly
        secret: Shared webhook secret
        timestamp: Request timestamp in milliseconds

    Returns:
        Lowercase hex digest
    """
    message = f"{timestamp}.{_payload_to_string(payload)}"
    return hmac.new(
        secret.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def verify_webhook_signature(
    payload: str | bytes | Mapping[str, Any],
    signature: str,
    secret: str,
    timestamp: int,
    max_age_ms: int = DEFAULT_MAX_AGE_MS,
) -> SignatureCheck:
    """
    Verify a webhook signature and its timestamp window.

    Returns:
        SignatureCheck(valid, error)
    """
    now = _now_ms()
    if now - timestamp > max_age_ms:
        return SignatureCheck(False, "Request timestamp too old")

    if timestamp > now + MAX_FUTURE_SKEW_MS:
        return SignatureCheck(False, "Request timestamp in the future")

    expected = generate_webhook_signature(payload, secret, timestamp)
    if not hmac.compare_digest(signature.encode("utf-8"), expected.encode("utf-8")):
        return SignatureCheck(False, "Invalid signature")

    return SignatureCheck(True)


def validate_webhook_headers(
    headers: Mapping[str, str],
    payload: str | bytes | Mapping[str, Any],
    secret: str,
) -> SignatureCheck:
    """
    Validate a request using its x-webhook-signature/x-webhook-timestamp headers.

    Args:
        headers: Request headers (case-insensitive mapping such as Starlette's)
        payload: The raw request body
        secret: Shared webhook secret
    """
    signature = headers.get(SIGNATURE_HEADER)
    timestamp_raw = headers.get(TIMESTAMP_HEADER)

    if not signature or not timestamp_raw:
        return SignatureCheck(False, "Missing webhook signature or timestamp")

    try:
        timestamp = int(timestamp_raw)
    except ValueError:
        return SignatureCheck(False, "Invalid timestamp format")

    return verify_webhook_signature(payload, signature, secret, timestamp)

