# =============================================================================
# lib/email_providers.py - Email Marketing Provider Clients
# =============================================================================
# Clients for the email providers a business can connect (MailerLite,
# Mailchimp, Brevo). Each one validates an API key by listing the account's
# groups/lists, so a successful validation also returns the groups the user
# can pick a default audience from.
#
# Provider failures are never raised to the caller: they come back as
# EmailProviderResponse(success=False, error=<user-facing message>).
#
# Usage:
#   from lib.email_providers import validate_email_provider_and_fetch_groups
#   result = validate_email_provider_and_fetch_groups("mailerlite", api_key)
# =============================================================================

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Literal

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)

EmailProviderName = Literal["mailerlite", "mailchimp", "brevo"]
SUPPORTED_EMAIL_PROVIDERS: tuple[str, ...] = ("mailerlite", "mailchimp", "brevo")

REQUEST_TIMEOUT = 15.0

MSG_INVALID_KEY = "Invalid API key. Please check your credentials and try again."
MSG_RATE_LIMITED = "Too many requests. Please wait a moment and try again."
MSG_UNAVAILABLE = "Service temporarily unavailable. Please try again later."


class EmailGroup(BaseModel):
    """A subscriber group (MailerLite) or list (Mailchimp, Brevo)."""
    id: str
    name: str
    subscriber_count: int | None = None


class EmailProviderResponse(BaseModel):
    success: bool
    groups: list[EmailGroup] | None = None
    error: str | None = None


class BaseEmailProvider(ABC):
    """
    Common request/error handling for email providers.

    Subclasses define how to build the request and how to read groups
    out of the JSON body.
    """

    display_name: str = "Email provider"

    def __init__(self, api_key: str, client: httpx.Client | None = None):
        self.api_key = api_key
        self._client = client

    @abstractmethod
    def _groups_url(self) -> str:
        ...

    @abstractmethod
    def _headers(self) -> dict[str, str]:
        ...

    @abstractmethod
    def _parse_groups(self, data: dict[str, Any]) -> list[EmailGroup]:
        ...

    def _get(self, url: str, headers: dict[str, str]) -> httpx.Response:
        if self._client is not None:
            return self._client.get(url, headers=headers)
        with httpx.Client(timeout=REQUEST_TIMEOUT) as client:
            return client.get(url, headers=headers)

    def validate_and_fetch_groups(self) -> EmailProviderResponse:
        """
        Validate the API key by fetching the account's groups.

        Returns:
            EmailProviderResponse with groups on success, or a
            user-facing error message on failure
        """
        try:
            response = self._get(self._groups_url(), self._headers())
        except (ValueError, httpx.InvalidURL) as e:
            # The key is part of the URL for some providers
            logger.warning(f"{self.display_name} key produced an unusable request: {e}")
            return EmailProviderResponse(success=False, error=MSG_INVALID_KEY)
        except httpx.TransportError as e:
            logger.error(f"{self.display_name} API error: {e}")
            return EmailProviderResponse(
                success=False,
                error=f"Unable to connect to {self.display_name}. Please check your internet connection.",
            )

        if response.status_code == 401:
            return EmailProviderResponse(success=False, error=MSG_INVALID_KEY)
        if response.status_code == 429:
            return EmailProviderResponse(success=False, error=MSG_RATE_LIMITED)
        if not response.is_success:
            return EmailProviderResponse(
                success=False,
                error=f"{MSG_UNAVAILABLE} (Status: {response.status_code})",
            )

        try:
            data = response.json()
            if not isinstance(data, dict):
                raise ValueError(f"expected an object, got {type(data).__name__}")
            groups = self._parse_groups(data)
        except (ValueError, AttributeError) as e:
            logger.error(f"{self.display_name} returned an unreadable body: {e}")
            return EmailProviderResponse(success=False, error=MSG_UNAVAILABLE)

        return EmailProviderResponse(success=True, groups=groups)


def _int_or_none(value: Any) -> int | None:
    # bool is an int subclass but never a subscriber count
    if isinstance(value, bool):
        return None
    return value if isinstance(value, int) else None


class MailerLiteProvider(BaseEmailProvider):
    display_name = "MailerLite"
    base_url = "https://connect.mailerlite.com/api"

    def _groups_url(self) -> str:
        return f"{self.base_url}/groups"

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _parse_groups(self, data: dict[str, Any]) -> list[EmailGroup]:
        return [
            EmailGroup(
                id=str(group.get("id")),
                name=str(group.get("name")),
                subscriber_count=_int_or_none(group.get("active_count")),
            )
            for group in data.get("data") or []
        ]


class MailchimpProvider(BaseEmailProvider):
    display_name = "MailChimp"

    @property
    def datacenter(self) -> str:
        """Datacenter suffix of the key, e.g. 'us21' in 'abc123-us21'."""
        _, sep, dc = self.api_key.rpartition("-")
        if not sep or not dc.isalnum():
            raise ValueError("Invalid MailChimp API key format")
        return dc

    def _groups_url(self) -> str:
        return f"https://{self.datacenter}.api.mailchimp.com/3.0/lists"

    def _headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json"}

    def _get(self, url: str, headers: dict[str, str]) -> httpx.Response:
        # Mailchimp accepts any username with the key as password
        auth = httpx.BasicAuth("anystring", self.api_key)
        if self._client is not None:
            return self._client.get(url, headers=headers, auth=auth)
        with httpx.Client(timeout=REQUEST_TIMEOUT) as client:
            return client.get(url, headers=headers, auth=auth)

    def _parse_groups(self, data: dict[str, Any]) -> list[EmailGroup]:
        groups = []
        for item in data.get("lists") or []:
            stats = item.get("stats")
            count = stats.get("member_count") if isinstance(stats, dict) else None
            groups.append(
                EmailGroup(
                    id=str(item.get("id")),
                    name=str(item.get("name")),
                    subscriber_count=_int_or_none(count),
                )
            )
        return groups


class BrevoProvider(BaseEmailProvider):
    display_name = "Brevo"
    base_url = "https://api.brevo.com/v3"

    def _groups_url(self) -> str:
        return f"{self.base_url}/contacts/lists"

    def _headers(self) -> dict[str, str]:
        return {
            "api-key": self.api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _parse_groups(self, data: dict[str, Any]) -> list[EmailGroup]:
        return [
            EmailGroup(
                id=str(item.get("id")),
                name=str(item.get("name")),
                subscriber_count=_int_or_none(item.get("totalSubscribers")),
            )
            for item in data.get("lists") or []
        ]


_PROVIDERS: dict[str, type[BaseEmailProvider]] = {
    "mailerlite": MailerLiteProvider,
    "mailchimp": MailchimpProvider,
    "brevo": BrevoProvider,
}


def create_email_provider(
    provider: str,
    api_key: str,
    client: httpx.Client | None = None,
) -> BaseEmailProvider:
    """
    Create the client for a provider name.

    Raises:
        ValueError: If the provider is not supported
    """
    try:
        provider_cls = _PROVIDERS[provider]
    except KeyError:
        raise ValueError(f"Unsupported email provider: {provider}")
    return provider_cls(api_key, client=client)


def validate_email_provider_and_fetch_groups(
    provider: str,
    api_key: str,
    client: httpx.Client | None = None,
) -> EmailProviderResponse:
    """Validate a key for `provider` and return its groups (never raises)."""
    try:
        provider_client = create_email_provider(provider, api_key, client=client)
    except ValueError as e:
        return EmailProviderResponse(success=False, error=str(e))
    return provider_client.validate_and_fetch_groups()
