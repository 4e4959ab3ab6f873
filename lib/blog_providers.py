# =============================================================================
# lib/blog_providers.py - Blog CMS Credential Validation
# =============================================================================
# Validates credentials for the blog platforms content can be published to:
# - WordPress: site URL + username + application password (Basic auth)
# - Wix: account API key
#
# Validation reads the site info, then probes the posts/media endpoints to
# report what the credentials are allowed to do.
#
# Usage:
#   from lib.blog_providers import validate_wordpress, BlogValidationError
#   try:
#       info = validate_wordpress(app_password, site_url, username)
#   except BlogValidationError as e:
#       print(e.message)
# =============================================================================

from __future__ import annotations

import logging
from typing import Literal

import httpx
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

BlogPlatform = Literal["wordpress", "wix"]
SUPPORTED_BLOG_PROVIDERS: tuple[str, ...] = ("wordpress", "wix")

REQUEST_TIMEOUT = 15.0
WIX_API_BASE = "https://dev.wix.com/api/v1"
WIX_FAILED = "Failed to validate Wix site. Please check your API key."

TROUBLESHOOTING_STEPS = [
    "Check your credentials are correct",
    "Ensure your site is accessible",
    "Verify API permissions",
]


class BlogValidationError(Exception):
    """Credentials were rejected, or the site could not be validated."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SiteInfo(BaseModel):
    """
    What the validated credentials give access to.

    Serialized with camelCase keys (canPublishPosts, canUploadMedia).
    """
    name: str
    description: str | None = None
    url: str
    version: str | None = None
    platform: BlogPlatform
    can_publish_posts: bool = Field(alias="canPublishPosts")
    can_upload_media: bool = Field(alias="canUploadMedia")

    model_config = ConfigDict(populate_by_name=True)


def _client(client: httpx.Client | None) -> httpx.Client:
    return client if client is not None else httpx.Client(timeout=REQUEST_TIMEOUT)


def validate_wordpress(
    app_password: str,
    site_url: str,
    username: str,
    client: httpx.Client | None = None,
) -> SiteInfo:
    """
    Validate WordPress application-password credentials.

    Args:
        app_password: WordPress application password
        site_url: Site root URL (trailing slash is ignored)
        username: WordPress username

    Returns:
        SiteInfo

    Raises:
        BlogValidationError: With a user-facing message
    """
    clean_url = site_url.rstrip("/")
    rest_api_url = f"{clean_url}/wp-json/wp/v2"
    auth = httpx.BasicAuth(username, app_password)
    headers = {"Content-Type": "application/json"}

    http = _client(client)
    try:
        site_response = http.get(f"{clean_url}/wp-json", headers=headers, auth=auth)

        if site_response.status_code == 401:
            raise BlogValidationError(
                "Invalid username or application password. Please check your credentials."
            )
        if site_response.status_code == 404:
            raise BlogValidationError(
                "WordPress REST API not found. Please ensure REST API is enabled on your site."
            )
        if not site_response.is_success:
            raise BlogValidationError(f"Site not accessible: {site_response.reason_phrase}")

        try:
            site_data = site_response.json()
        except ValueError:
            site_data = None
        if not isinstance(site_data, dict):
            raise BlogValidationError(
                "WordPress REST API not found. Please ensure REST API is enabled on your site."
            )

        posts_response = http.get(f"{rest_api_url}/posts?per_page=1", headers=headers, auth=auth)
        media_response = http.get(f"{rest_api_url}/media?per_page=1", headers=headers, auth=auth)

    except (httpx.TransportError, httpx.InvalidURL) as e:
        logger.warning(f"WordPress validation could not reach {clean_url}: {e}")
        raise BlogValidationError(
            "Failed to validate WordPress site. Please check your site URL and credentials."
        )
    finally:
        if client is None:
            http.close()

    return SiteInfo(
        name=site_data.get("name") or "WordPress Site",
        description=site_data.get("description") or None,
        url=clean_url,
        version=site_data.get("version") or None,
        platform="wordpress",
        can_publish_posts=posts_response.is_success,
        can_upload_media=media_response.is_success,
    )


def validate_wix(api_key: str, client: httpx.Client | None = None) -> SiteInfo:
    """
    Validate a Wix API key against the first site on the account.

    Raises:
        BlogValidationError: With a user-facing message
    """
    headers = {"Authorization": api_key, "Content-Type": "application/json"}

    http = _client(client)
    try:
        site_response = http.get(f"{WIX_API_BASE}/sites", headers=headers)

        if site_response.status_code == 401:
            raise BlogValidationError("Invalid Wix API key. Please check your credentials.")
        if site_response.status_code == 403:
            raise BlogValidationError("API key does not have sufficient permissions.")
        if not site_response.is_success:
            raise BlogValidationError(f"Wix API error: {site_response.reason_phrase}")

        try:
            body = site_response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            raise BlogValidationError(WIX_FAILED)

        sites = body.get("sites") or []
        if not isinstance(sites, list):
            raise BlogValidationError(WIX_FAILED)
        if not sites:
            raise BlogValidationError("No sites found for this API key.")
        site = sites[0]
        if not isinstance(site, dict):
            raise BlogValidationError(WIX_FAILED)

        blog_response = http.get(
            f"{WIX_API_BASE}/sites/{site.get('siteId')}/blog/posts?limit=1",
            headers=headers,
        )

    except httpx.TransportError as e:
        logger.warning(f"Wix validation failed to connect: {e}")
        raise BlogValidationError(WIX_FAILED)
    finally:
        if client is None:
            http.close()

    return SiteInfo(
        name=site.get("displayName") or site.get("siteDisplayName") or "Wix Site",
        url=site.get("liveUrl") or site.get("editorUrl") or "https://wix.com",
        platform="wix",
        can_publish_posts=blog_response.is_success,
        # Wix media upload is available to every blog-capable key
        can_upload_media=True,
    )


def validate_blog_provider(
    provider: str,
    credential: str,
    site_url: str | None = None,
    username: str | None = None,
    client: httpx.Client | None = None,
) -> SiteInfo:
    """
    Validate credentials for any supported blog provider.

    Raises:
        ValueError: For unsupported providers or missing WordPress fields
        BlogValidationError: When the provider rejects the credentials
    """
    if provider == "wordpress":
        if not site_url or not username:
            raise ValueError("Site URL and username are required for WordPress")
        return validate_wordpress(credential, site_url, username, client=client)
    if provider == "wix":
        return validate_wix(credential, client=client)
    raise ValueError("Unsupported blog provider")
