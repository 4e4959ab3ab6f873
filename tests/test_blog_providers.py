# =============================================================================
# tests/test_blog_providers.py - Blog Credential Validation Tests
# =============================================================================

import httpx
import pytest

from lib.blog_providers import (
    BlogValidationError,
    validate_blog_provider,
    validate_wix,
    validate_wordpress,
)


def routed_client(routes: dict[str, httpx.Response]) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        return routes.get(request.url.path, httpx.Response(404))
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestWordPress:

    def test_site_info_and_permissions(self):
        client = routed_client({
            "/wp-json": httpx.Response(200, json={"name": "Acme Blog", "description": "", "version": "6.4"}),
            "/wp-json/wp/v2/posts": httpx.Response(200, json=[]),
            "/wp-json/wp/v2/media": httpx.Response(403),
        })

        info = validate_wordpress("app pass", "https://blog.acme.example/", "jane", client=client)

        assert info.name == "Acme Blog"
        assert info.description is None
        assert info.url == "https://blog.acme.example"
        assert info.platform == "wordpress"
        assert info.can_publish_posts is True
        assert info.can_upload_media is False

    def test_serialized_with_camel_case(self):
        client = routed_client({
            "/wp-json": httpx.Response(200, json={}),
            "/wp-json/wp/v2/posts": httpx.Response(200, json=[]),
            "/wp-json/wp/v2/media": httpx.Response(200, json=[]),
        })

        dumped = validate_wordpress("p", "https://b.example", "u", client=client).model_dump(by_alias=True)

        assert dumped["name"] == "WordPress Site"
        assert dumped["canPublishPosts"] is True
        assert dumped["canUploadMedia"] is True

    def test_bad_credentials(self):
        client = routed_client({"/wp-json": httpx.Response(401)})
        with pytest.raises(BlogValidationError, match="Invalid username or application password"):
            validate_wordpress("p", "https://b.example", "u", client=client)

    def test_rest_api_missing(self):
        client = routed_client({})
        with pytest.raises(BlogValidationError, match="REST API not found"):
            validate_wordpress("p", "https://b.example", "u", client=client)

    def test_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("dns failure", request=request)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        with pytest.raises(BlogValidationError, match="Failed to validate WordPress site"):
            validate_wordpress("p", "https://b.example", "u", client=client)

    @pytest.mark.parametrize("response", [
        httpx.Response(200, json=["not", "an", "object"]),
        httpx.Response(200, text="<html>maintenance</html>"),
    ])
    def test_unreadable_site_info(self, response):
        client = routed_client({"/wp-json": response})
        with pytest.raises(BlogValidationError, match="REST API not found"):
            validate_wordpress("p", "https://b.example", "u", client=client)


class TestWix:

    def test_first_site_used(self):
        client = routed_client({
            "/api/v1/sites": httpx.Response(200, json={"sites": [
                {"siteId": "s1", "displayName": "Acme Shop", "liveUrl": "https://acme.wixsite.com"},
                {"siteId": "s2", "displayName": "Other"},
            ]}),
            "/api/v1/sites/s1/blog/posts": httpx.Response(200, json={}),
        })

        info = validate_wix("wix-key", client=client)

        assert info.name == "Acme Shop"
        assert info.url == "https://acme.wixsite.com"
        assert info.can_publish_posts is True
        assert info.can_upload_media is True

    def test_no_sites(self):
        client = routed_client({"/api/v1/sites": httpx.Response(200, json={"sites": []})})
        with pytest.raises(BlogValidationError, match="No sites found for this API key."):
            validate_wix("wix-key", client=client)

    def test_forbidden(self):
        client = routed_client({"/api/v1/sites": httpx.Response(403)})
        with pytest.raises(BlogValidationError, match="sufficient permissions"):
            validate_wix("wix-key", client=client)

    @pytest.mark.parametrize("response", [
        httpx.Response(200, text="not json"),
        httpx.Response(200, json=[{"siteId": "s1"}]),
        httpx.Response(200, json={"sites": {"siteId": "s1"}}),
        httpx.Response(200, json={"sites": ["s1"]}),
    ])
    def test_unreadable_sites_body(self, response):
        client = routed_client({"/api/v1/sites": response})
        with pytest.raises(BlogValidationError, match="Failed to validate Wix site"):
            validate_wix("wix-key", client=client)


class TestValidateBlogProvider:

    def test_wordpress_requires_site_and_username(self):
        with pytest.raises(ValueError, match="Site URL and username are required"):
            validate_blog_provider("wordpress", "pass", site_url="https://b.example")

    def test_unsupported(self):
        with pytest.raises(ValueError, match="Unsupported blog provider"):
            validate_blog_provider("ghost", "key")
