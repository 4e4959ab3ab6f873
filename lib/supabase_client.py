# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides the lookups shared by several services:
# - Profiles (user -> business resolution)
# - Businesses
# - Content rows, optionally joined with their business
# - Content assets
# - Vault RPCs (encrypted secrets)
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   content = SupabaseClient.fetch_content(content_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings

# Set up logging for this module
logger = logging.getLogger(__name__)


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Provides actionable error messages:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        business_id = SupabaseClient.fetch_business_id_for_user(user.id)
        content = SupabaseClient.fetch_content(content_id, with_business=True)
        business = content["businesses"] if content else None
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        Tenant isolation is therefore enforced by the services, which
        always filter by the caller's business.

        Returns:
            Client: Supabase client instance

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    @staticmethod
    def _first(rows: list[dict[str, Any]] | None) -> dict[str, Any] | None:
        """Return the first row of a response, or None."""
        return rows[0] if rows else None

    # -------------------------------------------------------------------------
    # Profiles / Businesses
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_business_id_for_user(cls, user_id: str | UUID) -> str | None:
        """
        Resolve the business a user belongs to.

        Args:
            user_id: The auth user UUID (profiles.id)

        Returns:
            The business UUID, or None if the profile has no business

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table("profiles")
                .select("business_id")
                .eq("id", user_id_str)
                .limit(1)
                .execute()
            )
            profile = cls._first(response.data)
            return profile.get("business_id") if profile else None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch profile: {e}",
                code="FETCH_PROFILE_FAILED",
                suggestion="Check that the user has a row in the profiles table",
                details={"user_id": user_id_str}
            )

    @classmethod
    def fetch_business(cls, business_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a business by ID.

        Returns:
            Business dict with all fields, or None if not found
        """
        client = cls.get_client()
        business_id_str = cls._normalize_uuid(business_id)

        try:
            response = (
                client.table("businesses")
                .select("*")
                .eq("id", business_id_str)
                .limit(1)
                .execute()
            )
            return cls._first(response.data)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch business: {e}",
                code="FETCH_BUSINESS_FAILED",
                details={"business_id": business_id_str}
            )

    # -------------------------------------------------------------------------
    # Content
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_content(
        cls,
        content_id: str | UUID,
        with_business: bool = False,
    ) -> dict[str, Any] | None:
        """
        Fetch a content row by ID.

        Args:
            content_id: The content UUID
            with_business: Embed the owning business under "businesses"

        Returns:
            Content dict, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        content_id_str = cls._normalize_uuid(content_id)
        columns = "*, businesses(*)" if with_business else "*"

        try:
            response = (
                client.table("content")
                .select(columns)
                .eq("id", content_id_str)
                .limit(1)
                .execute()
            )
            return cls._first(response.data)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch content: {e}",
                code="FETCH_CONTENT_FAILED",
                suggestion="Check that the content_id exists",
                details={"content_id": content_id_str}
            )

    @classmethod
    def update_content(
        cls,
        content_id: str | UUID,
        data: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Update a content row and return the updated row.

        Returns:
            Updated content dict, or None if no row matched

        Raises:
            SupabaseClientError: If the update fails
        """
        client = cls.get_client()
        content_id_str = cls._normalize_uuid(content_id)

        try:
            response = (
                client.table("content")
                .update(data)
                .eq("id", content_id_str)
                .execute()
            )
            return cls._first(response.data)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update content: {e}",
                code="UPDATE_CONTENT_FAILED",
                details={"content_id": content_id_str, "fields": sorted(data)}
            )

    # -------------------------------------------------------------------------
    # Content Assets
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_content_asset(cls, asset_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a content asset with its parent content's business_id.

        The parent is embedded under "content" as {"business_id": ...}.

        Returns:
            Asset dict, or None if not found
        """
        client = cls.get_client()
        asset_id_str = cls._normalize_uuid(asset_id)

        try:
            response = (
                client.table("content_assets")
                .select("*, content:content_id(business_id)")
                .eq("id", asset_id_str)
                .limit(1)
                .execute()
            )
            return cls._first(response.data)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch content asset: {e}",
                code="FETCH_ASSET_FAILED",
                details={"content_asset_id": asset_id_str}
            )

    @classmethod
    def fetch_content_assets(cls, content_id: str | UUID) -> list[dict[str, Any]]:
        """
        Fetch all assets generated for a content item, oldest first.
        """
        client = cls.get_client()
        content_id_str = cls._normalize_uuid(content_id)

        try:
            response = (
                client.table("content_assets")
                .select("*")
                .eq("content_id", content_id_str)
                .order("created_at")
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch content assets: {e}",
                code="FETCH_ASSETS_FAILED",
                details={"content_id": content_id_str}
            )

    @classmethod
    def update_content_asset(
        cls,
        asset_id: str | UUID,
        data: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Update a content asset and return the updated row.

        Returns:
            Updated asset dict, or None if no row matched
        """
        client = cls.get_client()
        asset_id_str = cls._normalize_uuid(asset_id)

        try:
            response = (
                client.table("content_assets")
                .update(data)
                .eq("id", asset_id_str)
                .execute()
            )
            return cls._first(response.data)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update content asset: {e}",
                code="UPDATE_ASSET_FAILED",
                details={"content_asset_id": asset_id_str, "fields": sorted(data)}
            )

    # -------------------------------------------------------------------------
    # Vault RPCs
    # -------------------------------------------------------------------------

    @classmethod
    def call_rpc(cls, function: str, params: dict[str, Any] | None = None) -> Any:
        """
        Call a Postgres function through PostgREST.

        Used for the vault functions (get_email_secret_v2, set_blog_integration,
        ...), which encrypt and decrypt secrets server-side.

        Args:
            function: Function name
            params: Named arguments (p_business_id, ...)

        Returns:
            The function's return value (response.data)

        Raises:
            SupabaseClientError: If the call fails
        """
        client = cls.get_client()

        try:
            response = client.rpc(function, params or {}).execute()
            return response.data

        except Exception as e:
            # Never include params: they may carry plaintext secrets
            raise SupabaseClientError(
                message=f"RPC {function} failed: {e}",
                code="RPC_FAILED",
                details={"function": function}
            )
