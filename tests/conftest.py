# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - FakeSupabase: queued responses per table/RPC, records every query
# - An API client with the caller's user and business pre-resolved
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-enough-length")
os.environ.setdefault("N8N_CALLBACK_SECRET", "test-callback-secret")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from collections import defaultdict, deque
from typing import Any
from unittest.mock import MagicMock
from uuid import UUID

import pytest

from lib.supabase_client import SupabaseClient

USER_ID = UUID("11111111-1111-1111-1111-111111111111")
BUSINESS_ID = "22222222-2222-2222-2222-222222222222"
OTHER_BUSINESS_ID = "33333333-3333-3333-3333-333333333333"


# =============================================================================
# Supabase Fake
# =============================================================================

class FakeResponse:
    def __init__(self, data: Any = None, count: int | None = None):
        self.data = data if data is not None else []
        self.count = count


class FakeQuery:
    """
    Chainable stand-in for a PostgREST query builder.

    Every builder call is recorded; execute() pops the next response
    queued for the table (or "rpc:<name>").
    """

    def __init__(self, db: "FakeSupabase", key: str):
        self.db = db
        self.key = key
        self.calls: list[tuple[str, tuple, dict]] = []

    def __getattr__(self, name: str):
        if name.startswith("__"):
            raise AttributeError(name)

        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return method

    @property
    def not_(self) -> "FakeQuery":
        self.calls.append(("not_", (), {}))
        return self

    def execute(self) -> FakeResponse:
        self.db.executed.append(self)
        return self.db.next_response(self.key)

    def args(self, name: str) -> tuple:
        """Positional args of the first call to `name`."""
        for call_name, args, _ in self.calls:
            if call_name == name:
                return args
        raise AssertionError(f"{name} was not called on {self.key}")

    def called(self, name: str) -> bool:
        return any(call_name == name for call_name, _, _ in self.calls)


class FakeSupabase:
    """In-memory replacement for the supabase Client."""

    def __init__(self):
        self.responses: dict[str, deque] = defaultdict(deque)
        self.executed: list[FakeQuery] = []
        self.storage = MagicMock()

    def queue(self, key: str, data: Any = None, count: int | None = None) -> None:
        self.responses[key].append(FakeResponse(data, count))

    def queue_error(self, key: str, error: Exception) -> None:
        self.responses[key].append(error)

    def next_response(self, key: str) -> FakeResponse:
        if self.responses[key]:
            item = self.responses[key].popleft()
            if isinstance(item, Exception):
                raise item
            return item
        return FakeResponse([])

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: dict | None = None) -> FakeQuery:
        query = FakeQuery(self, f"rpc:{name}")
        query.calls.append(("rpc", (params,), {}))
        return query

    def queries(self, key: str) -> list[FakeQuery]:
        return [q for q in self.executed if q.key == key]

    def updates(self, table: str) -> list[dict]:
        return [q.args("update")[0] for q in self.queries(table) if q.called("update")]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_db(monkeypatch):
    """Route SupabaseClient.get_client() to a fresh FakeSupabase."""
    db = FakeSupabase()
    monkeypatch.setattr(SupabaseClient, "_instance", db)
    return db


@pytest.fixture
def api_client(fake_db):
    """TestClient whose caller is USER_ID in BUSINESS_ID."""
    from fastapi.testclient import TestClient

    from app.auth import AuthUser, get_current_user
    from app.dependencies import get_current_business_id
    from app.main import app

    app.dependency_overrides[get_current_user] = lambda: AuthUser(id=USER_ID, email="owner@example.com")
    app.dependency_overrides[get_current_business_id] = lambda: BUSINESS_ID

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(fake_db):
    """TestClient with real token verification."""
    from fastapi.testclient import TestClient

    from app.main import app

    app.dependency_overrides.clear()
    with TestClient(app) as client:
        yield client


@pytest.fixture
def sample_content():
    return {
        "id": "content-1",
        "business_id": BUSINESS_ID,
        "project_type": "voice_recording",
        "content_title": "Pricing your services",
        "status": "completed",
        "content_generation_status": "completed",
        "transcript": "Today we talk about pricing...",
        "video_script": "Hi, I'm Jane...",
        "created_at": "2024-05-01T10:00:00+00:00",
    }


@pytest.fixture
def sample_business():
    return {
        "id": BUSINESS_ID,
        "business_name": "Acme Coaching",
        "website_url": "https://acme.example",
        "first_name": "Jane",
        "last_name": "Doe",
        "writing_style_guide": "Warm and direct",
    }


@pytest.fixture
def sample_asset():
    return {
        "id": "asset-1",
        "content_id": "content-1",
        "content_type": "blog_post",
        "image_url": "https://cdn.example/images/asset-1.jpg",
        "temporary_image_url": None,
        "image_prompt": "A desk with a laptop",
        "approved": False,
        "content": {"business_id": BUSINESS_ID},
    }
