# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# /health answers without touching dependencies; /health/ready probes
# Supabase (table query and storage) and reports per-dependency results.
# =============================================================================

from datetime import datetime, timezone
from typing import Callable

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from lib.supabase_client import SupabaseClient

router = APIRouter()

API_VERSION = "1.0.0"


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    status: str
    timestamp: str
    environment: str
    version: str


class ChecksResponse(BaseModel):
    """Result per dependency: "healthy" or "unhealthy: <reason>"."""
    database: str = "unknown"
    storage: str = "unknown"


class ReadinessResponse(BaseModel):
    status: str
    checks: ChecksResponse
    timestamp: str


class LivenessResponse(BaseModel):
    status: str
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _probe_database() -> None:
    SupabaseClient.get_client().table("content").select("id").limit(1).execute()


def _probe_storage() -> None:
    SupabaseClient.get_client().storage.list_buckets()


PROBES: dict[str, Callable[[], None]] = {
    "database": _probe_database,
    "storage": _probe_storage,
}


def _run_probe(probe: Callable[[], None]) -> str:
    try:
        probe()
    except Exception as e:
        return f"unhealthy: {str(e)[:50]}"
    return "healthy"


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Basic status for load balancers; touches no dependencies."""
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version=API_VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check():
    """Runs every probe; "degraded" when any of them fails."""
    results = {name: _run_probe(probe) for name, probe in PROBES.items()}
    ready = all(result == "healthy" for result in results.values())

    return ReadinessResponse(
        status="ready" if ready else "degraded",
        checks=ChecksResponse(**results),
        timestamp=_now(),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    """Process liveness for container restart decisions."""
    return LivenessResponse(status="alive", timestamp=_now())
