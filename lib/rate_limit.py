# =============================================================================
# lib/rate_limit.py - Fixed-Window Rate Limiting (Redis)
# =============================================================================
# Counts requests per caller in Redis so limits hold across API processes.
#
# A window starts with the caller's first request: the counter key is
# created with INCR and given a TTL of one window. Once the counter passes
# the limit, requests are refused until the key expires.
#
# Callers are identified by client IP (x-forwarded-for, x-real-ip,
# cf-connecting-ip, then the socket address) plus the user ID when known.
#
# Usage:
#   from lib.rate_limit import RateLimiter, RATE_LIMIT_PRESETS
#   result = RateLimiter.check("1.2.3.4:user-1", RATE_LIMIT_PRESETS["upload"])
#   if not result.allowed:
#       ...
# =============================================================================

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Mapping

import redis

from app.config import settings

logger = logging.getLogger(__name__)

KEY_NAMESPACE = "ratelimit"


@dataclass(frozen=True)
class RateLimitConfig:
    """Limit of `max_requests` per `window_ms`, keyed under `key_prefix`."""
    window_ms: int
    max_requests: int
    key_prefix: str


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    retry_after: int | None = None


RATE_LIMIT_PRESETS: dict[str, RateLimitConfig] = {
    "default": RateLimitConfig(window_ms=60_000, max_requests=100, key_prefix="api:default"),
    "upload": RateLimitConfig(window_ms=60_000, max_requests=10, key_prefix="api:upload"),
}


def get_request_identifier(
    headers: Mapping[str, str],
    client_host: str | None = None,
    user_id: str | None = None,
) -> str:
    """
    Identify a caller by IP, optionally scoped to a user.

    Args:
        headers: Request headers (case-insensitive mapping)
        client_host: Socket peer address, used when no proxy header is set
        user_id: Authenticated user ID

    Returns:
        "ip" or "ip:user_id"
    """
    forwarded_for = headers.get("x-forwarded-for")
    ip = (
        (forwarded_for.split(",")[0].strip() if forwarded_for else None)
        or headers.get("x-real-ip")
        or headers.get("cf-connecting-ip")
        or client_host
        or "unknown"
    )
    return f"{ip}:{user_id}" if user_id else ip


class RateLimiter:
    """
    Redis-backed fixed-window limiter.

    One Redis connection pool is shared by the process.
    """

    _client: redis.Redis | None = None

    @classmethod
    def get_redis(cls) -> redis.Redis:
        if cls._client is None:
            cls._client = redis.Redis.from_url(settings.REDIS_URL, decode_responses=True)
        return cls._client

    @classmethod
    def check(cls, identifier: str, config: RateLimitConfig) -> RateLimitResult:
        """
        Count one request for `identifier` and decide whether it is allowed.

        Redis outages let requests through (logged) rather than taking
        the API down with them.
        """
        if not settings.RATE_LIMIT_ENABLED:
            return RateLimitResult(allowed=True, remaining=config.max_requests)

        key = f"{KEY_NAMESPACE}:{config.key_prefix}:{identifier}"

        try:
            client = cls.get_redis()
            count = client.incr(key)
            if count == 1:
                client.pexpire(key, config.window_ms)

            if count > config.max_requests:
                ttl_ms = client.pttl(key)
                if ttl_ms is None or ttl_ms < 0:
                    # Key lost its TTL (e.g. crash between INCR and PEXPIRE)
                    client.pexpire(key, config.window_ms)
                    ttl_ms = config.window_ms
                return RateLimitResult(
                    allowed=False,
                    remaining=0,
                    retry_after=math.ceil(ttl_ms / 1000),
                )

        except redis.RedisError as e:
            logger.warning(f"Rate limit check skipped, Redis unavailable: {e}")
            return RateLimitResult(allowed=True, remaining=config.max_requests)

        return RateLimitResult(allowed=True, remaining=config.max_requests - count)
