"""Rate limiting dependency for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer (the
admission gate in front of public case submission).

Design goals:
- Minimal coupling: API routes depend on a dependency function only.
- Swap-friendly: storage backend can be replaced behind an abstract interface.
- Gate first: the decision is taken before the request body is read.

Rate limiting strategy:
- Fixed window per client IP (5 submissions per 5 minutes by default).
- Forwarded headers are honoured only from trusted proxies, see
  app.core.client_key.
"""

from __future__ import annotations

import hashlib
import logging

from fastapi import Request

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitDecision
from app.adapters.rate_limit.in_memory import FixedWindowRateLimiter
from app.core.client_key import ClientKeyResolver, parse_trusted_proxies
from app.core.config import settings
from app.core.errors import RateLimitExceededError

logger = logging.getLogger(__name__)


_limiter: AbstractRateLimiter | None = None
_limiter_config: tuple[int, int] | None = None

_resolver: ClientKeyResolver | None = None
_resolver_config: str | None = None


def get_rate_limiter() -> AbstractRateLimiter:
    """Return a process-wide rate limiter instance.

    The instance is cached in-module to preserve state across requests.
    If configuration changes (primarily in tests), the limiter is rebuilt.
    """

    global _limiter, _limiter_config

    config = (
        settings.app.rate_limit_requests,
        settings.app.rate_limit_window_seconds,
    )

    if _limiter is None or _limiter_config != config:
        _limiter = FixedWindowRateLimiter(
            limit=settings.app.rate_limit_requests,
            window_ms=settings.app.rate_limit_window_seconds * 1000,
        )
        _limiter_config = config

    return _limiter


def get_client_key_resolver() -> ClientKeyResolver:
    """Return a resolver built from the trusted proxy setting."""

    global _resolver, _resolver_config

    config = settings.app.trusted_proxies
    if _resolver is None or _resolver_config != config:
        _resolver = ClientKeyResolver(parse_trusted_proxies(config))
        _resolver_config = config

    return _resolver


def _hash_client_key(key: str) -> str:
    """Hash the client key for logging without exposing the reporter's IP."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def rate_limit_headers(decision: RateLimitDecision) -> dict[str, str]:
    """X-RateLimit-* headers describing the post-decision window state."""
    return {
        "X-RateLimit-Limit": str(decision.limit),
        "X-RateLimit-Remaining": str(decision.remaining),
        "X-RateLimit-Reset": str(decision.reset_time),
    }


async def enforce_submission_rate_limit(request: Request) -> RateLimitDecision | None:
    """FastAPI dependency admitting or rejecting a submission.

    Consumes one unit from the client's budget. The decision is returned so
    the route can annotate its response with the remaining quota.

    Returns:
        The admission decision, or None when rate limiting is disabled.

    Raises:
        RateLimitExceededError: When the client's quota for the current
            window is exhausted.
    """

    if not settings.app.rate_limit_enabled:
        return None

    limiter = get_rate_limiter()
    key = get_client_key_resolver().resolve_request(request)
    key_hash = _hash_client_key(key)

    now = limiter.clock()
    decision = limiter.decide(key, now)
    if decision.allowed:
        logger.info(
            "rate_limit.allowed",
            extra={
                "key_hash": key_hash,
                "limit": decision.limit,
                "remaining": decision.remaining,
                "window_s": settings.app.rate_limit_window_seconds,
            },
        )
        return decision

    retry_after = decision.retry_after_seconds(now)
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "key_hash": key_hash,
            "limit": decision.limit,
            "window_s": settings.app.rate_limit_window_seconds,
            "retry_after_s": retry_after,
        },
    )

    raise RateLimitExceededError(
        code="rate_limit_exceeded",
        message="Rate limit exceeded. Please wait before submitting another case.",
        details={
            "retry_after": retry_after,
            "limit": decision.limit,
            "remaining": 0,
            "reset_time": decision.reset_time,
        },
    )
