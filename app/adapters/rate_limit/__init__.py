"""Rate limiting adapters.

This package provides a small abstraction layer so the portal can start with
an in-memory limiter and later migrate to a shared store without changing the
API layer.
"""

from app.adapters.rate_limit.base import (
    AbstractRateLimiter,
    AbstractRateLimitStore,
    Clock,
    RateLimitDecision,
    RateLimitEntry,
    system_clock_ms,
)
from app.adapters.rate_limit.in_memory import FixedWindowRateLimiter, InMemoryRateLimitStore

__all__ = [
    "AbstractRateLimiter",
    "AbstractRateLimitStore",
    "Clock",
    "FixedWindowRateLimiter",
    "InMemoryRateLimitStore",
    "RateLimitDecision",
    "RateLimitEntry",
    "system_clock_ms",
]
