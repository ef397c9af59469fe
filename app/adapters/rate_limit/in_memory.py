"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: sweep, lookup and increment share one lock.
- Expired entries are swept on every decision, not by a background timer.
- Windows open on a key's first request, so a client may burst up to twice
  the limit across a window boundary.
"""

from __future__ import annotations

import logging
import threading

from app.adapters.rate_limit.base import (
    AbstractRateLimiter,
    AbstractRateLimitStore,
    Clock,
    RateLimitDecision,
    RateLimitEntry,
    system_clock_ms,
)

logger = logging.getLogger(__name__)


class InMemoryRateLimitStore(AbstractRateLimitStore):
    """Dict-backed store. Not synchronized; the owning limiter holds the lock."""

    def __init__(self) -> None:
        self._entries: dict[str, RateLimitEntry] = {}

    def get(self, key: str) -> RateLimitEntry | None:
        return self._entries.get(key)

    def set(self, key: str, entry: RateLimitEntry) -> None:
        self._entries[key] = entry

    def sweep(self, now: int) -> int:
        expired = [key for key, entry in self._entries.items() if entry.reset_time < now]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


class FixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter using a fixed window opened by each key's first request.

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker will enforce its
        own independent limits.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_ms: int,
        store: AbstractRateLimitStore | None = None,
        clock: Clock = system_clock_ms,
    ) -> None:
        """Initialize the limiter.

        Args:
            limit: Maximum number of admitted requests per window.
            window_ms: Size of the fixed window in milliseconds.
            store: Backing store; a fresh in-memory store when omitted.
            clock: Time source returning epoch milliseconds.

        Raises:
            ValueError: If limit or window_ms are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")

        self._limit = limit
        self._window_ms = window_ms
        self._store = store if store is not None else InMemoryRateLimitStore()
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_ms(self) -> int:
        return self._window_ms

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def store(self) -> AbstractRateLimitStore:
        return self._store

    def _open_window(self, key: str, now: int) -> RateLimitDecision:
        entry = RateLimitEntry(count=1, reset_time=now + self._window_ms)
        self._store.set(key, entry)
        return RateLimitDecision(
            allowed=True,
            limit=self._limit,
            remaining=self._limit - 1,
            reset_time=entry.reset_time,
        )

    def decide(self, key: str, now: int | None = None) -> RateLimitDecision:
        """Admit or deny one request for key.

        Denied requests are not counted, so a client that keeps retrying does
        not extend its own window.

        Args:
            key: Client key (IP address or the "unknown" sentinel).
            now: Epoch ms of the request; defaults to the injected clock.

        Returns:
            RateLimitDecision with the allow/deny outcome and quota metadata.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        if now is None:
            now = self._clock()

        with self._lock:
            swept = self._store.sweep(now)
            if swept:
                logger.debug(
                    "rate_limit.swept",
                    extra={"removed": swept, "tracked_keys": len(self._store)},
                )

            entry = self._store.get(key)
            if entry is None or entry.reset_time < now:
                return self._open_window(key, now)

            if entry.count >= self._limit:
                return RateLimitDecision(
                    allowed=False,
                    limit=self._limit,
                    remaining=0,
                    reset_time=entry.reset_time,
                )

            entry.count += 1
            return RateLimitDecision(
                allowed=True,
                limit=self._limit,
                remaining=self._limit - entry.count,
                reset_time=entry.reset_time,
            )
