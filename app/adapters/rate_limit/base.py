"""Rate limiter interfaces.

The HTTP layer depends on these abstractions (not the concrete implementation)
so the storage backend can be swapped later with minimal changes.

All timestamps are UNIX epoch milliseconds.
"""

from __future__ import annotations

import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

Clock = Callable[[], int]


def system_clock_ms() -> int:
    """Return the current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class RateLimitEntry:
    """Counter for one client key's current window.

    Attributes:
        count: Requests admitted so far in the current window (>= 1).
        reset_time: Epoch ms at which the window ends and the counter resets.
    """

    count: int
    reset_time: int


@dataclass(frozen=True)
class RateLimitDecision:
    """Result of an admission decision.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window.
        remaining: Remaining requests in the current window (0 when denied).
        reset_time: Epoch ms when the current window ends.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_time: int

    def retry_after_seconds(self, now: int) -> int:
        """Seconds the caller should wait before retrying, rounded up."""
        return max(0, math.ceil((self.reset_time - now) / 1000))


class AbstractRateLimitStore(ABC):
    """Mapping from client key to its current window entry."""

    @abstractmethod
    def get(self, key: str) -> RateLimitEntry | None:
        """Return the entry for key without mutating anything."""
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, entry: RateLimitEntry) -> None:
        """Insert or overwrite the entry for key."""
        raise NotImplementedError

    @abstractmethod
    def sweep(self, now: int) -> int:
        """Remove every entry whose reset_time is before now.

        Returns:
            Number of entries removed.
        """
        raise NotImplementedError

    @abstractmethod
    def __len__(self) -> int:
        raise NotImplementedError


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @property
    @abstractmethod
    def limit(self) -> int:
        """Max requests admitted per window."""
        raise NotImplementedError

    @property
    @abstractmethod
    def clock(self) -> Clock:
        """Time source used when decide() is called without an explicit now."""
        raise NotImplementedError

    @abstractmethod
    def decide(self, key: str, now: int | None = None) -> RateLimitDecision:
        """Admit or deny one request for key, updating the store.

        Args:
            key: Client key (e.g., IP address).
            now: Epoch ms of the request; defaults to the limiter's clock.

        Returns:
            RateLimitDecision describing whether it was allowed.
        """
        raise NotImplementedError
