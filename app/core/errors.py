"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep backward compatibility while encouraging
    consistent shapes across the codebase.
    """

    code: str
    message: str
    hint: str
    http_status: int
    upstream_status: int
    retry_after: int
    limit: int
    remaining: int
    reset_time: int
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input validation fails."""


class NotFoundAppError(AppError):
    """Raised when the upstream reports that a resource does not exist."""


class RateLimitExceededError(AppError):
    """Raised when a client exhausted its submission quota.

    details carries retry_after (seconds), limit, remaining and reset_time
    (epoch ms) so the client can schedule its own retry.
    """


class ConfigurationMissingError(AppError):
    """Raised when a required setting (e.g. the dashboard URL) is absent."""


@dataclass
class UpstreamAppError(AppError):
    """Raised when the dashboard API call fails.

    Attributes:
        status_code: HTTP status to return to the client (502 for transport
            failures, 500 when the upstream rejected the request).
    """

    status_code: int = 502
