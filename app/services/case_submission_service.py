"""Service layer for public case submission.

The HTTP route hands over the raw request body once the rate limit gate has
admitted the request. This service validates it, forwards it to the dashboard
and translates dashboard failures into domain errors.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from app.adapters.dashboard.base import AbstractDashboardClient
from app.core.errors import AppError, NotFoundAppError, UpstreamAppError, ValidationAppError
from app.schemas.cases import CaseSubmissionRequest

logger = logging.getLogger(__name__)


def _format_validation_errors(exc: ValidationError) -> str:
    """Flatten pydantic errors into "field: message, field: message"."""
    parts = []
    for error in exc.errors():
        field = ".".join(str(p) for p in error.get("loc", ())) or "general"
        parts.append(f"{field}: {error.get('msg', 'invalid value')}")
    return ", ".join(parts)


def parse_case_submission(raw_body: bytes) -> CaseSubmissionRequest:
    """Decode and validate a case submission body.

    Args:
        raw_body: Request body bytes.

    Returns:
        CaseSubmissionRequest: Validated submission.

    Raises:
        ValidationAppError: If the body is not JSON or fails validation.
    """
    try:
        data = json.loads(raw_body or b"")
    except ValueError as exc:
        raise ValidationAppError(
            code="invalid_json",
            message="Invalid JSON in request body",
        ) from exc

    if not isinstance(data, dict):
        raise ValidationAppError(
            code="invalid_json",
            message="Request body must be a JSON object",
        )

    try:
        return CaseSubmissionRequest.model_validate(data)
    except ValidationError as exc:
        raise ValidationAppError(
            code="validation_failed",
            message="Validation failed",
            details={"hint": _format_validation_errors(exc)},
        ) from exc


class CaseSubmissionService:
    """Forward validated case submissions to the dashboard."""

    def __init__(self, dashboard: AbstractDashboardClient) -> None:
        self.dashboard = dashboard

    async def submit(self, submission: CaseSubmissionRequest) -> dict[str, Any]:
        """Create the case upstream.

        Args:
            submission: Validated case submission.

        Returns:
            The dashboard's JSON body for the created case.

        Raises:
            NotFoundAppError: If the dashboard does not know the subdomain.
            ValidationAppError: If the dashboard rejected the case with a message.
            UpstreamAppError: For any other failure (HTTP 500).
        """
        try:
            upstream = await self.dashboard.submit_case(submission.to_dashboard_payload())
        except AppError as exc:
            raise UpstreamAppError(
                code="case_submission_failed",
                message="Failed to submit case. Please try again later.",
                details={"hint": exc.code},
                status_code=500,
            ) from exc

        if upstream.ok:
            logger.info(
                "case_submission.forwarded",
                extra={
                    "subdomain": submission.subdomain,
                    "upstream_status": upstream.status_code,
                    "is_anonymous": submission.is_anonymous,
                },
            )
            return upstream.payload

        logger.warning(
            "case_submission.rejected",
            extra={
                "subdomain": submission.subdomain,
                "upstream_status": upstream.status_code,
            },
        )

        if upstream.status_code == 404:
            raise NotFoundAppError(code="company_not_found", message="Company not found")

        upstream_error = upstream.payload.get("error") if isinstance(upstream.payload, dict) else None
        if upstream.status_code == 400 and upstream_error:
            raise ValidationAppError(code="case_rejected", message=str(upstream_error))

        raise UpstreamAppError(
            code="case_submission_failed",
            message="Failed to submit case. Please try again later.",
            details={"upstream_status": upstream.status_code},
            status_code=500,
        )
