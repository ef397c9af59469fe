"""httpx-based dashboard API client."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from urllib.parse import quote

import httpx

from app.adapters.dashboard.base import AbstractDashboardClient, UpstreamResponse
from app.core.errors import UpstreamAppError
from app.core.logging import get_request_id

logger = logging.getLogger(__name__)


class HttpDashboardClient(AbstractDashboardClient):
    """Client for the dashboard's public JSON API.

    If ``http_client`` is provided it is used for every request (connection
    reuse, and ``httpx.MockTransport`` in tests). Otherwise a short-lived
    client is opened per call.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 10.0,
        health_timeout_seconds: float = 5.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Dashboard base URL, e.g. "https://dashboard.example.com".
            timeout_seconds: Timeout for proxied requests in seconds.
            health_timeout_seconds: Timeout for the health probe in seconds.
            http_client: Optional shared async HTTP client.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.health_timeout_seconds = health_timeout_seconds
        self._http_client = http_client

    @asynccontextmanager
    async def _client_context(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            yield client

    def _headers(self, content_type: str | None = "application/json") -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if content_type:
            headers["Content-Type"] = content_type
        request_id = get_request_id()
        if request_id:
            headers["X-Request-ID"] = request_id
        return headers

    async def _send(self, method: str, path: str, **kwargs: Any) -> UpstreamResponse:
        """Send one request and decode the JSON body.

        Raises:
            UpstreamAppError: On transport failure or a non-JSON body.
        """
        url = f"{self.base_url}{path}"
        try:
            async with self._client_context() as client:
                response = await client.request(method, url, timeout=self.timeout_seconds, **kwargs)
        except httpx.HTTPError as exc:
            logger.error(
                "dashboard.request_failed",
                extra={
                    "method": method,
                    "upstream_path": path,
                    "error_type": type(exc).__name__,
                },
            )
            raise UpstreamAppError(
                code="upstream_unreachable",
                message="Failed to connect to dashboard API",
                details={"hint": type(exc).__name__},
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            logger.error(
                "dashboard.invalid_response",
                extra={
                    "method": method,
                    "upstream_path": path,
                    "upstream_status": response.status_code,
                },
            )
            raise UpstreamAppError(
                code="upstream_invalid_response",
                message="Dashboard API returned an invalid response",
                details={"upstream_status": response.status_code},
            ) from exc

        logger.info(
            "dashboard.response",
            extra={
                "method": method,
                "upstream_path": path,
                "upstream_status": response.status_code,
            },
        )
        return UpstreamResponse(status_code=response.status_code, payload=payload)

    async def submit_case(self, payload: dict[str, Any]) -> UpstreamResponse:
        return await self._send(
            "POST",
            "/api/public/cases/submit",
            json=payload,
            headers=self._headers(),
        )

    async def submit_report(self, body: bytes, content_type: str) -> UpstreamResponse:
        # Multipart bodies keep their boundary, so the content type is relayed verbatim.
        return await self._send(
            "POST",
            "/api/public/reports/submit",
            content=body,
            headers=self._headers(content_type or "application/json"),
        )

    async def track_report(self, tracking_id: str, password: str | None = None) -> UpstreamResponse:
        params = {"password": password} if password else None
        return await self._send(
            "GET",
            f"/api/reports/track/{quote(tracking_id, safe='')}",
            params=params,
            headers=self._headers(),
        )

    async def get_form_config(self, subdomain: str) -> UpstreamResponse:
        return await self._send(
            "GET",
            f"/api/public/forms/{quote(subdomain, safe='')}/config",
            headers=self._headers(),
        )

    async def health_check(self) -> bool:
        """Probe the dashboard's health endpoint with a short timeout.

        Returns:
            True if the dashboard answered with a 2xx status, False otherwise.
        """
        try:
            async with self._client_context() as client:
                response = await client.get(
                    f"{self.base_url}/api/health",
                    headers=self._headers(content_type=None),
                    timeout=self.health_timeout_seconds,
                )
        except httpx.HTTPError as exc:
            logger.warning(
                "dashboard.health_check_failed",
                extra={"error_type": type(exc).__name__},
            )
            return False
        return response.is_success
