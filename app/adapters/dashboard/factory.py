"""Factory for the dashboard API client."""

from app.adapters.dashboard.base import AbstractDashboardClient
from app.adapters.dashboard.http_client import HttpDashboardClient
from app.core.config import settings
from app.core.errors import ConfigurationMissingError


def create_dashboard_client() -> AbstractDashboardClient:
    """Build a dashboard client from app.core.config.settings.

    Used as a FastAPI dependency so routes fail with 503 (not at import
    time) when the upstream is not configured, and so tests can swap the
    client through ``app.dependency_overrides``.

    Returns:
        AbstractDashboardClient: Configured client instance.

    Raises:
        ConfigurationMissingError: If APP_DASHBOARD_API_URL is not set.
    """
    if not settings.app.dashboard_api_url:
        raise ConfigurationMissingError(
            code="dashboard_not_configured",
            message="Dashboard API URL not configured",
            details={"hint": "Set APP_DASHBOARD_API_URL"},
        )

    return HttpDashboardClient(
        settings.app.dashboard_api_url,
        timeout_seconds=settings.app.upstream_timeout_seconds,
        health_timeout_seconds=settings.app.health_timeout_seconds,
    )
