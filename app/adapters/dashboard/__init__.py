"""Dashboard adapter layer - the upstream API that owns reports and forms."""

from app.adapters.dashboard.base import AbstractDashboardClient, UpstreamResponse
from app.adapters.dashboard.factory import create_dashboard_client
from app.adapters.dashboard.http_client import HttpDashboardClient

__all__ = [
    "AbstractDashboardClient",
    "HttpDashboardClient",
    "UpstreamResponse",
    "create_dashboard_client",
]
