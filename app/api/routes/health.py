from __future__ import annotations

import time
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.adapters.dashboard.factory import create_dashboard_client
from app.core.config import settings
from app.core.errors import ConfigurationMissingError
from app.version import __version__

router = APIRouter(tags=["Health"])

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

_started_at = time.monotonic()


@router.get("/health")
def health_check() -> dict:
    """Liveness probe.

    Returns a simple status response to verify the process is serving.
    Does not contact the dashboard.

    Returns:
        dict: A dictionary with a single "status" key set to "ok".
    """

    return {"status": "ok"}


@router.get("/api/health")
async def readiness_check() -> JSONResponse:
    """Readiness probe including dashboard reachability.

    Returns:
        JSONResponse: 200 with status "healthy" when the dashboard answers,
            503 with status "degraded" otherwise.
    """

    try:
        dashboard_healthy = await create_dashboard_client().health_check()
    except ConfigurationMissingError:
        dashboard_healthy = False

    status = "healthy" if dashboard_healthy else "degraded"
    body = {
        "status": status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
        "services": {
            "dashboard_api": dashboard_healthy,
            "self": True,
        },
        "environment": {
            "app_env": settings.app_env,
            "dashboard_url": settings.app.dashboard_api_url or "not-configured",
        },
        "uptime": round(time.monotonic() - _started_at, 3),
    }

    return JSONResponse(
        content=body,
        status_code=200 if dashboard_healthy else 503,
        headers=NO_CACHE_HEADERS,
    )
