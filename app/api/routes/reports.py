from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from app.adapters.dashboard.base import AbstractDashboardClient
from app.adapters.dashboard.factory import create_dashboard_client

router = APIRouter(tags=["Reports"])


@router.post("/submit")
async def submit_report(
    request: Request,
    dashboard: AbstractDashboardClient = Depends(create_dashboard_client),
) -> JSONResponse:
    """Relay a report submission (JSON, or multipart when files are attached).

    The body is forwarded byte for byte; the dashboard's status and JSON are
    returned unchanged.
    """
    content_type = request.headers.get("content-type", "application/json")
    upstream = await dashboard.submit_report(await request.body(), content_type)
    return JSONResponse(content=upstream.payload, status_code=upstream.status_code)


@router.get("/track/{tracking_id}")
async def track_report(
    tracking_id: str,
    password: str | None = Query(None, description="Password for privately tracked reports"),
    dashboard: AbstractDashboardClient = Depends(create_dashboard_client),
) -> JSONResponse:
    """Look up a report's status and public comments by tracking id."""
    upstream = await dashboard.track_report(tracking_id, password or None)
    return JSONResponse(content=upstream.payload, status_code=upstream.status_code)
