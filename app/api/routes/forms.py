from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.adapters.dashboard.base import AbstractDashboardClient
from app.adapters.dashboard.factory import create_dashboard_client
from app.core.config import settings
from app.utils.simple_cache import SimpleTTLCache

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Forms"])

CONFIG_CACHE_CONTROL = "public, max-age=300, s-maxage=300"

_config_cache = SimpleTTLCache(ttl_seconds=settings.app.config_cache_ttl_seconds)


def get_config_cache() -> SimpleTTLCache:
    return _config_cache


@router.get("/config/{subdomain}")
async def get_form_config(
    subdomain: str,
    dashboard: AbstractDashboardClient = Depends(create_dashboard_client),
    cache: SimpleTTLCache = Depends(get_config_cache),
) -> JSONResponse:
    """Return the branded form configuration for a company subdomain.

    Successful configs are cached in-process; upstream errors are relayed
    with their status and never cached.
    """
    headers = {"Cache-Control": CONFIG_CACHE_CONTROL}

    cached = cache.get(subdomain)
    if cached is not None:
        return JSONResponse(content=cached, headers=headers)

    upstream = await dashboard.get_form_config(subdomain)
    if upstream.ok:
        cache.set(subdomain, upstream.payload)
    else:
        logger.info(
            "form_config.upstream_error",
            extra={"subdomain": subdomain, "upstream_status": upstream.status_code},
        )

    return JSONResponse(content=upstream.payload, status_code=upstream.status_code, headers=headers)
