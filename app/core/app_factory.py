from __future__ import annotations

"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build isolated instances.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import cases_router, forms_router, health_router, reports_router
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations
from app.version import __version__


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Whistleblower Portal Gateway",
        description=(
            "Public gateway in front of the whistleblowing dashboard API. "
            "Accepts case and report submissions from company-branded forms, "
            "relays report tracking and form configuration lookups, and "
            "rate-limits anonymous case submission per client IP."
        ),
        version=__version__,
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )

    # Middleware (last added = outermost)
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.app.forms_domain],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", settings.log.request_id_header],
        expose_headers=[
            settings.log.request_id_header,
            "Retry-After",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
        ],
        max_age=86400,
    )

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(cases_router, prefix="/api")
    app.include_router(reports_router, prefix="/api")
    app.include_router(forms_router, prefix="/api")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
