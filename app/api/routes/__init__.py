from __future__ import annotations

from app.api.routes.cases import router as cases_router
from app.api.routes.forms import router as forms_router
from app.api.routes.health import router as health_router
from app.api.routes.reports import router as reports_router

__all__ = ["cases_router", "forms_router", "health_router", "reports_router"]
