"""Route package – assembles resource-specific sub-routers into one APIRouter.

Each sub-module defines a ``create_*_routes(state)`` function that returns
an ``APIRouter`` with endpoints scoped to a single resource.  All of them
are mounted under the configured API base path, so ``app.py`` only needs::

    from .routes import create_router
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter

from .clients import create_client_routes
from .dashboard import create_dashboard_routes
from .health import create_health_routes
from .reports import create_report_routes
from .settings import create_settings_routes
from .users import create_user_routes

if TYPE_CHECKING:
    from ..app import RuntimeState


def create_router(state: RuntimeState) -> APIRouter:
    """Assemble all route groups under ``state.config.api.base_path``."""
    prefix = state.config.api.base_path
    router = APIRouter()
    router.include_router(create_health_routes(state), prefix=prefix)
    router.include_router(create_user_routes(state), prefix=prefix)
    router.include_router(create_client_routes(state), prefix=prefix)
    router.include_router(create_report_routes(state), prefix=prefix)
    router.include_router(create_settings_routes(state), prefix=prefix)
    router.include_router(create_dashboard_routes(state), prefix=prefix)
    return router
