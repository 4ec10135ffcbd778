"""Health check and template catalogue endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter

from ..api_models import HealthResponse, TemplatesResponse
from ..templates import REPORT_TEMPLATES

if TYPE_CHECKING:
    from ..app import RuntimeState


def create_health_routes(state: RuntimeState) -> APIRouter:
    router = APIRouter()

    @router.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return {"status": "ok", "dbPath": str(state.config.storage.db_path)}

    @router.get("/templates", response_model=TemplatesResponse)
    async def get_templates() -> TemplatesResponse:
        return {"templates": [template.to_dict() for template in REPORT_TEMPLATES.values()]}

    return router
