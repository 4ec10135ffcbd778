"""Company settings endpoints."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from fastapi import APIRouter, Header

from ..api_models import CompanySettingsRequest, CompanySettingsResponse
from ..capabilities import require_admin
from ..domain_models import CompanySettings
from ..workspace import COMPANY_SETTINGS_ID, EntityKind
from ._helpers import acting_user, domain_errors_as_http

if TYPE_CHECKING:
    from ..app import RuntimeState


def create_settings_routes(state: RuntimeState) -> APIRouter:
    router = APIRouter()

    def _settings_payload() -> dict:
        payload = state.workspace.company_settings.to_dict()
        status = state.workspace.sync_status(EntityKind.SETTINGS, COMPANY_SETTINGS_ID)
        payload["syncStatus"] = status.value if status else None
        return payload

    @router.get("/settings", response_model=CompanySettingsResponse)
    async def get_settings() -> CompanySettingsResponse:
        return _settings_payload()

    @router.post("/settings", response_model=CompanySettingsResponse)
    async def update_settings(
        req: CompanySettingsRequest,
        x_user_id: str | None = Header(default=None),
    ) -> CompanySettingsResponse:
        with domain_errors_as_http():
            require_admin(acting_user(state, x_user_id), "update company settings")
        settings = CompanySettings.from_dict(req.model_dump())
        await asyncio.to_thread(state.workspace.save_company_settings, settings)
        return _settings_payload()

    return router
