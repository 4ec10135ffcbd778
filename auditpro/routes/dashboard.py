"""Dashboard aggregates for the acting user."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Header

from ..api_models import DashboardResponse
from ..dashboard import dashboard_summary
from ._helpers import require_acting_user

if TYPE_CHECKING:
    from ..app import RuntimeState


def create_dashboard_routes(state: RuntimeState) -> APIRouter:
    router = APIRouter()

    @router.get("/dashboard", response_model=DashboardResponse)
    async def get_dashboard(x_user_id: str | None = Header(default=None)) -> DashboardResponse:
        user = require_acting_user(state, x_user_id)
        reports = state.workspace.list_reports()
        if not user.is_admin:
            # non-admins see their own visits only
            reports = [report for report in reports if report.auditor_id == user.id]
        return dashboard_summary(reports, state.workspace.list_clients(), state.today())

    return router
