"""Report listing, finalize workflow, PDF exports and email intent endpoints."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Header, HTTPException, Query
from fastapi.responses import Response

from ..api_models import (
    DeleteResponse,
    EmailIntentResponse,
    EntityResponse,
    FinalizeResponse,
    ReportDraftRequest,
    ReportRecordRequest,
    ReportsResponse,
)
from ..capabilities import require_admin
from ..domain_models import AuditCriteriaItem, GpsLocation, Order, Report, User
from ..orchestrator import EditorMode, ReportSession
from ..workspace import EntityKind
from ._helpers import (
    acting_user,
    domain_errors_as_http,
    pdf_response,
    require_acting_user,
)

if TYPE_CHECKING:
    from ..app import RuntimeState

LOGGER = logging.getLogger(__name__)

_DRAFT_FIELDS: tuple[str, ...] = (
    "date",
    "startTime",
    "endTime",
    "contractNumber",
    "routeNumber",
    "summary",
    "clientObservations",
)


def apply_draft(session: ReportSession, req: ReportDraftRequest) -> None:
    """Copy the fields present in *req* into *session*; absent fields are kept."""
    for name in _DRAFT_FIELDS:
        value = getattr(req, name)
        if value is not None:
            session.set_field(name, value)
    for role in ("auditor", "client"):
        signer = getattr(req, f"{role}SignerName")
        if signer is not None:
            session.set_signer_name(role, signer)
        image = getattr(req, f"{role}Signature")
        if image is not None:
            session.set_signature(role, image)
    if req.criteria is not None:
        session.replace_criteria(
            AuditCriteriaItem.from_dict(item.model_dump()) for item in req.criteria
        )
    if req.order is not None:
        session.replace_order(Order.from_dict(req.order.model_dump()))


def create_report_routes(state: RuntimeState) -> APIRouter:
    router = APIRouter()

    def _report_payload(report: Report) -> dict:
        payload = report.to_dict()
        status = state.workspace.sync_status(EntityKind.REPORT, report.id)
        payload["syncStatus"] = status.value if status else None
        return payload

    def _draft_session(user: User, req: ReportDraftRequest, *, mode: EditorMode) -> ReportSession:
        if req.reportId:
            return state.orchestrator.open_existing(req.reportId, user, mode=mode)
        if not req.clientId or not req.typeKey:
            raise HTTPException(
                status_code=400,
                detail="clientId and typeKey are required for a new report",
            )
        try:
            return state.orchestrator.start_create(user, req.clientId, req.typeKey)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    def _stored_session(report_id: str, user_id: str | None) -> ReportSession:
        return state.orchestrator.open_existing(report_id, acting_user(state, user_id))

    # -- records ---------------------------------------------------------------

    @router.get("/reports", response_model=ReportsResponse)
    async def get_reports() -> ReportsResponse:
        return {"reports": [_report_payload(report) for report in state.workspace.list_reports()]}

    @router.post("/reports", response_model=EntityResponse)
    async def save_report_record(
        req: ReportRecordRequest,
        x_user_id: str | None = Header(default=None),
    ) -> EntityResponse:
        try:
            report = Report.from_dict(req.model_dump())
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        if state.workspace.get_report(report.id) is not None:
            with domain_errors_as_http():
                require_admin(acting_user(state, x_user_id), "edit finalized reports")
        status = await asyncio.to_thread(state.workspace.save_report, report)
        return {"id": report.id, "syncStatus": status.value}

    @router.get("/reports/{report_id}")
    async def get_report(report_id: str) -> dict:
        report = state.workspace.get_report(report_id)
        if report is None:
            raise HTTPException(status_code=404, detail="Unknown report")
        return _report_payload(report)

    @router.delete("/reports/{report_id}", response_model=DeleteResponse)
    async def delete_report(
        report_id: str,
        x_user_id: str | None = Header(default=None),
    ) -> DeleteResponse:
        with domain_errors_as_http():
            require_admin(acting_user(state, x_user_id), "delete reports")
        removed = await asyncio.to_thread(state.workspace.delete_report, report_id)
        if not removed:
            raise HTTPException(status_code=404, detail="Unknown report")
        return {"id": report_id, "status": "deleted"}

    # -- workflow --------------------------------------------------------------

    @router.post("/reports/finalize", response_model=FinalizeResponse)
    async def finalize_report(
        req: ReportDraftRequest,
        x_user_id: str | None = Header(default=None),
    ) -> FinalizeResponse:
        user = require_acting_user(state, x_user_id)
        gps = GpsLocation.from_dict(req.gpsLocation.model_dump()) if req.gpsLocation else None
        with domain_errors_as_http():
            session = _draft_session(user, req, mode=EditorMode.EDIT)
            apply_draft(session, req)
            report = await asyncio.to_thread(state.orchestrator.save, session, gps=gps)
        status = state.workspace.sync_status(EntityKind.REPORT, report.id)
        return {"report": report.to_dict(), "syncStatus": status.value if status else None}

    @router.post("/reports/preview.pdf")
    async def preview_pdf(
        req: ReportDraftRequest,
        kind: str = Query(default="report", pattern="^(report|order)$"),
        x_user_id: str | None = Header(default=None),
    ) -> Response:
        user = require_acting_user(state, x_user_id)
        mode = EditorMode.EDIT if user.is_admin else EditorMode.VIEW
        with domain_errors_as_http():
            session = _draft_session(user, req, mode=mode)
            apply_draft(session, req)
            export = (
                state.orchestrator.export_order_pdf
                if kind == "order"
                else state.orchestrator.export_full_pdf
            )
            artifact = await asyncio.to_thread(export, session)
        return pdf_response(artifact)

    # -- exports of stored reports ---------------------------------------------

    @router.get("/reports/{report_id}/report.pdf")
    async def report_pdf(
        report_id: str,
        x_user_id: str | None = Header(default=None),
    ) -> Response:
        with domain_errors_as_http():
            session = _stored_session(report_id, x_user_id)
            artifact = await asyncio.to_thread(state.orchestrator.export_full_pdf, session)
        return pdf_response(artifact)

    @router.get("/reports/{report_id}/order.pdf")
    async def order_pdf(
        report_id: str,
        x_user_id: str | None = Header(default=None),
    ) -> Response:
        with domain_errors_as_http():
            session = _stored_session(report_id, x_user_id)
            artifact = await asyncio.to_thread(state.orchestrator.export_order_pdf, session)
        return pdf_response(artifact)

    @router.get("/reports/{report_id}/email", response_model=EmailIntentResponse)
    async def email_intent(
        report_id: str,
        x_user_id: str | None = Header(default=None),
    ) -> EmailIntentResponse:
        with domain_errors_as_http():
            session = _stored_session(report_id, x_user_id)
            intent = await asyncio.to_thread(state.orchestrator.compose_email, session)
        return intent.to_dict()

    return router
