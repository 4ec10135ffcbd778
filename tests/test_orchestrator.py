from __future__ import annotations

from datetime import datetime
from types import SimpleNamespace

import pytest
from builders import PNG_DATA_URL, make_order, make_report, make_workspace

from auditpro.capabilities import AccessDeniedError
from auditpro.domain_models import GpsLocation, ReportStatus, ReportTypeKey
from auditpro.orchestrator import (
    EditorMode,
    EntityNotFoundError,
    ReadOnlySessionError,
    ReportOrchestrator,
)
from auditpro.report_assembler import FinalizeValidationError, ReportAssembler

_NOW = datetime(2024, 5, 10, 9, 30)


class _RecordingRenderer:
    """Stands in for the PDF builder module and records what it was asked to draw."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, object, dict]] = []

    def build_report_pdf(self, report, client, company, **kwargs) -> bytes:
        self.calls.append(("report", report, kwargs))
        return b"%PDF-report"

    def build_order_pdf(self, report, client, company, **kwargs) -> bytes:
        self.calls.append(("order", report, kwargs))
        return b"%PDF-order"


def _orchestrator(workspace=None, *, renderer=None, gps=None, **kwargs) -> ReportOrchestrator:
    renderer = renderer or _RecordingRenderer()
    return ReportOrchestrator(
        workspace or make_workspace(reports=[make_report()]),
        assembler=ReportAssembler(gps_provider=gps, id_factory=lambda: "r-new"),
        renderer_loader=lambda: renderer,
        **kwargs,
    )


def _sign(session) -> None:
    session.set_signature("auditor", PNG_DATA_URL)
    session.set_signature("client", PNG_DATA_URL)


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


def test_start_create_prefills_form_and_checklist() -> None:
    orchestrator = _orchestrator()
    user = orchestrator.workspace.get_user("u1")
    session = orchestrator.start_create(user, "c1", "audit_haccp", now=_NOW)
    assert session.mode is EditorMode.CREATE
    assert not session.read_only
    assert session.form.date == "2024-05-10"
    assert len(session.checklist) == 6
    assert session.signatures.auditor_signer_name == "Ana Silva"
    assert session.signatures.client_signer_name == "Sr. Manuel"


def test_start_create_checks_template_permission() -> None:
    orchestrator = _orchestrator()
    technician = orchestrator.workspace.get_user("u4")
    with pytest.raises(AccessDeniedError):
        orchestrator.start_create(technician, "c1", ReportTypeKey.AUDIT_HACCP)


def test_start_create_unknown_client_and_template() -> None:
    orchestrator = _orchestrator()
    user = orchestrator.workspace.get_user("u1")
    with pytest.raises(EntityNotFoundError) as excinfo:
        orchestrator.start_create(user, "nope", "audit_pool")
    assert (excinfo.value.kind, excinfo.value.entity_id) == ("client", "nope")
    with pytest.raises(ValueError):
        orchestrator.start_create(user, "c1", "bogus")


def test_save_new_report_then_session_is_read_only() -> None:
    orchestrator = _orchestrator(gps=lambda: GpsLocation(lat=38.7, lng=-9.1))
    user = orchestrator.workspace.get_user("u4")
    session = orchestrator.start_create(user, "c1", "audit_pool", now=_NOW)
    session.set_criteria_status("crit-0", "pass")
    session.set_field("summary", "Piscina limpa.")
    _sign(session)
    report = orchestrator.save(session)
    assert report.id == "r-new"
    assert report.status is ReportStatus.FINALIZED
    assert report.gps_location == GpsLocation(lat=38.7, lng=-9.1)
    assert orchestrator.workspace.get_report("r-new") is not None
    assert orchestrator.workspace.get_client("c1").last_visit_date == "2024-05-10"
    assert session.mode is EditorMode.VIEW
    assert session.set_field("summary", "again") is False
    with pytest.raises(ReadOnlySessionError):
        orchestrator.save(session)


def test_save_without_signatures_keeps_session_editable() -> None:
    orchestrator = _orchestrator()
    user = orchestrator.workspace.get_user("u1")
    session = orchestrator.start_create(user, "c1", "audit_pool", now=_NOW)
    with pytest.raises(FinalizeValidationError):
        orchestrator.save(session)
    assert session.mode is EditorMode.CREATE
    assert orchestrator.workspace.get_report("r-new") is None


def test_commercial_visit_saves_without_signature_images() -> None:
    orchestrator = _orchestrator()
    user = orchestrator.workspace.get_user("u1")
    session = orchestrator.start_create(user, "c1", "visit_comercial", now=_NOW)
    session.replace_order(make_order())
    report = orchestrator.save(session)
    assert report.order is not None
    assert report.order.total_value == pytest.approx(28.0)


def test_unknown_form_field_and_signature_role() -> None:
    orchestrator = _orchestrator()
    session = orchestrator.start_create(orchestrator.workspace.get_user("u1"), "c1", "audit_pool")
    with pytest.raises(ValueError):
        session.set_field("colour", "red")
    with pytest.raises(ValueError):
        session.set_signature("witness", PNG_DATA_URL)


# ---------------------------------------------------------------------------
# Edit and view
# ---------------------------------------------------------------------------


def test_view_mode_ignores_every_change() -> None:
    orchestrator = _orchestrator()
    session = orchestrator.open_existing("r1", orchestrator.workspace.get_user("u4"))
    assert session.read_only
    assert session.set_field("summary", "x") is False
    assert session.set_signer_name("client", "x") is False
    assert session.set_signature("client", None) is False
    assert session.set_criteria_status("crit-0", "fail") is False
    assert session.replace_criteria([]) is False
    assert session.replace_order(make_order()) is False
    assert session.ledger.add_item() is None
    with pytest.raises(ReadOnlySessionError):
        orchestrator.save(session)


def test_edit_mode_requires_admin() -> None:
    orchestrator = _orchestrator()
    with pytest.raises(AccessDeniedError):
        orchestrator.open_existing(
            "r1", orchestrator.workspace.get_user("u4"), mode=EditorMode.EDIT
        )
    with pytest.raises(AccessDeniedError):
        orchestrator.open_existing("r1", None, mode=EditorMode.EDIT)


def test_open_unknown_report() -> None:
    orchestrator = _orchestrator()
    with pytest.raises(EntityNotFoundError, match="Unknown report: missing"):
        orchestrator.open_existing("missing", None)
    with pytest.raises(ValueError):
        orchestrator.open_existing("r1", None, mode=EditorMode.CREATE)


def test_admin_edit_keeps_id_and_stays_editable() -> None:
    orchestrator = _orchestrator()
    admin = orchestrator.workspace.get_user("u1")
    session = orchestrator.open_existing("r1", admin, mode=EditorMode.EDIT)
    session.set_criteria_status("crit-0", "fail")
    session.set_field("clientObservations", "Rever na próxima visita.")
    report = orchestrator.save(session)
    assert report.id == "r1"
    assert report.criteria[0].status.value == "fail"
    assert report.client_observations == "Rever na próxima visita."
    assert session.mode is EditorMode.EDIT
    assert len(orchestrator.workspace.list_reports()) == 1


def test_admin_edit_still_validates_signatures() -> None:
    orchestrator = _orchestrator()
    session = orchestrator.open_existing(
        "r1", orchestrator.workspace.get_user("u1"), mode=EditorMode.EDIT
    )
    session.set_signature("client", None)
    with pytest.raises(FinalizeValidationError):
        orchestrator.save(session)
    assert orchestrator.workspace.get_report("r1").client_signature == PNG_DATA_URL


def test_open_report_whose_client_was_deleted() -> None:
    workspace = make_workspace(reports=[make_report(client_id="gone", client_name="Antigo Lda")])
    orchestrator = _orchestrator(workspace)
    session = orchestrator.open_existing("r1", None)
    assert session.form.client.name == "Antigo Lda"


# ---------------------------------------------------------------------------
# Exports
# ---------------------------------------------------------------------------


def test_preview_export_is_draft_and_skips_validation() -> None:
    renderer = _RecordingRenderer()
    orchestrator = _orchestrator(renderer=renderer, lang="en", brand="Marca")
    session = orchestrator.start_create(
        orchestrator.workspace.get_user("u1"), "c1", "audit_pool", now=_NOW
    )
    artifact = orchestrator.export_full_pdf(session)
    assert artifact.filename == "Relatorio_Restaurante_O_Marisco_2024-05-10.pdf"
    assert artifact.content == b"%PDF-report"
    assert artifact.media_type == "application/pdf"
    kind, report, kwargs = renderer.calls[0]
    assert kind == "report"
    assert report.status is ReportStatus.DRAFT
    assert kwargs == {"lang": "en", "brand": "Marca"}
    assert orchestrator.workspace.get_report("r-new") is None


def test_view_export_uses_stored_report() -> None:
    renderer = _RecordingRenderer()
    orchestrator = _orchestrator(renderer=renderer)
    session = orchestrator.open_existing("r1", None)
    artifact = orchestrator.export_order_pdf(session)
    assert artifact.filename == "Encomenda_Restaurante_O_Marisco_2023-10-15.pdf"
    assert renderer.calls[0][1].status is ReportStatus.FINALIZED


def test_compose_email_attaches_report_pdf() -> None:
    orchestrator = _orchestrator()
    session = orchestrator.open_existing("r1", None)
    intent = orchestrator.compose_email(session)
    assert intent.to == "manuel@marisco.pt"
    assert intent.subject == "Relatório de Intervenção - Restaurante O Marisco"
    assert intent.attachment is not None
    assert intent.attachment.filename.startswith("Relatorio_")


def test_renderer_is_only_loaded_on_export() -> None:
    loads: list[int] = []

    def loader():
        loads.append(1)
        return SimpleNamespace(build_report_pdf=lambda *a, **k: b"%PDF")

    orchestrator = ReportOrchestrator(
        make_workspace(reports=[make_report()]), renderer_loader=loader
    )
    session = orchestrator.open_existing("r1", None)
    assert loads == []
    orchestrator.export_full_pdf(session)
    assert loads == [1]
