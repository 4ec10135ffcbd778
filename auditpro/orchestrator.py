"""Report editor sessions: create, edit and view modes over one report.

A :class:`ReportSession` holds the editable state (form fields, checklist,
order ledger and signatures).  :class:`ReportOrchestrator` opens sessions,
saves them through the workspace and produces the export artifacts.
Exports work in every mode and never require signatures; only ``save``
validates them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from types import ModuleType

from .capabilities import require_admin, require_template
from .checklist import CriteriaChecklist
from .domain_models import (
    AuditCriteriaItem,
    Client,
    CriteriaStatus,
    GpsLocation,
    Order,
    Report,
    ReportTypeKey,
    User,
    UserRole,
)
from .email_intent import EmailIntent, compose_email
from .order_ledger import OrderLedger
from .report import load_renderer, order_filename, report_filename
from .report_assembler import (
    ReportAction,
    ReportAssembler,
    ReportFormState,
    Signatures,
)
from .report_i18n import DEFAULT_LANG
from .templates import ReportTemplate, get_template
from .workspace import Workspace

LOGGER = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"
DEFAULT_BRAND = "AuditPro 360"


class EditorMode(StrEnum):
    CREATE = "create"
    EDIT = "edit"
    VIEW = "view"


class ReadOnlySessionError(RuntimeError):
    """A write was attempted on a session opened in view mode."""


class EntityNotFoundError(LookupError):
    """A report or client id does not exist in the workspace."""

    def __init__(self, kind: str, entity_id: str) -> None:
        super().__init__(f"Unknown {kind}: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


@dataclass(slots=True, frozen=True)
class ExportArtifact:
    filename: str
    content: bytes = field(repr=False)
    media_type: str = PDF_MEDIA_TYPE


_FORM_FIELDS: dict[str, str] = {
    "date": "date",
    "startTime": "start_time",
    "start_time": "start_time",
    "endTime": "end_time",
    "end_time": "end_time",
    "contractNumber": "contract_number",
    "contract_number": "contract_number",
    "routeNumber": "route_number",
    "route_number": "route_number",
    "summary": "summary",
    "clientObservations": "client_observations",
    "client_observations": "client_observations",
}

_SIGNATURE_ROLES = ("auditor", "client")


class ReportSession:
    """Editable state of one report editor.

    In view mode every setter is a no-op returning ``False``; the
    checklist and the order ledger are opened read-only as well.
    """

    def __init__(
        self,
        mode: EditorMode,
        form: ReportFormState,
        checklist: CriteriaChecklist,
        ledger: OrderLedger,
        signatures: Signatures,
    ) -> None:
        self.form = form
        self.checklist = checklist
        self.ledger = ledger
        self.signatures = signatures
        self.mode = mode
        self._apply_mode()

    def _apply_mode(self) -> None:
        self.checklist.read_only = self.read_only
        self.ledger.read_only = self.read_only

    @property
    def read_only(self) -> bool:
        return self.mode is EditorMode.VIEW

    @property
    def template(self) -> ReportTemplate:
        return self.form.template

    def switch_mode(self, mode: EditorMode) -> None:
        self.mode = mode
        self._apply_mode()

    # -- form fields ----------------------------------------------------------

    def set_field(self, name: str, value: str | None) -> bool:
        attr = _FORM_FIELDS.get(name)
        if attr is None:
            raise ValueError(f"Unknown report field: {name!r}")
        if self.read_only:
            return False
        text = "" if value is None else str(value)
        if attr in ("contract_number", "route_number", "client_observations"):
            setattr(self.form, attr, text or None)
        else:
            setattr(self.form, attr, text)
        return True

    def set_signer_name(self, role: str, name: str | None) -> bool:
        if role not in _SIGNATURE_ROLES:
            raise ValueError(f"Unknown signature role: {role!r}")
        if self.read_only:
            return False
        setattr(self.signatures, f"{role}_signer_name", str(name or ""))
        return True

    def set_signature(self, role: str, image: str | None) -> bool:
        """Store a signature image (a data URL); ``None`` clears it."""
        if role not in _SIGNATURE_ROLES:
            raise ValueError(f"Unknown signature role: {role!r}")
        if self.read_only:
            return False
        setattr(self.signatures, f"{role}_signature", image or None)
        return True

    # -- checklist and order --------------------------------------------------

    def set_criteria_status(self, item_id: str, status: CriteriaStatus | str | None) -> bool:
        return self.checklist.set_status(item_id, status)

    def set_criteria_notes(self, item_id: str, text: str | None) -> bool:
        return self.checklist.set_notes(item_id, text)

    def replace_criteria(self, items: Iterable[AuditCriteriaItem]) -> bool:
        if self.read_only:
            return False
        self.checklist = CriteriaChecklist(items)
        return True

    def replace_order(self, order: Order | None) -> bool:
        if self.read_only:
            return False
        self.ledger = OrderLedger.from_order(order)
        return True


class ReportOrchestrator:
    def __init__(
        self,
        workspace: Workspace,
        *,
        assembler: ReportAssembler | None = None,
        renderer_loader: Callable[[], ModuleType] = load_renderer,
        lang: str = DEFAULT_LANG,
        brand: str = DEFAULT_BRAND,
    ) -> None:
        self.workspace = workspace
        self.assembler = assembler or ReportAssembler(lang=lang)
        self._renderer_loader = renderer_loader
        self.lang = lang
        self.brand = brand

    # -- sessions -------------------------------------------------------------

    def _require_client(self, client_id: str) -> Client:
        client = self.workspace.get_client(client_id)
        if client is None:
            raise EntityNotFoundError("client", client_id)
        return client

    def start_create(
        self,
        user: User,
        client_id: str,
        template_key: ReportTypeKey | str,
        *,
        now: datetime | None = None,
    ) -> ReportSession:
        """New report for *client_id*; the template must be allowed for *user*."""
        template = get_template(template_key)
        require_template(user, template.key)
        client = self._require_client(client_id)
        form = ReportFormState.new(client, user, template, now=now)
        signatures = Signatures(
            auditor_signer_name=user.name,
            client_signer_name=client.contact_person,
        )
        return ReportSession(
            EditorMode.CREATE,
            form,
            CriteriaChecklist.from_template(template),
            OrderLedger(),
            signatures,
        )

    def open_existing(
        self,
        report_id: str,
        user: User | None,
        *,
        mode: EditorMode = EditorMode.VIEW,
    ) -> ReportSession:
        """Open a stored report; edit mode is restricted to administrators."""
        if mode is EditorMode.CREATE:
            raise ValueError("Use start_create() for new reports")
        if mode is EditorMode.EDIT:
            require_admin(user, "edit finalized reports")
        report = self.workspace.get_report(report_id)
        if report is None:
            raise EntityNotFoundError("report", report_id)
        client = self.workspace.get_client(report.client_id) or Client(
            id=report.client_id,
            name=report.client_name,
            shop_name=report.client_shop_name,
        )
        auditor = self.workspace.get_user(report.auditor_id) or User(
            id=report.auditor_id,
            name=report.auditor_name,
            role=UserRole.TECHNICIAN,
            pin="",
        )
        template = get_template(report.type_key)
        form = ReportFormState.from_report(report, client, auditor, template)
        return ReportSession(
            mode,
            form,
            CriteriaChecklist(report.criteria),
            OrderLedger.from_order(report.order),
            Signatures.from_report(report),
        )

    # -- save -----------------------------------------------------------------

    def _build(
        self,
        session: ReportSession,
        action: ReportAction,
        gps: GpsLocation | None = None,
    ) -> Report:
        return self.assembler.build(
            session.form,
            session.checklist,
            session.ledger,
            session.signatures,
            gps,
            action=action,
        )

    def save(self, session: ReportSession, *, gps: GpsLocation | None = None) -> Report:
        """Finalize and persist the session's report.

        Raises :class:`ReadOnlySessionError` in view mode and
        ``FinalizeValidationError`` when signatures are incomplete; the
        session is left unchanged in both cases.
        """
        if session.read_only:
            raise ReadOnlySessionError("Report is open read-only; it cannot be saved.")
        report = self._build(session, ReportAction.FINALIZE, gps)
        self.workspace.save_report(report)
        session.form.existing = report
        if session.mode is EditorMode.CREATE:
            # a finalized report is only editable again by an administrator
            session.switch_mode(EditorMode.VIEW)
        return report

    def preview(self, session: ReportSession) -> Report:
        """The report as it would be exported now, without validation."""
        if session.read_only and session.form.existing is not None:
            return session.form.existing
        return self._build(session, ReportAction.PREVIEW)

    # -- exports --------------------------------------------------------------

    def export_full_pdf(self, session: ReportSession) -> ExportArtifact:
        report = self.preview(session)
        renderer = self._renderer_loader()
        content = renderer.build_report_pdf(
            report,
            session.form.client,
            self.workspace.company_settings,
            lang=self.lang,
            brand=self.brand,
        )
        return ExportArtifact(filename=report_filename(report), content=content)

    def export_order_pdf(self, session: ReportSession) -> ExportArtifact:
        report = self.preview(session)
        renderer = self._renderer_loader()
        content = renderer.build_order_pdf(
            report,
            session.form.client,
            self.workspace.company_settings,
            lang=self.lang,
            brand=self.brand,
        )
        return ExportArtifact(filename=order_filename(report), content=content)

    def compose_email(self, session: ReportSession) -> EmailIntent:
        """Email intent with the full report PDF attached."""
        artifact = self.export_full_pdf(session)
        return compose_email(
            self.preview(session),
            session.form.client,
            self.workspace.company_settings,
            artifact,
            lang=self.lang,
        )
