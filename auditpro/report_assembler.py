"""Assemble report records from editor state.

``ReportAssembler.build`` combines the visit form, the checklist, the order
ledger, the two signatures and an optional GPS fix into a :class:`Report`.
Validation and GPS capture only happen on the finalize action; exporting
an unsaved preview skips both.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable
from copy import deepcopy
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum

from .checklist import CriteriaChecklist
from .domain_models import (
    AuditCriteriaItem,
    Client,
    GpsLocation,
    Order,
    Report,
    ReportStatus,
    User,
)
from .order_ledger import OrderLedger
from .report_i18n import DEFAULT_LANG, tr
from .templates import ReportTemplate

LOGGER = logging.getLogger(__name__)

GpsProvider = Callable[[], GpsLocation | None]
"""Returns the current position, ``None`` when unknown; may raise."""


class ReportAction(StrEnum):
    FINALIZE = "finalize"
    PREVIEW = "preview"


class FinalizeValidationError(ValueError):
    """Finalize was requested while a required signature field is missing."""

    def __init__(self, message: str, missing: Iterable[str]) -> None:
        super().__init__(message)
        self.message = message
        self.missing: tuple[str, ...] = tuple(missing)


def new_report_id() -> str:
    stamp = int(datetime.now().timestamp() * 1000)
    return f"r-{stamp}-{uuid.uuid4().hex[:6]}"


@dataclass(slots=True)
class Signatures:
    auditor_signer_name: str = ""
    auditor_signature: str | None = None
    client_signer_name: str = ""
    client_signature: str | None = None

    @classmethod
    def from_report(cls, report: Report) -> Signatures:
        return cls(
            auditor_signer_name=report.auditor_signer_name,
            auditor_signature=report.auditor_signature,
            client_signer_name=report.client_signer_name,
            client_signature=report.client_signature,
        )


@dataclass(slots=True)
class ReportFormState:
    """Visit header fields typed into the editor."""

    client: Client
    auditor: User
    template: ReportTemplate
    date: str
    start_time: str = ""
    end_time: str = ""
    contract_number: str | None = None
    route_number: str | None = None
    summary: str = ""
    client_observations: str | None = None
    existing: Report | None = None

    @property
    def is_new(self) -> bool:
        return self.existing is None

    @classmethod
    def new(
        cls,
        client: Client,
        auditor: User,
        template: ReportTemplate,
        *,
        now: datetime | None = None,
    ) -> ReportFormState:
        """Blank form dated today, running from now until one hour later."""
        now = now or datetime.now()
        return cls(
            client=client,
            auditor=auditor,
            template=template,
            date=now.date().isoformat(),
            start_time=now.strftime("%H:%M"),
            end_time=(now + timedelta(hours=1)).strftime("%H:%M"),
        )

    @classmethod
    def from_report(
        cls,
        report: Report,
        client: Client,
        auditor: User,
        template: ReportTemplate,
    ) -> ReportFormState:
        return cls(
            client=client,
            auditor=auditor,
            template=template,
            date=report.date,
            start_time=report.start_time,
            end_time=report.end_time,
            contract_number=report.contract_number,
            route_number=report.route_number,
            summary=report.summary,
            client_observations=report.client_observations,
            existing=report,
        )


def validate_for_finalize(
    template: ReportTemplate,
    signatures: Signatures,
    *,
    lang: str = DEFAULT_LANG,
) -> None:
    """Raise :class:`FinalizeValidationError` if the report cannot be finalized.

    Signature images are checked first (skipped for templates that do not
    require them), then the signer names.
    """
    if template.requires_signatures:
        missing = [
            name
            for name, value in (
                ("auditorSignature", signatures.auditor_signature),
                ("clientSignature", signatures.client_signature),
            )
            if not value
        ]
        if missing:
            raise FinalizeValidationError(tr(lang, "VALIDATION_SIGNATURES"), missing)
    missing = [
        name
        for name, value in (
            ("auditorSignerName", signatures.auditor_signer_name),
            ("clientSignerName", signatures.client_signer_name),
        )
        if not (value or "").strip()
    ]
    if missing:
        raise FinalizeValidationError(tr(lang, "VALIDATION_SIGNER_NAMES"), missing)


class ReportAssembler:
    def __init__(
        self,
        *,
        gps_provider: GpsProvider | None = None,
        id_factory: Callable[[], str] = new_report_id,
        lang: str = DEFAULT_LANG,
    ) -> None:
        self._gps_provider = gps_provider
        self._id_factory = id_factory
        self.lang = lang

    def capture_gps(self) -> GpsLocation | None:
        """Single best-effort position lookup; failures leave the field absent."""
        if self._gps_provider is None:
            return None
        try:
            return self._gps_provider()
        except Exception:
            LOGGER.warning("GPS position unavailable; finalizing without location", exc_info=True)
            return None

    def build(
        self,
        form: ReportFormState,
        checklist: CriteriaChecklist | Iterable[AuditCriteriaItem],
        order: OrderLedger | Order | None,
        signatures: Signatures,
        gps: GpsLocation | None = None,
        *,
        action: ReportAction = ReportAction.FINALIZE,
    ) -> Report:
        """Return a new :class:`Report`; the inputs are not modified.

        On ``FINALIZE`` the signatures are validated first and nothing is
        built when they are incomplete.
        """
        if action is ReportAction.FINALIZE:
            validate_for_finalize(form.template, signatures, lang=self.lang)

        existing = form.existing
        if existing is not None:
            # the location is fixed when a report is first saved; edits never move it
            location = existing.gps_location
        else:
            location = gps
            if location is None and action is ReportAction.FINALIZE:
                location = self.capture_gps()

        if isinstance(checklist, CriteriaChecklist):
            criteria = checklist.items
        else:
            criteria = [deepcopy(item) for item in checklist]
        if isinstance(order, OrderLedger):
            order_snapshot = order.to_order()
        elif order is not None and order.items:
            order_snapshot = deepcopy(order)
        else:
            order_snapshot = None

        # name snapshots survive later renames as long as the client is unchanged
        keep_client_snapshot = (
            existing is not None and existing.client_id == form.client.id and existing.client_name
        )
        if action is ReportAction.FINALIZE:
            status = ReportStatus.FINALIZED
        else:
            status = existing.status if existing is not None else ReportStatus.DRAFT

        report = Report(
            id=existing.id if existing is not None else self._id_factory(),
            client_id=form.client.id,
            auditor_id=form.auditor.id,
            type_key=form.template.key,
            date=form.date,
            start_time=form.start_time,
            end_time=form.end_time,
            client_name=existing.client_name if keep_client_snapshot else form.client.name,
            client_shop_name=(
                existing.client_shop_name if keep_client_snapshot else form.client.shop_name
            ),
            auditor_name=(
                existing.auditor_name
                if existing is not None
                and existing.auditor_id == form.auditor.id
                and existing.auditor_name
                else form.auditor.name
            ),
            type_name=form.template.label,
            contract_number=form.contract_number or None,
            route_number=form.route_number or None,
            criteria=criteria,
            summary=form.summary,
            client_observations=form.client_observations or None,
            order=order_snapshot,
            auditor_signer_name=signatures.auditor_signer_name.strip(),
            auditor_signature=signatures.auditor_signature or None,
            client_signer_name=signatures.client_signer_name.strip(),
            client_signature=signatures.client_signature or None,
            gps_location=location,
            status=status,
        )
        if action is ReportAction.FINALIZE:
            LOGGER.info(
                "Report %s finalized (type=%s client=%s gps=%s)",
                report.id,
                report.type_key.value,
                report.client_id,
                "yes" if report.gps_location else "no",
            )
        return report
