from __future__ import annotations

import logging
from datetime import datetime

import pytest
from builders import PNG_DATA_URL, make_client, make_order, make_report, make_user

from auditpro.checklist import CriteriaChecklist
from auditpro.domain_models import GpsLocation, ReportStatus, ReportTypeKey
from auditpro.order_ledger import OrderLedger
from auditpro.report_assembler import (
    FinalizeValidationError,
    ReportAction,
    ReportAssembler,
    ReportFormState,
    Signatures,
    validate_for_finalize,
)
from auditpro.templates import get_template

_NOW = datetime(2024, 5, 10, 9, 30)


def _form(key: ReportTypeKey = ReportTypeKey.AUDIT_HACCP) -> ReportFormState:
    return ReportFormState.new(make_client(), make_user(), get_template(key), now=_NOW)


def _signed() -> Signatures:
    return Signatures(
        auditor_signer_name="Ana Silva",
        auditor_signature=PNG_DATA_URL,
        client_signer_name="Sr. Manuel",
        client_signature=PNG_DATA_URL,
    )


def _assembler(**kwargs) -> ReportAssembler:
    return ReportAssembler(id_factory=lambda: "r-new", **kwargs)


def test_new_form_runs_one_hour_from_now() -> None:
    form = _form()
    assert form.date == "2024-05-10"
    assert form.start_time == "09:30"
    assert form.end_time == "10:30"
    assert form.is_new


def test_missing_signature_images_block_finalize() -> None:
    signatures = _signed()
    signatures.client_signature = None
    with pytest.raises(FinalizeValidationError) as excinfo:
        validate_for_finalize(get_template("audit_pool"), signatures)
    assert excinfo.value.message == "Ambas as assinaturas são obrigatórias."
    assert excinfo.value.missing == ("clientSignature",)


def test_signature_images_are_checked_before_names() -> None:
    signatures = Signatures()
    with pytest.raises(FinalizeValidationError) as excinfo:
        validate_for_finalize(get_template("audit_pool"), signatures)
    assert excinfo.value.missing == ("auditorSignature", "clientSignature")


def test_blank_signer_names_block_finalize() -> None:
    signatures = _signed()
    signatures.auditor_signer_name = "   "
    with pytest.raises(FinalizeValidationError) as excinfo:
        validate_for_finalize(get_template("audit_pool"), signatures, lang="en")
    assert excinfo.value.message == "Both signer names are required."
    assert excinfo.value.missing == ("auditorSignerName",)


def test_commercial_visit_needs_names_but_not_images() -> None:
    template = get_template(ReportTypeKey.VISIT_COMMERCIAL)
    validate_for_finalize(
        template, Signatures(auditor_signer_name="Bruno", client_signer_name="Manuel")
    )
    with pytest.raises(FinalizeValidationError) as excinfo:
        validate_for_finalize(template, Signatures(auditor_signer_name="Bruno"))
    assert excinfo.value.missing == ("clientSignerName",)


def test_finalize_builds_report_from_all_parts() -> None:
    form = _form()
    checklist = CriteriaChecklist.from_template(form.template)
    checklist.set_status("crit-0", "pass")
    report = _assembler().build(form, checklist, OrderLedger(), _signed())
    assert report.id == "r-new"
    assert report.status is ReportStatus.FINALIZED
    assert report.client_name == "Restaurante O Marisco"
    assert report.client_shop_name == "Marisco Chiado"
    assert report.auditor_name == "Ana Silva"
    assert report.type_name == form.template.label
    assert len(report.criteria) == 6
    assert report.order is None
    assert report.gps_location is None


def test_failed_validation_builds_nothing() -> None:
    with pytest.raises(FinalizeValidationError):
        _assembler().build(_form(), [], None, Signatures())


def test_preview_skips_validation_and_is_a_draft() -> None:
    report = _assembler().build(
        _form(), [], None, Signatures(), action=ReportAction.PREVIEW
    )
    assert report.status is ReportStatus.DRAFT
    assert report.auditor_signature is None


def test_order_snapshot_comes_from_ledger() -> None:
    report = _assembler().build(
        _form(ReportTypeKey.VISIT_COMMERCIAL),
        [],
        OrderLedger.from_order(make_order()),
        _signed(),
    )
    assert report.order is not None
    assert report.order.total_value == pytest.approx(28.0)


def test_gps_is_captured_once_for_new_reports() -> None:
    calls: list[int] = []

    def provider() -> GpsLocation:
        calls.append(1)
        return GpsLocation(lat=38.7, lng=-9.1)

    report = _assembler(gps_provider=provider).build(_form(), [], None, _signed())
    assert report.gps_location == GpsLocation(lat=38.7, lng=-9.1)
    assert calls == [1]


def test_gps_failure_only_warns(caplog: pytest.LogCaptureFixture) -> None:
    def provider() -> GpsLocation:
        raise TimeoutError("no fix")

    with caplog.at_level(logging.WARNING, logger="auditpro.report_assembler"):
        report = _assembler(gps_provider=provider).build(_form(), [], None, _signed())
    assert report.gps_location is None
    assert report.status is ReportStatus.FINALIZED
    assert "GPS position unavailable" in caplog.text


def test_explicit_gps_wins_over_provider() -> None:
    def provider() -> GpsLocation:
        raise AssertionError("provider must not be called")

    location = GpsLocation(lat=41.1, lng=-8.6)
    report = _assembler(gps_provider=provider).build(_form(), [], None, _signed(), location)
    assert report.gps_location == location


def test_editing_keeps_id_names_and_location() -> None:
    stored = make_report(
        client_name="Marisco (antigo)",
        gps_location=GpsLocation(lat=38.7, lng=-9.1),
    )
    renamed = make_client(name="Marisco Novo")
    form = ReportFormState.from_report(
        stored, renamed, make_user(), get_template(stored.type_key)
    )
    form.summary = "Atualizado"

    def provider() -> GpsLocation:
        raise AssertionError("existing reports keep their location")

    report = _assembler(gps_provider=provider).build(
        form, stored.criteria, stored.order, Signatures.from_report(stored)
    )
    assert report.id == "r1"
    assert report.client_name == "Marisco (antigo)"
    assert report.gps_location == stored.gps_location
    assert report.summary == "Atualizado"


def test_editing_ignores_a_newly_supplied_location() -> None:
    stored = make_report(gps_location=GpsLocation(lat=38.7, lng=-9.1))
    form = ReportFormState.from_report(
        stored, make_client(), make_user(), get_template(stored.type_key)
    )
    report = _assembler().build(
        form,
        stored.criteria,
        stored.order,
        Signatures.from_report(stored),
        GpsLocation(lat=41.1, lng=-8.6),
    )
    assert report.gps_location == GpsLocation(lat=38.7, lng=-9.1)


def test_editing_an_unlocated_report_stays_unlocated() -> None:
    stored = make_report(gps_location=None)
    form = ReportFormState.from_report(
        stored, make_client(), make_user(), get_template(stored.type_key)
    )

    def provider() -> GpsLocation:
        raise AssertionError("edits never capture a position")

    report = _assembler(gps_provider=provider).build(
        form,
        stored.criteria,
        stored.order,
        Signatures.from_report(stored),
        GpsLocation(lat=41.1, lng=-8.6),
    )
    assert report.gps_location is None


def test_changing_client_refreshes_name_snapshot() -> None:
    stored = make_report()
    other = make_client("c2", name="Hotel Central", shop_name=None)
    form = ReportFormState.from_report(stored, other, make_user(), get_template(stored.type_key))
    report = _assembler().build(form, [], None, Signatures.from_report(stored))
    assert report.client_name == "Hotel Central"
    assert report.client_shop_name is None


def test_build_does_not_modify_inputs() -> None:
    criteria = make_report().criteria
    report = _assembler().build(_form(), criteria, None, _signed())
    report.criteria[0].notes = "changed"
    assert criteria[0].notes == ""
