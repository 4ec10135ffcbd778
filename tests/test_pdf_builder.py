from __future__ import annotations

import logging
import sys

import pytest
from builders import (
    BROKEN_DATA_URL,
    make_client,
    make_company,
    make_criteria,
    make_order,
    make_report,
)
from conftest import extract_pdf_text, pdf_page_count

from auditpro.domain_models import ReportTypeKey
from auditpro.report import (
    RenderingUnavailableError,
    ReportRenderError,
    export_filename,
    load_renderer,
    order_filename,
    report_filename,
)
from auditpro.report import pdf_builder
from auditpro.report.pdf_builder import PdfLayoutEngine, build_order_pdf, build_report_pdf


def test_report_pdf_is_a_pdf_with_matching_page_count() -> None:
    report = make_report(criteria=make_criteria(60))
    pdf = build_report_pdf(report, make_client(), make_company())
    assert pdf.startswith(b"%PDF")
    expected = PdfLayoutEngine().render_full_report(report, make_client(), make_company())
    assert pdf_page_count(pdf) == expected.page_count


def test_report_pdf_text_contains_key_fields() -> None:
    pdf = build_report_pdf(make_report(), make_client(), make_company(), lang="en")
    text = extract_pdf_text(pdf)
    assert "INTERVENTION REPORT" in text
    assert "Restaurante O Marisco" in text
    assert "Page 1/1" in text


def test_order_pdf_contains_total() -> None:
    report = make_report(type_key=ReportTypeKey.VISIT_COMMERCIAL, order=make_order())
    pdf = build_order_pdf(report, make_client(), make_company(), lang="en")
    text = extract_pdf_text(pdf)
    assert "SALES ORDER" in text
    assert "TOTAL: 28.00" in text
    assert "Cloro 5kg" in text


def test_broken_signature_still_renders(caplog: pytest.LogCaptureFixture) -> None:
    report = make_report(auditor_signature=BROKEN_DATA_URL, client_signature=BROKEN_DATA_URL)
    with caplog.at_level(logging.WARNING):
        pdf = build_report_pdf(report, make_client(), make_company())
    assert pdf.startswith(b"%PDF")
    assert "failed to decode" in caplog.text


def test_missing_client_record_still_renders() -> None:
    pdf = build_report_pdf(make_report(), None, make_company())
    assert pdf.startswith(b"%PDF")


def test_backend_failure_raises_report_render_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def _boom(document):
        raise RuntimeError("canvas exploded")

    monkeypatch.setattr(pdf_builder, "render_pdf_bytes", _boom)
    with pytest.raises(ReportRenderError, match="Report PDF generation failed"):
        build_report_pdf(make_report(), make_client(), make_company())
    with pytest.raises(ReportRenderError, match="Order PDF generation failed"):
        build_order_pdf(make_report(), make_client(), make_company())


def test_load_renderer_returns_builder_module() -> None:
    assert load_renderer() is pdf_builder


def test_missing_drawing_library_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "auditpro.report.pdf_builder", None)
    with pytest.raises(RenderingUnavailableError, match="PDF rendering is unavailable"):
        load_renderer()


def test_export_filenames_replace_whitespace() -> None:
    report = make_report(client_name="Restaurante  O Marisco", date="2023-10-15")
    assert report_filename(report) == "Relatorio_Restaurante_O_Marisco_2023-10-15.pdf"
    assert order_filename(report) == "Encomenda_Restaurante_O_Marisco_2023-10-15.pdf"
    name = export_filename("X", " Hotel\tCentral ", "2024-01-02")
    assert name == "X_Hotel_Central_2024-01-02.pdf"
