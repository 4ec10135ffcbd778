"""Report and order PDF entry points.

:class:`PdfLayoutEngine` turns a hydrated :class:`Report` into a
:class:`LayoutDocument` (content pass, then the footer pass), and
``build_report_pdf`` / ``build_order_pdf`` replay that page model into
PDF bytes.
"""

from __future__ import annotations

import logging
from functools import partial

from ..domain_models import Client, CompanySettings, Report
from ..report_i18n import DEFAULT_LANG, normalize_lang, tr
from ..templates import get_template
from . import RenderingUnavailableError, ReportRenderError
from .pdf_document import LayoutDocument, render_pdf_bytes, stamp_footers
from .pdf_helpers import load_image
from .pdf_sections import (
    PageCursor,
    client_fields,
    criteria_table,
    draw_header,
    draw_info_grid,
    draw_order_signature_lines,
    draw_order_totals,
    draw_signature_block,
    draw_summary_sections,
    draw_table,
    intervention_fields,
    order_table,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_BRAND = "AuditPro 360"


class PdfLayoutEngine:
    """Lay out reports on A4 pages; the inputs are never modified."""

    def __init__(self, *, lang: str = DEFAULT_LANG, brand: str = DEFAULT_BRAND) -> None:
        self.lang = normalize_lang(lang)
        self.brand = brand or DEFAULT_BRAND
        self._t = partial(tr, self.lang)

    def _start(
        self,
        report: Report,
        client: Client | None,
        company: CompanySettings,
        title_key: str,
    ) -> PageCursor:
        t = self._t
        title = t(title_key)
        document = LayoutDocument(
            title=f"{title} - {report.client_name}",
            author=company.name,
            subject=report.type_name,
        )
        cursor = PageCursor(document)
        logo = load_image(company.logo_url, label="logo")
        draw_header(cursor, company, title, logo, t)
        draw_info_grid(
            cursor,
            (t("CLIENT_DATA"), client_fields(report, client, t)),
            (t("INTERVENTION_DATA"), intervention_fields(report, t)),
        )
        return cursor

    def _finish(self, cursor: PageCursor) -> LayoutDocument:
        stamp_footers(
            cursor.document,
            lambda page, total: self._t("FOOTER", brand=self.brand, page=page, total=total),
        )
        return cursor.document

    def render_full_report(
        self,
        report: Report,
        client: Client | None,
        company: CompanySettings,
    ) -> LayoutDocument:
        t = self._t
        template = get_template(report.type_key)
        cursor = self._start(report, client, company, "REPORT_TITLE")

        if report.criteria:
            columns, rows = criteria_table(report.criteria, self.lang, t)
            draw_table(cursor, columns, rows, tag="criteria")

        if report.has_order:
            columns, rows = order_table(report.order, t)
            draw_table(cursor, columns, rows, tag="order", title=t("ORDER_SECTION_TITLE"))
            draw_order_totals(cursor, report.order, t)

        draw_summary_sections(cursor, report, t, general_title=template.is_free_text)

        if template.requires_signatures:
            draw_signature_block(
                cursor,
                report,
                t,
                auditor_image=load_image(report.auditor_signature, label="auditor signature"),
                client_image=load_image(report.client_signature, label="client signature"),
            )
        return self._finish(cursor)

    def render_order_only(
        self,
        report: Report,
        client: Client | None,
        company: CompanySettings,
    ) -> LayoutDocument:
        t = self._t
        cursor = self._start(report, client, company, "ORDER_TITLE")
        columns, rows = order_table(report.order, t)
        draw_table(
            cursor,
            columns,
            rows,
            tag="order",
            title=t("ORDER_SECTION_TITLE"),
            empty_text=t("ORDER_EMPTY"),
        )
        draw_order_totals(cursor, report.order, t)
        draw_order_signature_lines(cursor, t)
        return self._finish(cursor)


def _render(kind: str, layout: partial[LayoutDocument], report: Report) -> bytes:
    try:
        return render_pdf_bytes(layout())
    except RenderingUnavailableError:
        raise
    except Exception as exc:
        LOGGER.error("Failed to build %s PDF for report %s", kind, report.id, exc_info=True)
        raise ReportRenderError(f"{kind.capitalize()} PDF generation failed") from exc


def build_report_pdf(
    report: Report,
    client: Client | None,
    company: CompanySettings,
    *,
    lang: str = DEFAULT_LANG,
    brand: str = DEFAULT_BRAND,
) -> bytes:
    engine = PdfLayoutEngine(lang=lang, brand=brand)
    return _render("report", partial(engine.render_full_report, report, client, company), report)


def build_order_pdf(
    report: Report,
    client: Client | None,
    company: CompanySettings,
    *,
    lang: str = DEFAULT_LANG,
    brand: str = DEFAULT_BRAND,
) -> bytes:
    engine = PdfLayoutEngine(lang=lang, brand=brand)
    return _render("order", partial(engine.render_order_only, report, client, company), report)
