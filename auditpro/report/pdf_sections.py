"""Section drawers for the report layout engine.

Every drawer appends instructions through a :class:`PageCursor`, which owns
the vertical position and opens continuation pages.  Continuation pages get
no header; their content starts at ``CONTINUATION_TOP_MM``.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from ..domain_models import AuditCriteriaItem, Client, CompanySettings, Order, Report
from ..report_theme import REPORT_COLORS
from .pdf_document import ImageOp, LayoutDocument, LineOp, RectOp, TextOp
from .pdf_helpers import format_money, format_number, status_color, status_label
from .pdf_layout import (
    COMPANY_LINE_STEP_MM,
    COMPANY_TEXT_TOP_MM,
    CONTENT_W_MM,
    CONTINUATION_TOP_MM,
    CRITERIA_LABEL_W_MM,
    CRITERIA_NOTES_W_MM,
    CRITERIA_STATUS_W_MM,
    FONT,
    FONT_B,
    FS_BODY,
    FS_COMPANY,
    FS_INFO,
    FS_SECTION,
    FS_SMALL,
    FS_TABLE,
    FS_TITLE,
    INFO_BOX_GAP_MM,
    INFO_BOX_H_MM,
    INFO_BOX_PAD_MM,
    INFO_BOX_TITLE_H_MM,
    INFO_BOX_W_MM,
    INFO_GRID_Y_MM,
    LOGO_BOX_MM,
    MARGIN_MM,
    ORDER_DISCOUNT_W_MM,
    ORDER_LABEL_W_MM,
    ORDER_PRICE_W_MM,
    ORDER_PRODUCT_W_MM,
    ORDER_QTY_W_MM,
    ORDER_SIGNATURE_H_MM,
    ORDER_SIGNATURE_LINE_W_MM,
    ORDER_SIGNATURE_TOP_MM,
    ORDER_TOTAL_LINE_H_MM,
    ORDER_TOTAL_W_MM,
    PAGE_W_MM,
    PT_TO_MM,
    SECTION_GAP_MM,
    SIGNATURE_BLOCK_TOP_MM,
    SIGNATURE_BOX_H_MM,
    SIGNATURE_IMAGE_H_MM,
    SIGNATURE_IMAGE_W_MM,
    STATUS_BADGE_H_MM,
    STATUS_BADGE_W_MM,
    TABLE_CELL_PAD_X_MM,
    TABLE_CELL_PAD_Y_MM,
    TABLE_HEADER_H_MM,
    TABLE_MIN_ROW_H_MM,
    TITLE_BAR_H_MM,
    TITLE_BAR_Y_MM,
    line_height_mm,
    max_table_row_height_mm,
    measure_text_block,
    order_signatures_need_new_page,
    overflows,
    signatures_need_new_page,
    summary_needs_new_page,
    wrap_text,
)

Translate = Callable[..., str]

SUB_CLR = REPORT_COLORS["text_secondary"]
MUTED_CLR = REPORT_COLORS["text_muted"]
LINE_CLR = REPORT_COLORS["border"]
PRIMARY_CLR = REPORT_COLORS["primary"]
ON_PRIMARY_CLR = REPORT_COLORS["on_primary"]

SECTION_TITLE_H_MM = 7.0


class PageCursor:
    """Vertical write position over a :class:`LayoutDocument`."""

    def __init__(self, document: LayoutDocument, y: float = 0.0) -> None:
        self.document = document
        self.y = y

    def add(self, op: TextOp | RectOp | LineOp | ImageOp) -> None:
        self.document.add(op)

    def new_page(self) -> None:
        self.document.new_page()
        self.y = CONTINUATION_TOP_MM

    def ensure(self, block_h: float) -> bool:
        """Open a new page when *block_h* no longer fits; returns whether it did."""
        if overflows(self.y, block_h):
            self.new_page()
            return True
        return False


def _baseline(top: float, font_size: float) -> float:
    return top + font_size * PT_TO_MM * 0.85


# ---------------------------------------------------------------------------
# Header and info grid (first page only)
# ---------------------------------------------------------------------------


def draw_header(
    cursor: PageCursor,
    company: CompanySettings,
    title: str,
    logo: bytes | None,
    t: Translate,
) -> None:
    if logo is not None:
        x, y, w, h = LOGO_BOX_MM
        cursor.add(ImageOp(x=x, y=y, w=w, h=h, data=logo, tag="logo"))

    right = PAGE_W_MM - MARGIN_MM
    contact = " | ".join(part for part in (company.email, company.phone) if part)
    postal = " ".join(part for part in (company.postal_code, company.locality) if part)
    lines: list[tuple[str, str, float]] = [(company.name, FONT_B, FS_COMPANY)]
    for text in (
        company.address,
        postal,
        t("COMPANY_TAX_ID", nif=company.nif) if company.nif else "",
        contact,
        company.website,
    ):
        if text:
            lines.append((text, FONT, FS_INFO))
    y = COMPANY_TEXT_TOP_MM
    for text, font, size in lines:
        cursor.add(
            TextOp(x=right, y=y, text=text, font=font, size=size, align="right", tag="company")
        )
        y += COMPANY_LINE_STEP_MM

    cursor.add(
        RectOp(
            x=MARGIN_MM,
            y=TITLE_BAR_Y_MM,
            w=CONTENT_W_MM,
            h=TITLE_BAR_H_MM,
            fill=PRIMARY_CLR,
            tag="title-bar",
        )
    )
    cursor.add(
        TextOp(
            x=PAGE_W_MM / 2,
            y=TITLE_BAR_Y_MM + 6.2,
            text=title,
            font=FONT_B,
            size=FS_TITLE,
            color=ON_PRIMARY_CLR,
            align="center",
            tag="title",
        )
    )
    cursor.y = INFO_GRID_Y_MM


def client_fields(report: Report, client: Client | None, t: Translate) -> list[tuple[str, str]]:
    fields: list[tuple[str, str]] = [(t("FIELD_CLIENT"), report.client_name)]
    if report.client_shop_name:
        fields.append((t("FIELD_SHOP"), report.client_shop_name))
    if client is not None:
        if client.address:
            fields.append((t("FIELD_ADDRESS"), client.address))
        postal = client.postal_line()
        if postal:
            fields.append(("", postal))
        fields.append((t("FIELD_TAX_ID"), client.tax_id or t("NOT_AVAILABLE")))
        contact = report.client_signer_name or client.contact_person
    else:
        fields.append((t("FIELD_TAX_ID"), t("NOT_AVAILABLE")))
        contact = report.client_signer_name
    if contact:
        fields.append((t("FIELD_CONTACT"), contact))
    return fields


def intervention_fields(report: Report, t: Translate) -> list[tuple[str, str]]:
    schedule = " - ".join(part for part in (report.start_time, report.end_time) if part)
    fields: list[tuple[str, str]] = [(t("FIELD_DATE"), report.date)]
    if schedule:
        fields.append((t("FIELD_SCHEDULE"), schedule))
    fields.append((t("FIELD_TECHNICIAN"), report.auditor_name))
    fields.append((t("FIELD_TYPE"), report.type_name))
    if report.contract_number:
        fields.append((t("FIELD_CONTRACT"), report.contract_number))
    if report.route_number:
        fields.append((t("FIELD_ROUTE"), report.route_number))
    if report.gps_location is not None:
        fields.append((t("FIELD_GPS"), report.gps_location.display()))
    return fields


def _field_text(label: str, value: str) -> str:
    return f"{label}: {value}" if label else value


def _with_ellipsis(line: str) -> str:
    return f"{line[:-1]}…" if len(line) > 1 else "…"


def fit_info_fields(
    fields: Sequence[tuple[str, str]], width_mm: float, height_mm: float
) -> list[tuple[float, str]]:
    """Top offsets and lines of the wrapped fields that fit in *height_mm*.

    Each field advances by its measured block height.  Text that does not
    fit is dropped and the last kept line ends with an ellipsis.
    """
    line_h = line_height_mm(FS_INFO)
    placed: list[tuple[float, str]] = []
    offset = 0.0
    for label, value in fields:
        lines, block_h = measure_text_block(_field_text(label, value), width_mm, FONT, FS_INFO)
        for i, line in enumerate(lines):
            line_top = offset + i * line_h
            if line_top + line_h > height_mm + 1e-6:
                if placed:
                    last_top, last_line = placed[-1]
                    placed[-1] = (last_top, _with_ellipsis(last_line))
                return placed
            placed.append((line_top, line))
        offset += block_h
    return placed


def draw_info_grid(
    cursor: PageCursor,
    left: tuple[str, list[tuple[str, str]]],
    right: tuple[str, list[tuple[str, str]]],
) -> None:
    """Two side-by-side boxes of fixed height; overlong field text is clipped."""
    inner_w = INFO_BOX_W_MM - 2 * INFO_BOX_PAD_MM
    body_h = INFO_BOX_H_MM - INFO_BOX_TITLE_H_MM - INFO_BOX_PAD_MM
    top = cursor.y
    for idx, (title, fields) in enumerate((left, right)):
        x = MARGIN_MM + idx * (INFO_BOX_W_MM + INFO_BOX_GAP_MM)
        cursor.add(
            RectOp(
                x=x,
                y=top,
                w=INFO_BOX_W_MM,
                h=INFO_BOX_H_MM,
                fill=REPORT_COLORS["surface"],
                stroke=LINE_CLR,
                radius=1.5,
                tag="info-box",
            )
        )
        cursor.add(
            TextOp(
                x=x + INFO_BOX_PAD_MM,
                y=top + 5.5,
                text=title,
                font=FONT_B,
                size=FS_INFO + 1,
                color=PRIMARY_CLR,
                tag="info-title",
            )
        )
        cursor.add(
            LineOp(
                x1=x + INFO_BOX_PAD_MM,
                y1=top + 7.5,
                x2=x + INFO_BOX_W_MM - INFO_BOX_PAD_MM,
                y2=top + 7.5,
            )
        )
        for offset, line in fit_info_fields(fields, inner_w, body_h):
            cursor.add(
                TextOp(
                    x=x + INFO_BOX_PAD_MM,
                    y=_baseline(top + INFO_BOX_TITLE_H_MM + offset, FS_INFO),
                    text=line,
                    size=FS_INFO,
                    tag="info-field",
                )
            )
    cursor.y = top + INFO_BOX_H_MM + SECTION_GAP_MM


# ---------------------------------------------------------------------------
# Tables with repeated header rows
# ---------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class TableColumn:
    header: str
    width: float
    align: str = "left"


@dataclass(slots=True, frozen=True)
class TableCell:
    text: str
    badge_color: str | None = None


def _cell_x(x0: float, width: float, align: str) -> float:
    if align == "right":
        return x0 + width - TABLE_CELL_PAD_X_MM
    if align == "center":
        return x0 + width / 2
    return x0 + TABLE_CELL_PAD_X_MM


def _layout_row(
    columns: Sequence[TableColumn], row: Sequence[TableCell]
) -> tuple[list[list[str]], float]:
    line_h = line_height_mm(FS_TABLE)
    cell_lines: list[list[str]] = []
    for column, cell in zip(columns, row, strict=True):
        if cell.badge_color is not None:
            cell_lines.append([cell.text])
        else:
            cell_lines.append(
                wrap_text(cell.text, column.width - 2 * TABLE_CELL_PAD_X_MM, FONT, FS_TABLE)
            )
    max_lines = max((len(lines) for lines in cell_lines), default=1)
    limit = max(1, math.floor((max_table_row_height_mm() - 2 * TABLE_CELL_PAD_Y_MM) / line_h))
    if max_lines > limit:
        for lines in cell_lines:
            if len(lines) > limit:
                del lines[limit:]
                lines[-1] = _with_ellipsis(lines[-1])
        max_lines = limit
    row_h = max(TABLE_MIN_ROW_H_MM, max_lines * line_h + 2 * TABLE_CELL_PAD_Y_MM)
    return cell_lines, row_h


def _draw_table_header(cursor: PageCursor, columns: Sequence[TableColumn], tag: str) -> None:
    top = cursor.y
    cursor.add(
        RectOp(
            x=MARGIN_MM,
            y=top,
            w=CONTENT_W_MM,
            h=TABLE_HEADER_H_MM,
            fill=PRIMARY_CLR,
            tag=f"{tag}-header",
        )
    )
    x0 = MARGIN_MM
    for column in columns:
        cursor.add(
            TextOp(
                x=_cell_x(x0, column.width, column.align),
                y=top + 5.3,
                text=column.header,
                font=FONT_B,
                size=FS_TABLE,
                color=ON_PRIMARY_CLR,
                align=column.align,
                tag=f"{tag}-header",
            )
        )
        x0 += column.width
    cursor.y = top + TABLE_HEADER_H_MM


def _draw_table_row(
    cursor: PageCursor,
    columns: Sequence[TableColumn],
    row: Sequence[TableCell],
    cell_lines: list[list[str]],
    row_h: float,
    tag: str,
    zebra: bool,
) -> None:
    top = cursor.y
    line_h = line_height_mm(FS_TABLE)
    cursor.add(
        RectOp(
            x=MARGIN_MM,
            y=top,
            w=CONTENT_W_MM,
            h=row_h,
            fill=REPORT_COLORS["table_zebra_bg"] if zebra else None,
            stroke=REPORT_COLORS["table_row_border"],
            tag=f"{tag}-row",
        )
    )
    x0 = MARGIN_MM
    for idx, (column, cell, lines) in enumerate(zip(columns, row, cell_lines, strict=True)):
        if idx:
            cursor.add(
                LineOp(
                    x1=x0,
                    y1=top,
                    x2=x0,
                    y2=top + row_h,
                    color=REPORT_COLORS["table_row_border"],
                    width=0.2,
                )
            )
        if cell.badge_color is not None:
            badge_x = x0 + (column.width - STATUS_BADGE_W_MM) / 2
            badge_y = top + (row_h - STATUS_BADGE_H_MM) / 2
            cursor.add(
                RectOp(
                    x=badge_x,
                    y=badge_y,
                    w=STATUS_BADGE_W_MM,
                    h=STATUS_BADGE_H_MM,
                    fill=cell.badge_color,
                    radius=1.2,
                    tag="status-badge",
                )
            )
            cursor.add(
                TextOp(
                    x=x0 + column.width / 2,
                    y=badge_y + 3.4,
                    text=cell.text,
                    font=FONT_B,
                    size=FS_SMALL,
                    color=ON_PRIMARY_CLR,
                    align="center",
                    tag="status-badge",
                )
            )
        else:
            for i, line in enumerate(lines):
                cursor.add(
                    TextOp(
                        x=_cell_x(x0, column.width, column.align),
                        y=_baseline(top + TABLE_CELL_PAD_Y_MM + i * line_h, FS_TABLE),
                        text=line,
                        size=FS_TABLE,
                        align=column.align,
                        tag=f"{tag}-cell",
                    )
                )
        x0 += column.width
    cursor.y = top + row_h


def draw_table(
    cursor: PageCursor,
    columns: Sequence[TableColumn],
    rows: Sequence[Sequence[TableCell]],
    *,
    tag: str,
    title: str | None = None,
    empty_text: str | None = None,
) -> None:
    """Draw a table, continuing on new pages as needed.

    A row that would cross the bottom of the body starts a new page, and
    the column header row is drawn again at the top of that page.  The
    optional title, the header and the first row are kept together.
    """
    if not rows and empty_text is not None:
        # placeholder row spanning the whole table
        columns = [TableColumn(header=columns[0].header, width=CONTENT_W_MM)]
        rows = [[TableCell(empty_text)]]
    laid_out = [_layout_row(columns, row) for row in rows]
    title_h = SECTION_TITLE_H_MM if title else 0.0
    first_row_h = laid_out[0][1] if laid_out else 0.0
    cursor.ensure(title_h + TABLE_HEADER_H_MM + first_row_h)
    if title:
        draw_section_title(cursor, title, tag=f"{tag}-title")
    _draw_table_header(cursor, columns, tag)
    for idx, (row, (cell_lines, row_h)) in enumerate(zip(rows, laid_out, strict=True)):
        if cursor.ensure(row_h):
            _draw_table_header(cursor, columns, tag)
        _draw_table_row(cursor, columns, row, cell_lines, row_h, tag, zebra=idx % 2 == 1)
    cursor.y += SECTION_GAP_MM / 2


def criteria_table(
    items: Sequence[AuditCriteriaItem], lang: str, t: Translate
) -> tuple[list[TableColumn], list[list[TableCell]]]:
    columns = [
        TableColumn(t("CRITERIA_COL_LABEL"), CRITERIA_LABEL_W_MM),
        TableColumn(t("CRITERIA_COL_STATUS"), CRITERIA_STATUS_W_MM, align="center"),
        TableColumn(t("CRITERIA_COL_NOTES"), CRITERIA_NOTES_W_MM),
    ]
    rows = [
        [
            TableCell(item.label),
            TableCell(status_label(item.status, lang), badge_color=status_color(item.status)),
            TableCell(item.notes or ""),
        ]
        for item in items
    ]
    return columns, rows


def order_table(
    order: Order | None, t: Translate
) -> tuple[list[TableColumn], list[list[TableCell]]]:
    columns = [
        TableColumn(t("ORDER_COL_PRODUCT"), ORDER_PRODUCT_W_MM),
        TableColumn(t("ORDER_COL_QTY"), ORDER_QTY_W_MM, align="center"),
        TableColumn(t("ORDER_COL_UNIT_PRICE"), ORDER_PRICE_W_MM, align="right"),
        TableColumn(t("ORDER_COL_DISCOUNT"), ORDER_DISCOUNT_W_MM, align="right"),
        TableColumn(t("ORDER_COL_LINE_TOTAL"), ORDER_TOTAL_W_MM, align="right"),
    ]
    items = order.items if order is not None else []
    rows = [
        [
            TableCell(item.product_name),
            TableCell(format_number(item.quantity)),
            TableCell(format_money(item.unit_price)),
            TableCell(f"{format_number(item.discount_percent)}%"),
            TableCell(format_money(item.line_total)),
        ]
        for item in items
    ]
    return columns, rows


# ---------------------------------------------------------------------------
# Order totals and free-text sections
# ---------------------------------------------------------------------------


def draw_section_title(cursor: PageCursor, title: str, *, tag: str) -> None:
    cursor.add(
        TextOp(
            x=MARGIN_MM,
            y=cursor.y + 4.5,
            text=title,
            font=FONT_B,
            size=FS_SECTION,
            color=PRIMARY_CLR,
            tag=tag,
        )
    )
    cursor.y += SECTION_TITLE_H_MM


def draw_order_totals(cursor: PageCursor, order: Order | None, t: Translate) -> None:
    """Right-aligned total, then delivery conditions and observations when set."""
    total = order.total_value if order is not None else 0.0
    cursor.ensure(ORDER_TOTAL_LINE_H_MM)
    cursor.add(
        TextOp(
            x=PAGE_W_MM - MARGIN_MM,
            y=cursor.y + 5.5,
            text=t("ORDER_TOTAL", amount=format_money(total)),
            font=FONT_B,
            size=FS_SECTION,
            align="right",
            tag="order-total",
        )
    )
    cursor.y += ORDER_TOTAL_LINE_H_MM
    if order is None:
        return
    line_h = line_height_mm(FS_BODY)
    value_w = CONTENT_W_MM - ORDER_LABEL_W_MM
    for label_key, value in (
        ("ORDER_DELIVERY_CONDITIONS", order.delivery_conditions),
        ("ORDER_OBSERVATIONS", order.observations),
    ):
        if not value.strip():
            continue
        # the label shares its page with the first value line
        cursor.ensure(line_h)
        cursor.add(
            TextOp(
                x=MARGIN_MM,
                y=_baseline(cursor.y, FS_BODY),
                text=f"{t(label_key)}:",
                font=FONT_B,
                size=FS_BODY,
                color=SUB_CLR,
                tag="order-label",
            )
        )
        for line in wrap_text(value.strip(), value_w, FONT, FS_BODY):
            cursor.ensure(line_h)
            cursor.add(
                TextOp(
                    x=MARGIN_MM + ORDER_LABEL_W_MM,
                    y=_baseline(cursor.y, FS_BODY),
                    text=line,
                    size=FS_BODY,
                    tag="order-value",
                )
            )
            cursor.y += line_h
        cursor.y += 1.5
    cursor.y += SECTION_GAP_MM / 2


def draw_text_section(cursor: PageCursor, title: str, text: str, *, tag: str) -> None:
    """Titled block of wrapped text; long text continues line by line on new pages."""
    line_h = line_height_mm(FS_BODY)
    cursor.ensure(SECTION_TITLE_H_MM + line_h)
    draw_section_title(cursor, title, tag=f"{tag}-title")
    for line in wrap_text(text, CONTENT_W_MM, FONT, FS_BODY):
        cursor.ensure(line_h)
        cursor.add(
            TextOp(
                x=MARGIN_MM,
                y=_baseline(cursor.y, FS_BODY),
                text=line,
                size=FS_BODY,
                tag=f"{tag}-text",
            )
        )
        cursor.y += line_h
    cursor.y += SECTION_GAP_MM / 2


def draw_summary_sections(
    cursor: PageCursor, report: Report, t: Translate, *, general_title: bool
) -> None:
    if summary_needs_new_page(cursor.y):
        cursor.new_page()
    title = t("SUMMARY_TITLE_GENERAL") if general_title else t("SUMMARY_TITLE")
    draw_text_section(
        cursor, title, report.summary.strip() or t("NO_OBSERVATIONS"), tag="summary"
    )
    observations = (report.client_observations or "").strip()
    if observations:
        draw_text_section(
            cursor, t("CLIENT_OBSERVATIONS_TITLE"), observations, tag="client-observations"
        )


# ---------------------------------------------------------------------------
# Signatures
# ---------------------------------------------------------------------------


def draw_signature_block(
    cursor: PageCursor,
    report: Report,
    t: Translate,
    *,
    auditor_image: bytes | None,
    client_image: bytes | None,
) -> None:
    """Two signature boxes anchored above the page bottom."""
    if signatures_need_new_page(cursor.y):
        cursor.new_page()
    top = SIGNATURE_BLOCK_TOP_MM
    regions = (
        (
            MARGIN_MM,
            t("SIGNATURE_TECHNICIAN"),
            auditor_image,
            report.auditor_signer_name or report.auditor_name,
            t("SIGNATURE_CAPTION_TECHNICIAN"),
        ),
        (
            MARGIN_MM + INFO_BOX_W_MM + INFO_BOX_GAP_MM,
            t("SIGNATURE_CLIENT"),
            client_image,
            report.client_signer_name,
            t("SIGNATURE_CAPTION_CLIENT"),
        ),
    )
    for x, role, image, name, caption in regions:
        cursor.add(
            RectOp(
                x=x,
                y=top,
                w=INFO_BOX_W_MM,
                h=SIGNATURE_BOX_H_MM,
                stroke=LINE_CLR,
                radius=1.5,
                tag="signature-box",
            )
        )
        cursor.add(
            TextOp(
                x=x + 3,
                y=top + 5,
                text=role,
                font=FONT_B,
                size=FS_INFO,
                tag="signature-role",
            )
        )
        if image is not None:
            cursor.add(
                ImageOp(
                    x=x + 3,
                    y=top + 7,
                    w=SIGNATURE_IMAGE_W_MM,
                    h=SIGNATURE_IMAGE_H_MM,
                    data=image,
                    tag="signature-image",
                )
            )
        cursor.add(
            LineOp(
                x1=x + 3,
                y1=top + 28,
                x2=x + INFO_BOX_W_MM - 3,
                y2=top + 28,
                color=REPORT_COLORS["signature_rule"],
                tag="signature-rule",
            )
        )
        cursor.add(
            TextOp(x=x + 3, y=top + 32, text=name, size=FS_INFO, tag="signature-name")
        )
        cursor.add(
            TextOp(
                x=x + 3,
                y=top + 36,
                text=caption,
                size=FS_SMALL,
                color=MUTED_CLR,
                tag="signature-caption",
            )
        )
    cursor.y = top + SIGNATURE_BOX_H_MM


def draw_order_signature_lines(cursor: PageCursor, t: Translate) -> None:
    """Simplified footer of the order document: two bare signature lines."""
    if order_signatures_need_new_page(cursor.y):
        cursor.new_page()
    line_y = ORDER_SIGNATURE_TOP_MM + 18
    left_x = MARGIN_MM + 5
    right_x = PAGE_W_MM - MARGIN_MM - 5 - ORDER_SIGNATURE_LINE_W_MM
    for x, label_key in (
        (left_x, "ORDER_SIGNATURE_COMMERCIAL"),
        (right_x, "ORDER_SIGNATURE_CLIENT"),
    ):
        cursor.add(
            LineOp(
                x1=x,
                y1=line_y,
                x2=x + ORDER_SIGNATURE_LINE_W_MM,
                y2=line_y,
                color=REPORT_COLORS["signature_rule"],
                tag="order-signature-line",
            )
        )
        cursor.add(
            TextOp(
                x=x + ORDER_SIGNATURE_LINE_W_MM / 2,
                y=line_y + 4.5,
                text=t(label_key),
                size=FS_INFO,
                color=SUB_CLR,
                align="center",
                tag="order-signature-caption",
            )
        )
    cursor.y = ORDER_SIGNATURE_TOP_MM + ORDER_SIGNATURE_H_MM
