"""Page geometry and text-measurement helpers for the report layout.

All positions are in millimetres on a portrait A4 page with the origin at
the top-left corner and ``y`` growing downwards.  The backend converts to
PDF points when it replays the page model.

Images (logo, signatures) are always stretched to their fixed boxes; the
source aspect ratio is never applied.
"""

from __future__ import annotations

import math

from reportlab.pdfbase.pdfmetrics import stringWidth

# ---------------------------------------------------------------------------
# Page frame
# ---------------------------------------------------------------------------

PAGE_W_MM = 210.0
PAGE_H_MM = 297.0
MARGIN_MM = 14.0
CONTENT_W_MM = PAGE_W_MM - 2 * MARGIN_MM
CONTINUATION_TOP_MM = MARGIN_MM + 6.0
BODY_BOTTOM_MM = PAGE_H_MM - 15.0
FOOTER_BASELINE_MM = PAGE_H_MM - 8.0

PT_TO_MM = 25.4 / 72.0
LINE_HEIGHT_FACTOR = 1.15

FONT = "Helvetica"
FONT_B = "Helvetica-Bold"
FS_COMPANY = 11
FS_TITLE = 12
FS_SECTION = 10
FS_BODY = 9
FS_INFO = 8
FS_TABLE = 8
FS_SMALL = 7

# ---------------------------------------------------------------------------
# First-page header and info grid
# ---------------------------------------------------------------------------

LOGO_BOX_MM = (MARGIN_MM, 10.0, 40.0, 22.0)
COMPANY_TEXT_TOP_MM = 14.0
COMPANY_LINE_STEP_MM = 4.2
TITLE_BAR_Y_MM = 42.0
TITLE_BAR_H_MM = 9.0

INFO_GRID_Y_MM = TITLE_BAR_Y_MM + TITLE_BAR_H_MM + 5.0
INFO_BOX_H_MM = 42.0
INFO_BOX_GAP_MM = 6.0
INFO_BOX_W_MM = (CONTENT_W_MM - INFO_BOX_GAP_MM) / 2
INFO_BOX_PAD_MM = 3.0
INFO_BOX_TITLE_H_MM = 9.0

SECTION_GAP_MM = 8.0

# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

TABLE_HEADER_H_MM = 8.0
TABLE_MIN_ROW_H_MM = 7.0
TABLE_CELL_PAD_X_MM = 1.8
TABLE_CELL_PAD_Y_MM = 1.6
STATUS_BADGE_W_MM = 13.0
STATUS_BADGE_H_MM = 4.8

CRITERIA_LABEL_W_MM = 90.0
CRITERIA_STATUS_W_MM = 20.0
CRITERIA_NOTES_W_MM = CONTENT_W_MM - CRITERIA_LABEL_W_MM - CRITERIA_STATUS_W_MM

ORDER_QTY_W_MM = 18.0
ORDER_PRICE_W_MM = 28.0
ORDER_DISCOUNT_W_MM = 22.0
ORDER_TOTAL_W_MM = 32.0
ORDER_PRODUCT_W_MM = (
    CONTENT_W_MM - ORDER_QTY_W_MM - ORDER_PRICE_W_MM - ORDER_DISCOUNT_W_MM - ORDER_TOTAL_W_MM
)
ORDER_TOTAL_LINE_H_MM = 8.0
ORDER_LABEL_W_MM = 45.0

# ---------------------------------------------------------------------------
# Summary and signatures
# ---------------------------------------------------------------------------

SUMMARY_MIN_SPACE_MM = 90.0
"""A summary never starts with less than this much room left on the page."""

SIGNATURE_RESERVED_H_MM = 45.0
SIGNATURE_BOTTOM_PAD_MM = 10.0
SIGNATURE_BLOCK_TOP_MM = PAGE_H_MM - SIGNATURE_BOTTOM_PAD_MM - SIGNATURE_RESERVED_H_MM
SIGNATURE_BOX_H_MM = 38.0
SIGNATURE_IMAGE_W_MM = 40.0
SIGNATURE_IMAGE_H_MM = 18.0

ORDER_SIGNATURE_H_MM = 30.0
ORDER_SIGNATURE_TOP_MM = PAGE_H_MM - SIGNATURE_BOTTOM_PAD_MM - ORDER_SIGNATURE_H_MM
ORDER_SIGNATURE_LINE_W_MM = 70.0


# ---------------------------------------------------------------------------
# Text measurement
# ---------------------------------------------------------------------------


def line_height_mm(font_size: float) -> float:
    return font_size * LINE_HEIGHT_FACTOR * PT_TO_MM


def text_width_mm(text: str, font: str = FONT, font_size: float = FS_BODY) -> float:
    return stringWidth(text, font, font_size) * PT_TO_MM


def estimate_line_count(
    text: str,
    box_width_mm: float,
    font: str = FONT,
    font_size: float = FS_BODY,
) -> int:
    """``ceil(textWidth / boxWidth)`` per paragraph, at least one line each."""
    if box_width_mm <= 0:
        raise ValueError("box_width_mm must be positive")
    total = 0
    for paragraph in str(text).split("\n"):
        width = text_width_mm(paragraph, font, font_size)
        total += max(1, math.ceil(width / box_width_mm))
    return total


def _split_word(word: str, max_width_mm: float, font: str, font_size: float) -> list[str]:
    """Cut *word* into pieces no wider than the box; every piece keeps one character."""
    pieces: list[str] = []
    start = 0
    width = 0.0
    char_widths: dict[str, float] = {}
    for idx, char in enumerate(word):
        char_w = char_widths.get(char)
        if char_w is None:
            char_w = char_widths[char] = text_width_mm(char, font, font_size)
        if idx > start and width + char_w > max_width_mm:
            pieces.append(word[start:idx])
            start = idx
            width = 0.0
        width += char_w
    pieces.append(word[start:])
    return pieces


def wrap_text(
    text: str,
    width_mm: float,
    font: str = FONT,
    font_size: float = FS_BODY,
) -> list[str]:
    """Greedy word wrap; words wider than the box are split by character."""
    lines: list[str] = []
    for paragraph in str(text).split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue
        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if text_width_mm(candidate, font, font_size) <= width_mm:
                current = candidate
                continue
            if current:
                lines.append(current)
            pieces = _split_word(word, width_mm, font, font_size)
            lines.extend(pieces[:-1])
            current = pieces[-1]
        lines.append(current)
    return lines or [""]


def measure_text_block(
    text: str,
    width_mm: float,
    font: str = FONT,
    font_size: float = FS_BODY,
) -> tuple[list[str], float]:
    """Return the wrapped lines and the block height in mm.

    The height follows the width estimate but never undercuts the number
    of lines actually produced by the word wrap.
    """
    lines = wrap_text(text, width_mm, font, font_size)
    count = max(len(lines), estimate_line_count(text, width_mm, font, font_size))
    return lines, count * line_height_mm(font_size)


# ---------------------------------------------------------------------------
# Page-break policy
# ---------------------------------------------------------------------------


def overflows(y_mm: float, block_h_mm: float, bottom_mm: float = BODY_BOTTOM_MM) -> bool:
    return y_mm + block_h_mm > bottom_mm + 1e-6


def remaining_space_mm(y_mm: float, bottom_mm: float = BODY_BOTTOM_MM) -> float:
    return max(0.0, bottom_mm - y_mm)


def summary_needs_new_page(y_mm: float) -> bool:
    return remaining_space_mm(y_mm) < SUMMARY_MIN_SPACE_MM


def signatures_need_new_page(y_mm: float) -> bool:
    """Content already reaches into the reserved signature zone."""
    return y_mm > SIGNATURE_BLOCK_TOP_MM


def order_signatures_need_new_page(y_mm: float) -> bool:
    return y_mm > ORDER_SIGNATURE_TOP_MM


def max_table_row_height_mm() -> float:
    """Tallest row that fits on a continuation page below a header row."""
    return BODY_BOTTOM_MM - CONTINUATION_TOP_MM - TABLE_HEADER_H_MM
