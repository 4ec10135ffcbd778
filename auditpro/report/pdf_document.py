"""Page model for laid-out reports and its ReportLab backend.

The layout engine appends drawing instructions to a :class:`LayoutDocument`
page by page.  Footers need the final page count, so they are stamped in a
second pass (:func:`stamp_footers`) once the content pass has finished.
:func:`render_pdf_bytes` then replays every page onto a canvas.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen.canvas import Canvas

from ..report_theme import REPORT_COLORS
from .pdf_layout import FONT, FOOTER_BASELINE_MM, FS_SMALL, PAGE_H_MM, PAGE_W_MM

LOGGER = logging.getLogger(__name__)

FOOTER_TAG = "footer"

# ---------------------------------------------------------------------------
# Drawing instructions
# ---------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class TextOp:
    x: float
    y: float
    text: str
    font: str = FONT
    size: float = 9
    color: str = REPORT_COLORS["text_primary"]
    align: str = "left"
    tag: str = ""


@dataclass(slots=True, frozen=True)
class RectOp:
    x: float
    y: float
    w: float
    h: float
    fill: str | None = None
    stroke: str | None = None
    line_width: float = 0.2
    radius: float = 0.0
    tag: str = ""


@dataclass(slots=True, frozen=True)
class LineOp:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str = REPORT_COLORS["border"]
    width: float = 0.3
    tag: str = ""


@dataclass(slots=True, frozen=True)
class ImageOp:
    x: float
    y: float
    w: float
    h: float
    data: bytes = field(repr=False)
    tag: str = ""


DrawOp = TextOp | RectOp | LineOp | ImageOp


@dataclass(slots=True)
class Page:
    number: int
    ops: list[DrawOp] = field(default_factory=list)

    def ops_tagged(self, tag: str) -> list[DrawOp]:
        return [op for op in self.ops if op.tag == tag]

    def texts(self, tag: str | None = None) -> list[str]:
        return [
            op.text
            for op in self.ops
            if isinstance(op, TextOp) and (tag is None or op.tag == tag)
        ]


@dataclass(slots=True)
class LayoutDocument:
    title: str
    author: str = ""
    subject: str = ""
    pages: list[Page] = field(default_factory=list)
    footers_stamped: bool = False

    def __post_init__(self) -> None:
        if not self.pages:
            self.pages.append(Page(number=1))

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def current(self) -> Page:
        return self.pages[-1]

    def new_page(self) -> Page:
        page = Page(number=len(self.pages) + 1)
        self.pages.append(page)
        return page

    def add(self, op: DrawOp) -> None:
        self.current.ops.append(op)

    def iter_ops(self, tag: str | None = None) -> Iterator[tuple[Page, DrawOp]]:
        for page in self.pages:
            for op in page.ops:
                if tag is None or op.tag == tag:
                    yield page, op

    def all_texts(self) -> list[str]:
        return [text for page in self.pages for text in page.texts()]


def stamp_footers(document: LayoutDocument, caption: Callable[[int, int], str]) -> None:
    """Second pass: add ``caption(page, total)`` centred at the foot of every page.

    Runs once the page count is final.  Calling it again replaces the
    previous footers instead of adding more.
    """
    total = document.page_count
    for page in document.pages:
        page.ops = [op for op in page.ops if op.tag != FOOTER_TAG]
        page.ops.append(
            TextOp(
                x=PAGE_W_MM / 2,
                y=FOOTER_BASELINE_MM,
                text=caption(page.number, total),
                size=FS_SMALL + 1,
                color=REPORT_COLORS["text_muted"],
                align="center",
                tag=FOOTER_TAG,
            )
        )
    document.footers_stamped = True


# ---------------------------------------------------------------------------
# ReportLab backend
# ---------------------------------------------------------------------------


def _hex(c: str) -> colors.Color:
    return colors.HexColor(c)


def _y_pt(y_mm: float) -> float:
    return (PAGE_H_MM - y_mm) * mm


def _draw_text(c: Canvas, op: TextOp) -> None:
    c.setFont(op.font, op.size)
    c.setFillColor(_hex(op.color))
    x = op.x * mm
    y = _y_pt(op.y)
    if op.align == "right":
        c.drawRightString(x, y, op.text)
    elif op.align == "center":
        c.drawCentredString(x, y, op.text)
    else:
        c.drawString(x, y, op.text)


def _draw_rect(c: Canvas, op: RectOp) -> None:
    c.setLineWidth(op.line_width)
    if op.fill is not None:
        c.setFillColor(_hex(op.fill))
    if op.stroke is not None:
        c.setStrokeColor(_hex(op.stroke))
    x = op.x * mm
    y = _y_pt(op.y + op.h)
    stroke = 1 if op.stroke is not None else 0
    fill = 1 if op.fill is not None else 0
    if op.radius > 0:
        c.roundRect(x, y, op.w * mm, op.h * mm, op.radius * mm, stroke=stroke, fill=fill)
    else:
        c.rect(x, y, op.w * mm, op.h * mm, stroke=stroke, fill=fill)


def _draw_line(c: Canvas, op: LineOp) -> None:
    c.setStrokeColor(_hex(op.color))
    c.setLineWidth(op.width)
    c.line(op.x1 * mm, _y_pt(op.y1), op.x2 * mm, _y_pt(op.y2))


def _draw_image(c: Canvas, op: ImageOp) -> None:
    try:
        reader = ImageReader(BytesIO(op.data))
        c.drawImage(
            reader,
            op.x * mm,
            _y_pt(op.y + op.h),
            width=op.w * mm,
            height=op.h * mm,
            mask="auto",
        )
    except Exception:
        LOGGER.warning("Skipping image %r that could not be drawn", op.tag, exc_info=True)


_DRAWERS: dict[type, Callable[[Canvas, DrawOp], None]] = {
    TextOp: _draw_text,  # type: ignore[dict-item]
    RectOp: _draw_rect,  # type: ignore[dict-item]
    LineOp: _draw_line,  # type: ignore[dict-item]
    ImageOp: _draw_image,  # type: ignore[dict-item]
}


def render_pdf_bytes(document: LayoutDocument) -> bytes:
    buffer = BytesIO()
    c = Canvas(buffer, pagesize=(PAGE_W_MM * mm, PAGE_H_MM * mm), pageCompression=0)
    c.setTitle(document.title)
    c.setAuthor(document.author)
    c.setSubject(document.subject)
    for page in document.pages:
        for op in page.ops:
            c.saveState()
            _DRAWERS[type(op)](c, op)
            c.restoreState()
        c.showPage()
    c.save()
    return buffer.getvalue()
