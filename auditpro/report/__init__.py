"""auditpro.report – PDF rendering for visit reports and sales orders.

Rendering is split in two phases: the layout engine produces a page model
of drawing instructions (``pdf_document.LayoutDocument``) and the backend
replays it onto a ReportLab canvas.  Import the drawing modules through
:func:`load_renderer` so a missing drawing library only fails the export
that needs it.
"""

from __future__ import annotations

import importlib
import re
from types import ModuleType

from ..domain_models import Report

_WHITESPACE_RE = re.compile(r"\s+")


class RenderingUnavailableError(RuntimeError):
    """The PDF drawing library cannot be loaded."""


class ReportRenderError(RuntimeError):
    """PDF generation failed for a specific report."""


def load_renderer() -> ModuleType:
    """Return the ``pdf_builder`` module or raise :class:`RenderingUnavailableError`."""
    try:
        return importlib.import_module(f"{__name__}.pdf_builder")
    except ImportError as exc:
        raise RenderingUnavailableError(f"PDF rendering is unavailable: {exc}") from exc


def export_filename(prefix: str, client_name: str, date: str) -> str:
    client_part = _WHITESPACE_RE.sub("_", client_name.strip())
    return f"{prefix}_{client_part}_{date}.pdf"


def report_filename(report: Report) -> str:
    return export_filename("Relatorio", report.client_name, report.date)


def order_filename(report: Report) -> str:
    return export_filename("Encomenda", report.client_name, report.date)


__all__ = [
    "RenderingUnavailableError",
    "ReportRenderError",
    "export_filename",
    "load_renderer",
    "order_filename",
    "report_filename",
]
