"""Shared test helpers for the auditpro test suite."""

from __future__ import annotations

from io import BytesIO

from fastapi.routing import APIRouter

# ---------------------------------------------------------------------------
# PDF inspection helpers
# ---------------------------------------------------------------------------


def extract_pdf_text(pdf_bytes: bytes) -> str:
    """Extract all text from a PDF byte string using pypdf."""
    from pypdf import PdfReader

    reader = PdfReader(BytesIO(pdf_bytes))
    return "\n".join((page.extract_text() or "") for page in reader.pages)


def pdf_page_count(pdf_bytes: bytes) -> int:
    from pypdf import PdfReader

    return len(PdfReader(BytesIO(pdf_bytes)).pages)


# ---------------------------------------------------------------------------
# Router helpers
# ---------------------------------------------------------------------------


def route_endpoint(router: APIRouter, path: str, method: str):
    """Return the endpoint function registered for *method* on *path*."""
    for route in router.routes:
        if getattr(route, "path", "") == path and method in getattr(route, "methods", set()):
            return route.endpoint
    raise AssertionError(f"Route not found: {path} [{method}]")
