"""Formatting and image helpers shared by the report renderers."""

from __future__ import annotations

import base64
import binascii
import logging
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from io import BytesIO

from reportlab.lib.utils import ImageReader

from ..domain_models import CriteriaStatus
from ..report_i18n import tr
from ..report_theme import REPORT_COLORS

LOGGER = logging.getLogger(__name__)

_DATA_URL_RE = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^,;]*)*),(?P<payload>.*)$",
    re.S,
)

CURRENCY_SYMBOL = "€"


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------


def _quantize(value: float, places: str) -> Decimal:
    try:
        return Decimal(str(value)).quantize(Decimal(places), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return Decimal(0).quantize(Decimal(places))


def format_money(value: float) -> str:
    """``28`` -> ``"28.00€"`` (two decimals, half-up, symbol suffix)."""
    amount = _quantize(value, "0.01")
    if amount == 0:
        amount = abs(amount)
    return f"{amount:f}{CURRENCY_SYMBOL}"


def format_number(value: float) -> str:
    """Quantities and percentages: up to two decimals, no trailing zeros."""
    amount = _quantize(value, "0.01")
    text = f"{amount:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


# ---------------------------------------------------------------------------
# Criteria status
# ---------------------------------------------------------------------------


def status_label(status: CriteriaStatus, lang: str) -> str:
    if status is CriteriaStatus.PASS:
        return tr(lang, "STATUS_PASS")
    if status is CriteriaStatus.FAIL:
        return tr(lang, "STATUS_FAIL")
    return tr(lang, "STATUS_NA")


def status_color(status: CriteriaStatus) -> str:
    if status is CriteriaStatus.PASS:
        return REPORT_COLORS["status_pass"]
    if status is CriteriaStatus.FAIL:
        return REPORT_COLORS["status_fail"]
    # unset renders like "not applicable"
    return REPORT_COLORS["status_na"]


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------


def decode_data_url(value: str) -> bytes:
    """Decode a ``data:`` URL (or bare base64 text) to bytes.

    Raises ``ValueError`` when the payload is not valid base64.
    """
    text = value.strip()
    match = _DATA_URL_RE.match(text)
    if match is not None:
        if ";base64" not in (match.group("params") or ""):
            raise ValueError("Only base64 data URLs are supported")
        text = match.group("payload")
    payload = "".join(text.split())
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Invalid base64 image payload") from exc
    if not data:
        raise ValueError("Empty image payload")
    return data


def load_image(value: str | None, *, label: str) -> bytes | None:
    """Return decoded image bytes, or ``None`` when absent or undecodable.

    A failure only logs a warning: a broken signature or logo must never
    abort the whole document.
    """
    if not value:
        return None
    try:
        data = decode_data_url(value)
        width, height = ImageReader(BytesIO(data)).getSize()
        if width <= 0 or height <= 0:
            raise ValueError(f"Image has no pixels ({width}x{height})")
    except Exception:
        LOGGER.warning("Skipping %s image that failed to decode", label, exc_info=True)
        return None
    return data
