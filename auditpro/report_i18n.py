"""Report internationalisation helpers.

Translation data is loaded from ``auditpro/data/report_i18n.json``.
Portuguese is the default language; English is the only alternative.

The catalogue is checked when first loaded: every key needs a Portuguese
text, only the supported languages may appear, and a translation must use
exactly the placeholders of its Portuguese text.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from string import Formatter
from typing import Any

_DATA_FILE = Path(__file__).resolve().parent / "data" / "report_i18n.json"
DEFAULT_LANG = "pt"
SUPPORTED_LANGS: tuple[str, ...] = ("pt", "en")


def _placeholders(template: str) -> set[str]:
    return {field for _, field, _, _ in Formatter().parse(template) if field}


def validate_catalogue(data: dict[str, dict[str, str]]) -> list[str]:
    """Return one message per problem found in *data*; empty when valid."""
    problems: list[str] = []
    for key, values in data.items():
        if not isinstance(values, dict):
            problems.append(f"{key}: expected an object of texts per language")
            continue
        base = values.get(DEFAULT_LANG)
        if not isinstance(base, str) or not base:
            problems.append(f"{key}: missing {DEFAULT_LANG!r} text")
            continue
        expected = _placeholders(base)
        for lang, text in values.items():
            if lang not in SUPPORTED_LANGS:
                problems.append(f"{key}: unsupported language {lang!r}")
            elif not isinstance(text, str):
                problems.append(f"{key}.{lang}: text must be a string")
            elif _placeholders(text) != expected:
                problems.append(f"{key}.{lang}: placeholders differ from {DEFAULT_LANG!r}")
    return problems


@lru_cache(maxsize=1)
def _load_translations() -> dict[str, dict[str, str]]:
    if not _DATA_FILE.exists():
        raise RuntimeError(f"Missing translation file: {_DATA_FILE}")
    try:
        with open(_DATA_FILE, encoding="utf-8") as fh:
            data: dict[str, dict[str, str]] = json.load(fh)
    except json.JSONDecodeError as exc:
        raise RuntimeError(f"Invalid translation file: {_DATA_FILE}") from exc
    problems = validate_catalogue(data)
    if problems:
        raise RuntimeError(f"Invalid translation file {_DATA_FILE}: " + "; ".join(problems))
    return data


def normalize_lang(lang: object) -> str:
    if isinstance(lang, str) and lang.strip().lower().startswith("en"):
        return "en"
    return DEFAULT_LANG


def tr(lang: object, key: str, **kwargs: Any) -> str:
    values = _load_translations().get(key)
    if values is None:
        template = key
    else:
        locale = normalize_lang(lang)
        template = values.get(locale) or values[DEFAULT_LANG]
    try:
        return template.format(**kwargs)
    except (KeyError, IndexError):
        return template
