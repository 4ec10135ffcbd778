"""Command-line PDF export of a stored report record.

Example::

    auditpro-report report.json --client client.json --output out.pdf

Exits with status 1 and a message on stderr when the input cannot be read,
the PDF cannot be generated or the output cannot be written.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from .domain_models import Client, CompanySettings, Report
from .hydration import hydrate_report
from .report import (
    RenderingUnavailableError,
    ReportRenderError,
    load_renderer,
    order_filename,
    report_filename,
)
from .report_i18n import DEFAULT_LANG
from .seed import default_company_settings


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render an AuditPro report record to PDF")
    parser.add_argument("input", type=Path, help="Report record (.json)")
    parser.add_argument("--client", type=Path, default=None, help="Client record (.json)")
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="Company settings (.json); defaults to the built-in company",
    )
    parser.add_argument(
        "--order-only",
        action="store_true",
        help="Render only the sales order instead of the full report",
    )
    parser.add_argument("--lang", default=DEFAULT_LANG, help="Report language (pt or en)")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output PDF path (default: Relatorio_<client>_<date>.pdf next to the input)",
    )
    return parser.parse_args(argv)


def _read_json_object(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return data


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        report = Report.from_dict(_read_json_object(args.input))
        client = Client.from_dict(_read_json_object(args.client)) if args.client else None
        company = (
            CompanySettings.from_dict(_read_json_object(args.settings))
            if args.settings
            else default_company_settings()
        )
    except OSError as exc:
        print(f"Error: cannot read input: {exc}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as exc:
        print(f"Error: input file contains invalid JSON: {exc}", file=sys.stderr)
        return 1
    except (KeyError, ValueError) as exc:
        print(f"Error: invalid record: {exc}", file=sys.stderr)
        return 1

    # a bare record may lack the display names the PDF header uses
    report = hydrate_report(report, {client.id: client} if client else {}, {})
    filename = order_filename(report) if args.order_only else report_filename(report)
    out_pdf = args.output or args.input.with_name(filename)
    try:
        renderer = load_renderer()
        build = renderer.build_order_pdf if args.order_only else renderer.build_report_pdf
        content = build(report, client, company, lang=args.lang)
    except (RenderingUnavailableError, ReportRenderError) as exc:
        print(f"Error: PDF generation failed: {exc}", file=sys.stderr)
        return 1
    try:
        out_pdf.parent.mkdir(parents=True, exist_ok=True)
        out_pdf.write_bytes(content)
    except OSError as exc:
        print(f"Error: cannot write output: {exc}", file=sys.stderr)
        return 1
    print(f"wrote report: {out_pdf}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
