"""Dashboard statistics and client search."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta
from typing import Any

from .checklist import criteria_tally
from .domain_models import Client, Report

RECENT_REPORTS_LIMIT = 5


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def search_clients(clients: Iterable[Client], query: str | None) -> list[Client]:
    """Case-insensitive name match, or a substring of the tax id."""
    needle = (query or "").strip()
    if not needle:
        return list(clients)
    lowered = needle.lower()
    return [
        client
        for client in clients
        if lowered in client.name.lower() or (client.tax_id and needle in client.tax_id)
    ]


def reports_in_month(reports: Iterable[Report], today: date) -> list[Report]:
    out: list[Report] = []
    for report in reports:
        report_date = _parse_date(report.date)
        if report_date is not None and (report_date.year, report_date.month) == (
            today.year,
            today.month,
        ):
            out.append(report)
    return out


def recent_reports(reports: Iterable[Report], limit: int = RECENT_REPORTS_LIMIT) -> list[Report]:
    """Newest first by report date; the input order is not changed."""
    return sorted(reports, key=lambda report: report.date, reverse=True)[: max(0, limit)]


def next_visit_date(client: Client) -> date | None:
    last = _parse_date(client.last_visit_date)
    if last is None or not client.visit_frequency_days:
        return None
    return last + timedelta(days=client.visit_frequency_days)


def clients_due_for_visit(clients: Iterable[Client], today: date) -> list[Client]:
    """Active clients with a visit frequency that are due, or never visited."""
    due: list[Client] = []
    for client in clients:
        if not client.is_active or not client.visit_frequency_days:
            continue
        next_visit = next_visit_date(client)
        if next_visit is None or next_visit <= today:
            due.append(client)
    return due


def dashboard_summary(
    reports: list[Report],
    clients: list[Client],
    today: date,
) -> dict[str, Any]:
    month = reports_in_month(reports, today)
    tally = criteria_tally(())
    for report in month:
        for status, count in criteria_tally(report.criteria).items():
            tally[status] += count
    due = clients_due_for_visit(clients, today)
    return {
        "today": today.isoformat(),
        "reportsThisMonth": len(month),
        "activeClients": sum(1 for client in clients if client.is_active),
        "recentReports": [
            {
                "id": report.id,
                "date": report.date,
                "clientName": report.client_name,
                "typeName": report.type_name,
                "auditorName": report.auditor_name,
                "status": report.status.value,
            }
            for report in recent_reports(reports)
        ],
        "clientsDueForVisit": [
            {
                "id": client.id,
                "name": client.name,
                "lastVisitDate": client.last_visit_date,
                "nextVisitDate": (nv.isoformat() if (nv := next_visit_date(client)) else None),
            }
            for client in due
        ],
        "criteriaTally": tally,
    }
