"""Fill denormalised display names on reports loaded with bare foreign keys."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import replace

from .domain_models import Client, Report, User
from .templates import template_label


def hydrate_report(
    report: Report,
    clients_by_id: Mapping[str, Client],
    users_by_id: Mapping[str, User],
) -> Report:
    """Return a copy with client, auditor and template names filled in.

    Non-empty stored names are kept, so a report keeps the names it was
    signed with after a later rename.  Unknown ids leave the stored values
    untouched.
    """
    client = clients_by_id.get(report.client_id)
    auditor = users_by_id.get(report.auditor_id)
    client_name = report.client_name
    client_shop_name = report.client_shop_name
    if client is not None and not client_name:
        client_name = client.name
        if client_shop_name is None:
            client_shop_name = client.shop_name
    auditor_name = report.auditor_name
    if auditor is not None and not auditor_name:
        auditor_name = auditor.name
    return replace(
        report,
        client_name=client_name,
        client_shop_name=client_shop_name,
        auditor_name=auditor_name,
        type_name=report.type_name or template_label(report.type_key),
    )


def hydrate_reports(
    reports: Iterable[Report],
    clients: Iterable[Client],
    users: Iterable[User],
) -> list[Report]:
    clients_by_id = {client.id: client for client in clients}
    users_by_id = {user.id: user for user in users}
    return [hydrate_report(report, clients_by_id, users_by_id) for report in reports]
