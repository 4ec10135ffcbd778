"""In-memory entity cache with optimistic write-through persistence.

Every write updates memory first and then goes to the database.  A failed
database write is logged and leaves the in-memory value in place; the
entity's sync status tells the two situations apart.  There is no retry
and no rollback.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable
from dataclasses import replace
from enum import StrEnum
from threading import RLock

from .database import AuditDB
from .domain_models import Client, CompanySettings, Report, User
from .hydration import hydrate_report, hydrate_reports
from .seed import default_company_settings

LOGGER = logging.getLogger(__name__)

_PERSISTENCE_ERRORS = (sqlite3.Error, OSError)

COMPANY_SETTINGS_ID = "company"


class SyncStatus(StrEnum):
    SYNCED = "synced"
    PENDING = "pending"
    FAILED = "failed"


class EntityKind(StrEnum):
    USER = "user"
    CLIENT = "client"
    REPORT = "report"
    SETTINGS = "settings"


class Workspace:
    """Users, clients, reports and company settings held in memory."""

    def __init__(self, db: AuditDB | None = None) -> None:
        self._lock = RLock()
        self._db = db
        self._users: dict[str, User] = {}
        self._clients: dict[str, Client] = {}
        self._reports: dict[str, Report] = {}
        self._company = default_company_settings()
        self._sync: dict[tuple[EntityKind, str], SyncStatus] = {}

    # -- loading --------------------------------------------------------------

    def load(self) -> bool:
        """Replace memory with the database contents.

        On failure the current in-memory data is kept and ``False`` is
        returned.
        """
        if self._db is None:
            return False
        try:
            users = self._db.list_users()
            clients = self._db.list_clients()
            reports = self._db.list_reports()
            company = self._db.get_company_settings()
        except _PERSISTENCE_ERRORS:
            LOGGER.warning(
                "Could not load data from the database; keeping in-memory data", exc_info=True
            )
            return False
        with self._lock:
            self._users = {user.id: user for user in users}
            self._clients = {client.id: client for client in clients}
            self._reports = {report.id: report for report in reports}
            if company is not None:
                self._company = company
            self._sync = {}
            for kind, ids in (
                (EntityKind.USER, self._users),
                (EntityKind.CLIENT, self._clients),
                (EntityKind.REPORT, self._reports),
            ):
                for entity_id in ids:
                    self._sync[(kind, entity_id)] = SyncStatus.SYNCED
            self._sync[(EntityKind.SETTINGS, COMPANY_SETTINGS_ID)] = SyncStatus.SYNCED
        LOGGER.info(
            "Loaded %d users, %d clients and %d reports",
            len(users),
            len(clients),
            len(reports),
        )
        return True

    def seed(
        self,
        *,
        users: list[User] | None = None,
        clients: list[Client] | None = None,
        reports: list[Report] | None = None,
        company: CompanySettings | None = None,
    ) -> None:
        """Put entities in memory without writing them through."""
        with self._lock:
            for user in users or ():
                self._users[user.id] = user
            for client in clients or ():
                self._clients[client.id] = client
            for report in reports or ():
                self._reports[report.id] = report
            if company is not None:
                self._company = company

    # -- write-through --------------------------------------------------------

    def _write_through(
        self, kind: EntityKind, entity_id: str, write: Callable[[AuditDB], object]
    ) -> SyncStatus:
        key = (kind, entity_id)
        with self._lock:
            self._sync[key] = SyncStatus.PENDING
        if self._db is None:
            return SyncStatus.PENDING
        try:
            write(self._db)
        except _PERSISTENCE_ERRORS:
            LOGGER.warning(
                "Persisting %s %s failed; keeping the in-memory value",
                kind.value,
                entity_id,
                exc_info=True,
            )
            status = SyncStatus.FAILED
        else:
            status = SyncStatus.SYNCED
        with self._lock:
            self._sync[key] = status
        return status

    def sync_status(self, kind: EntityKind | str, entity_id: str) -> SyncStatus | None:
        with self._lock:
            return self._sync.get((EntityKind(kind), entity_id))

    # -- users ----------------------------------------------------------------

    def list_users(self) -> list[User]:
        with self._lock:
            return list(self._users.values())

    def get_user(self, user_id: str) -> User | None:
        with self._lock:
            return self._users.get(user_id)

    def save_user(self, user: User) -> SyncStatus:
        with self._lock:
            self._users[user.id] = user
        return self._write_through(EntityKind.USER, user.id, lambda db: db.upsert_user(user))

    def delete_user(self, user_id: str) -> bool:
        with self._lock:
            removed = self._users.pop(user_id, None) is not None
        if removed:
            self._write_through(EntityKind.USER, user_id, lambda db: db.delete_user(user_id))
        return removed

    # -- clients --------------------------------------------------------------

    def list_clients(self) -> list[Client]:
        with self._lock:
            return sorted(self._clients.values(), key=lambda client: client.name.lower())

    def get_client(self, client_id: str) -> Client | None:
        with self._lock:
            return self._clients.get(client_id)

    def save_client(self, client: Client) -> SyncStatus:
        with self._lock:
            self._clients[client.id] = client
        return self._write_through(
            EntityKind.CLIENT, client.id, lambda db: db.upsert_client(client)
        )

    def delete_client(self, client_id: str) -> bool:
        with self._lock:
            removed = self._clients.pop(client_id, None) is not None
        if removed:
            self._write_through(
                EntityKind.CLIENT, client_id, lambda db: db.delete_client(client_id)
            )
        return removed

    # -- reports --------------------------------------------------------------

    def list_reports(self) -> list[Report]:
        """Hydrated reports, newest first."""
        with self._lock:
            reports = sorted(self._reports.values(), key=lambda r: r.date, reverse=True)
            clients = list(self._clients.values())
            users = list(self._users.values())
        return hydrate_reports(reports, clients, users)

    def get_report(self, report_id: str) -> Report | None:
        with self._lock:
            report = self._reports.get(report_id)
            if report is None:
                return None
            return hydrate_report(report, self._clients, self._users)

    def save_report(self, report: Report) -> SyncStatus:
        """Store *report* and stamp its client's last visit with the report date."""
        with self._lock:
            self._reports[report.id] = report
            client = self._clients.get(report.client_id)
        status = self._write_through(
            EntityKind.REPORT, report.id, lambda db: db.upsert_report(report)
        )
        if client is not None and report.date:
            self.save_client(replace(client, last_visit_date=report.date))
        return status

    def delete_report(self, report_id: str) -> bool:
        with self._lock:
            removed = self._reports.pop(report_id, None) is not None
        if removed:
            self._write_through(
                EntityKind.REPORT, report_id, lambda db: db.delete_report(report_id)
            )
        return removed

    # -- company settings -----------------------------------------------------

    @property
    def company_settings(self) -> CompanySettings:
        with self._lock:
            return self._company

    def save_company_settings(self, settings: CompanySettings) -> SyncStatus:
        with self._lock:
            self._company = settings
        return self._write_through(
            EntityKind.SETTINGS,
            COMPANY_SETTINGS_ID,
            lambda db: db.set_company_settings(settings),
        )
