"""SQLite-backed persistence for the AuditPro server.

Stores users, clients, visit reports and the company settings in a single
file.  Every save is an upsert by id.  Report checklists and orders are
kept as JSON blobs; denormalised display names are stored when known and
otherwise left empty for hydration to fill.
"""

from __future__ import annotations

import json
import logging
import math
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from threading import RLock
from typing import Any

from .domain_models import Client, CompanySettings, Report, User

LOGGER = logging.getLogger(__name__)

# -- Schema -------------------------------------------------------------------

_SCHEMA_VERSION = 1

_SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS schema_meta (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS users (
    id                      TEXT PRIMARY KEY,
    name                    TEXT NOT NULL,
    role                    TEXT NOT NULL,
    pin                     TEXT NOT NULL,
    avatar                  TEXT,
    allowed_templates_json  TEXT NOT NULL DEFAULT '[]'
);

CREATE TABLE IF NOT EXISTS clients (
    id                    TEXT PRIMARY KEY,
    name                  TEXT NOT NULL,
    nif                   TEXT,
    contact_person        TEXT,
    email                 TEXT,
    phone                 TEXT,
    address               TEXT,
    postal_code           TEXT,
    locality              TEXT,
    county                TEXT,
    shop_name             TEXT,
    status                TEXT NOT NULL DEFAULT 'Ativo',
    last_visit_date       TEXT,
    visit_frequency_days  INTEGER,
    account_manager_id    TEXT
);

CREATE TABLE IF NOT EXISTS reports (
    id                   TEXT PRIMARY KEY,
    client_id            TEXT NOT NULL,
    auditor_id           TEXT NOT NULL,
    type_key             TEXT NOT NULL,
    date                 TEXT NOT NULL,
    start_time           TEXT,
    end_time             TEXT,
    client_name          TEXT,
    client_shop_name     TEXT,
    auditor_name         TEXT,
    type_name            TEXT,
    contract_number      TEXT,
    route_number         TEXT,
    summary              TEXT,
    client_observations  TEXT,
    gps_lat              REAL,
    gps_lng              REAL,
    status               TEXT NOT NULL,
    auditor_signature    TEXT,
    client_signature     TEXT,
    auditor_signer_name  TEXT,
    client_signer_name   TEXT,
    criteria_json        TEXT,
    order_json           TEXT
);

CREATE INDEX IF NOT EXISTS idx_reports_date ON reports(date);
CREATE INDEX IF NOT EXISTS idx_reports_client ON reports(client_id);

CREATE TABLE IF NOT EXISTS company_settings (
    id           INTEGER PRIMARY KEY CHECK (id = 1),
    name         TEXT NOT NULL,
    nif          TEXT,
    address      TEXT,
    postal_code  TEXT,
    locality     TEXT,
    email        TEXT,
    phone        TEXT,
    website      TEXT,
    logo_url     TEXT
);
"""

_REPORT_COLS: tuple[str, ...] = (
    "id",
    "client_id",
    "auditor_id",
    "type_key",
    "date",
    "start_time",
    "end_time",
    "client_name",
    "client_shop_name",
    "auditor_name",
    "type_name",
    "contract_number",
    "route_number",
    "summary",
    "client_observations",
    "gps_lat",
    "gps_lng",
    "status",
    "auditor_signature",
    "client_signature",
    "auditor_signer_name",
    "client_signer_name",
    "criteria_json",
    "order_json",
)
_REPORT_SELECT_SQL = f"SELECT {', '.join(_REPORT_COLS)} FROM reports"
_REPORT_UPSERT_SQL = (
    f"INSERT OR REPLACE INTO reports ({', '.join(_REPORT_COLS)}) "
    f"VALUES ({', '.join('?' * len(_REPORT_COLS))})"
)

_CLIENT_COLS: tuple[str, ...] = (
    "id",
    "name",
    "nif",
    "contact_person",
    "email",
    "phone",
    "address",
    "postal_code",
    "locality",
    "county",
    "shop_name",
    "status",
    "last_visit_date",
    "visit_frequency_days",
    "account_manager_id",
)

_SETTINGS_COLS: tuple[str, ...] = (
    "name",
    "nif",
    "address",
    "postal_code",
    "locality",
    "email",
    "phone",
    "website",
    "logo_url",
)


class AuditDB:
    """Thin wrapper around a SQLite database for AuditPro entities."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._lock = RLock()
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")
        self._ensure_schema()

    # -- lifecycle ------------------------------------------------------------

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @contextmanager
    def _cursor(self, *, commit: bool = True) -> Iterator[sqlite3.Cursor]:
        with self._lock:
            cur = self._conn.cursor()
            try:
                yield cur
                if commit:
                    self._conn.commit()
            except Exception:
                self._conn.rollback()
                raise
            finally:
                cur.close()

    @staticmethod
    def _sanitize_for_json(value: Any) -> Any:
        if isinstance(value, float):
            return value if math.isfinite(value) else None
        if isinstance(value, dict):
            return {k: AuditDB._sanitize_for_json(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [AuditDB._sanitize_for_json(v) for v in value]
        return value

    @classmethod
    def _safe_json_dumps(cls, value: Any) -> str:
        return json.dumps(cls._sanitize_for_json(value), ensure_ascii=False, allow_nan=False)

    @staticmethod
    def _safe_json_loads(value: str | None, *, context: str) -> Any | None:
        if not value:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            LOGGER.warning("Skipping invalid JSON payload while reading %s", context, exc_info=True)
            return None

    def _ensure_schema(self) -> None:
        with self._cursor() as cur:
            cur.executescript(_SCHEMA_SQL)
        with self._cursor() as cur:
            cur.execute("SELECT value FROM schema_meta WHERE key = ?", ("version",))
            row = cur.fetchone()
            if row is None:
                cur.execute(
                    "INSERT INTO schema_meta (key, value) VALUES (?, ?)",
                    ("version", str(_SCHEMA_VERSION)),
                )
                LOGGER.info(
                    "Created AuditPro database schema v%d at %s", _SCHEMA_VERSION, self.db_path
                )
                return
            version = int(str(row[0]))
            if version != _SCHEMA_VERSION:
                raise RuntimeError(
                    f"Unsupported AuditPro DB schema version {version}; "
                    f"expected {_SCHEMA_VERSION}. Delete the database file to recreate."
                )

    # -- users ----------------------------------------------------------------

    def list_users(self) -> list[User]:
        with self._cursor(commit=False) as cur:
            cur.execute(
                "SELECT id, name, role, pin, avatar, allowed_templates_json "
                "FROM users ORDER BY name"
            )
            rows = cur.fetchall()
        users: list[User] = []
        for user_id, name, role, pin, avatar, allowed_json in rows:
            allowed = self._safe_json_loads(allowed_json, context=f"user {user_id} templates")
            users.append(
                User.from_dict(
                    {
                        "id": user_id,
                        "name": name,
                        "role": role,
                        "pin": pin,
                        "avatar": avatar,
                        "allowedTemplates": allowed if isinstance(allowed, list) else [],
                    }
                )
            )
        return users

    def upsert_user(self, user: User) -> None:
        with self._cursor() as cur:
            cur.execute(
                "INSERT OR REPLACE INTO users "
                "(id, name, role, pin, avatar, allowed_templates_json) VALUES (?, ?, ?, ?, ?, ?)",
                (
                    user.id,
                    user.name,
                    user.role.value,
                    user.pin,
                    user.avatar,
                    self._safe_json_dumps([key.value for key in user.allowed_templates]),
                ),
            )

    def delete_user(self, user_id: str) -> bool:
        with self._cursor() as cur:
            cur.execute("DELETE FROM users WHERE id = ?", (user_id,))
            return cur.rowcount > 0

    # -- clients --------------------------------------------------------------

    def list_clients(self) -> list[Client]:
        with self._cursor(commit=False) as cur:
            cur.execute(f"SELECT {', '.join(_CLIENT_COLS)} FROM clients ORDER BY name")
            rows = cur.fetchall()
        clients: list[Client] = []
        for row in rows:
            values = dict(zip(_CLIENT_COLS, row, strict=True))
            clients.append(
                Client.from_dict(
                    {
                        "id": values["id"],
                        "name": values["name"],
                        "nif": values["nif"],
                        "contactPerson": values["contact_person"],
                        "email": values["email"],
                        "phone": values["phone"],
                        "address": values["address"],
                        "postalCode": values["postal_code"],
                        "locality": values["locality"],
                        "county": values["county"],
                        "shopName": values["shop_name"],
                        "status": values["status"],
                        "lastVisitDate": values["last_visit_date"],
                        "visitFrequencyDays": values["visit_frequency_days"],
                        "accountManagerId": values["account_manager_id"],
                    }
                )
            )
        return clients

    def upsert_client(self, client: Client) -> None:
        with self._cursor() as cur:
            cur.execute(
                f"INSERT OR REPLACE INTO clients ({', '.join(_CLIENT_COLS)}) "
                f"VALUES ({', '.join('?' * len(_CLIENT_COLS))})",
                (
                    client.id,
                    client.name,
                    client.tax_id,
                    client.contact_person,
                    client.email,
                    client.phone,
                    client.address,
                    client.postal_code,
                    client.locality,
                    client.county,
                    client.shop_name,
                    client.status.value,
                    client.last_visit_date,
                    client.visit_frequency_days,
                    client.account_manager_id,
                ),
            )

    def delete_client(self, client_id: str) -> bool:
        with self._cursor() as cur:
            cur.execute("DELETE FROM clients WHERE id = ?", (client_id,))
            return cur.rowcount > 0

    # -- reports --------------------------------------------------------------

    def _row_to_report(self, row: tuple[Any, ...]) -> Report | None:
        values = dict(zip(_REPORT_COLS, row, strict=True))
        report_id = values["id"]
        lat, lng = values["gps_lat"], values["gps_lng"]
        criteria = self._safe_json_loads(
            values["criteria_json"], context=f"report {report_id} criteria"
        )
        order = self._safe_json_loads(values["order_json"], context=f"report {report_id} order")
        payload: dict[str, Any] = {
            "id": report_id,
            "clientId": values["client_id"],
            "auditorId": values["auditor_id"],
            "typeKey": values["type_key"],
            "date": values["date"],
            "startTime": values["start_time"],
            "endTime": values["end_time"],
            "clientName": values["client_name"],
            "clientShopName": values["client_shop_name"],
            "auditorName": values["auditor_name"],
            "typeName": values["type_name"],
            "contractNumber": values["contract_number"],
            "routeNumber": values["route_number"],
            "summary": values["summary"],
            "clientObservations": values["client_observations"],
            "gpsLocation": (
                {"lat": lat, "lng": lng} if lat is not None and lng is not None else None
            ),
            "status": values["status"],
            "auditorSignature": values["auditor_signature"],
            "clientSignature": values["client_signature"],
            "auditorSignerName": values["auditor_signer_name"],
            "clientSignerName": values["client_signer_name"],
            "criteria": criteria if isinstance(criteria, list) else [],
            "order": order if isinstance(order, dict) else None,
        }
        try:
            return Report.from_dict(payload)
        except ValueError:
            LOGGER.warning(
                "Skipping report %s with unknown type %r", report_id, values["type_key"]
            )
            return None

    def list_reports(self) -> list[Report]:
        with self._cursor(commit=False) as cur:
            cur.execute(f"{_REPORT_SELECT_SQL} ORDER BY date DESC, id DESC")
            rows = cur.fetchall()
        return [report for row in rows if (report := self._row_to_report(row)) is not None]

    def get_report(self, report_id: str) -> Report | None:
        with self._cursor(commit=False) as cur:
            cur.execute(f"{_REPORT_SELECT_SQL} WHERE id = ?", (report_id,))
            row = cur.fetchone()
        if row is None:
            return None
        return self._row_to_report(row)

    def upsert_report(self, report: Report) -> None:
        gps = report.gps_location
        with self._cursor() as cur:
            cur.execute(
                _REPORT_UPSERT_SQL,
                (
                    report.id,
                    report.client_id,
                    report.auditor_id,
                    report.type_key.value,
                    report.date,
                    report.start_time,
                    report.end_time,
                    report.client_name or None,
                    report.client_shop_name,
                    report.auditor_name or None,
                    report.type_name or None,
                    report.contract_number,
                    report.route_number,
                    report.summary,
                    report.client_observations,
                    gps.lat if gps is not None else None,
                    gps.lng if gps is not None else None,
                    report.status.value,
                    report.auditor_signature,
                    report.client_signature,
                    report.auditor_signer_name,
                    report.client_signer_name,
                    self._safe_json_dumps([item.to_dict() for item in report.criteria]),
                    (
                        self._safe_json_dumps(report.order.to_dict())
                        if report.order is not None
                        else None
                    ),
                ),
            )

    def delete_report(self, report_id: str) -> bool:
        with self._cursor() as cur:
            cur.execute("DELETE FROM reports WHERE id = ?", (report_id,))
            return cur.rowcount > 0

    # -- company settings -----------------------------------------------------

    def get_company_settings(self) -> CompanySettings | None:
        with self._cursor(commit=False) as cur:
            cur.execute(f"SELECT {', '.join(_SETTINGS_COLS)} FROM company_settings WHERE id = 1")
            row = cur.fetchone()
        if row is None:
            return None
        values = dict(zip(_SETTINGS_COLS, row, strict=True))
        return CompanySettings.from_dict(
            {
                "name": values["name"],
                "nif": values["nif"],
                "address": values["address"],
                "postalCode": values["postal_code"],
                "locality": values["locality"],
                "email": values["email"],
                "phone": values["phone"],
                "website": values["website"],
                "logoUrl": values["logo_url"],
            }
        )

    def set_company_settings(self, settings: CompanySettings) -> None:
        with self._cursor() as cur:
            cur.execute(
                f"INSERT OR REPLACE INTO company_settings (id, {', '.join(_SETTINGS_COLS)}) "
                f"VALUES (1, {', '.join('?' * len(_SETTINGS_COLS))})",
                (
                    settings.name,
                    settings.nif,
                    settings.address,
                    settings.postal_code,
                    settings.locality,
                    settings.email,
                    settings.phone,
                    settings.website,
                    settings.logo_url,
                ),
            )

    # -- counts ---------------------------------------------------------------

    def is_empty(self) -> bool:
        """True while no user and no client has been stored."""
        with self._cursor(commit=False) as cur:
            cur.execute("SELECT (SELECT COUNT(*) FROM users) + (SELECT COUNT(*) FROM clients)")
            row = cur.fetchone()
        return int(row[0]) == 0
