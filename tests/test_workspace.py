from __future__ import annotations

import sqlite3
from pathlib import Path

from builders import make_client, make_company, make_report, make_user, make_workspace

from auditpro.database import AuditDB
from auditpro.workspace import EntityKind, SyncStatus, Workspace


class _FailingDB:
    """Database double whose every call fails like a locked SQLite file."""

    def __getattr__(self, name: str):
        def _fail(*args, **kwargs):
            raise sqlite3.OperationalError("database is locked")

        return _fail


def test_writes_without_database_stay_pending() -> None:
    workspace = Workspace()
    assert workspace.save_client(make_client()) is SyncStatus.PENDING
    assert workspace.sync_status(EntityKind.CLIENT, "c1") is SyncStatus.PENDING
    assert workspace.get_client("c1") is not None


def test_writes_through_to_database(tmp_path: Path) -> None:
    db = AuditDB(tmp_path / "auditpro.db")
    try:
        workspace = Workspace(db)
        assert workspace.save_user(make_user()) is SyncStatus.SYNCED
        assert workspace.sync_status("user", "u1") is SyncStatus.SYNCED
        assert db.list_users() == [make_user()]
        fresh = Workspace(db)
        assert fresh.load() is True
        assert fresh.get_user("u1") == make_user()
        assert fresh.sync_status(EntityKind.USER, "u1") is SyncStatus.SYNCED
    finally:
        db.close()


def test_failed_write_keeps_memory_and_marks_failed() -> None:
    workspace = Workspace(_FailingDB())  # type: ignore[arg-type]
    status = workspace.save_client(make_client(name="Apenas em memória"))
    assert status is SyncStatus.FAILED
    assert workspace.get_client("c1").name == "Apenas em memória"
    assert workspace.sync_status(EntityKind.CLIENT, "c1") is SyncStatus.FAILED


def test_failed_load_keeps_memory() -> None:
    workspace = Workspace(_FailingDB())  # type: ignore[arg-type]
    workspace.seed(users=[make_user()])
    assert workspace.load() is False
    assert workspace.get_user("u1") is not None


def test_load_without_database_is_false() -> None:
    assert Workspace().load() is False


def test_saving_report_stamps_client_last_visit() -> None:
    workspace = make_workspace()
    workspace.save_report(make_report(date="2024-02-29"))
    assert workspace.get_client("c1").last_visit_date == "2024-02-29"


def test_reports_are_hydrated_and_sorted() -> None:
    workspace = make_workspace(
        reports=[
            make_report("old", date="2023-01-01", client_name="", auditor_name="", type_name=""),
            make_report("new", date="2024-01-01"),
        ]
    )
    reports = workspace.list_reports()
    assert [report.id for report in reports] == ["new", "old"]
    old = reports[1]
    assert old.client_name == "Restaurante O Marisco"
    assert old.auditor_name == "Ana Silva"
    assert old.type_name.startswith("3. Auditoria HACCP")


def test_clients_sorted_by_name() -> None:
    workspace = make_workspace()
    assert [client.name for client in workspace.list_clients()] == [
        "Hotel Central",
        "Restaurante O Marisco",
    ]


def test_delete_reports_unknown_ids() -> None:
    workspace = make_workspace(reports=[make_report()])
    assert workspace.delete_report("r1") is True
    assert workspace.delete_report("r1") is False
    assert workspace.delete_client("missing") is False
    assert workspace.delete_user("u4") is True


def test_company_settings_default_and_update() -> None:
    workspace = Workspace()
    assert workspace.company_settings.name == "AuditPro Solutions, Lda"
    status = workspace.save_company_settings(make_company(name="Outra"))
    assert status is SyncStatus.PENDING
    assert workspace.company_settings.name == "Outra"
