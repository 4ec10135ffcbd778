from __future__ import annotations

from builders import make_client, make_report, make_user

from auditpro.hydration import hydrate_report, hydrate_reports


def test_fills_missing_names_from_lookups() -> None:
    bare = make_report(client_name="", client_shop_name=None, auditor_name="", type_name="")
    report = hydrate_report(bare, {"c1": make_client()}, {"u1": make_user()})
    assert report.client_name == "Restaurante O Marisco"
    assert report.client_shop_name == "Marisco Chiado"
    assert report.auditor_name == "Ana Silva"
    assert report.type_name == "3. Auditoria HACCP (Segurança Alimentar)"
    assert bare.client_name == ""


def test_stored_names_survive_renames() -> None:
    stored = make_report(client_name="Nome Antigo", auditor_name="Ana S.")
    report = hydrate_report(
        stored, {"c1": make_client(name="Nome Novo")}, {"u1": make_user(name="Ana Nova")}
    )
    assert report.client_name == "Nome Antigo"
    assert report.auditor_name == "Ana S."


def test_unknown_ids_leave_values_untouched() -> None:
    bare = make_report(client_id="gone", client_name="", auditor_name="")
    report = hydrate_report(bare, {}, {})
    assert report.client_name == ""
    assert report.auditor_name == ""


def test_hydrate_reports_keeps_order() -> None:
    reports = [make_report("b", client_name=""), make_report("a", client_name="")]
    out = hydrate_reports(reports, [make_client()], [make_user()])
    assert [report.id for report in out] == ["b", "a"]
    assert all(report.client_name == "Restaurante O Marisco" for report in out)
