from __future__ import annotations

import json
from pathlib import Path

import pytest
from builders import make_client, make_order, make_report

from auditpro.domain_models import ReportTypeKey
from auditpro.report_cli import main


def _write_json(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    return path


def test_renders_report_next_to_input(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    report_path = _write_json(tmp_path / "report.json", make_report().to_dict())
    client_path = _write_json(tmp_path / "client.json", make_client().to_dict())
    assert main([str(report_path), "--client", str(client_path)]) == 0
    out_pdf = tmp_path / "Relatorio_Restaurante_O_Marisco_2023-10-15.pdf"
    assert out_pdf.read_bytes().startswith(b"%PDF")
    assert f"wrote report: {out_pdf}" in capsys.readouterr().out


def test_bare_record_is_hydrated_from_client(tmp_path: Path) -> None:
    payload = make_report().to_dict()
    payload.update(clientName="", typeName="")
    report_path = _write_json(tmp_path / "report.json", payload)
    client_path = _write_json(tmp_path / "client.json", make_client(name="Café Central").to_dict())
    assert main([str(report_path), "--client", str(client_path)]) == 0
    assert (tmp_path / "Relatorio_Café_Central_2023-10-15.pdf").exists()


def test_order_only_with_explicit_output(tmp_path: Path) -> None:
    report = make_report(type_key=ReportTypeKey.VISIT_COMMERCIAL, order=make_order())
    report_path = _write_json(tmp_path / "report.json", report.to_dict())
    out_pdf = tmp_path / "out" / "order.pdf"
    assert main([str(report_path), "--order-only", "--lang", "en", "--output", str(out_pdf)]) == 0
    assert out_pdf.read_bytes().startswith(b"%PDF")


def test_settings_file_is_used(tmp_path: Path) -> None:
    report_path = _write_json(tmp_path / "report.json", make_report().to_dict())
    settings_path = _write_json(tmp_path / "settings.json", {"name": "Outra Empresa"})
    out_pdf = tmp_path / "r.pdf"
    assert main([str(report_path), "--settings", str(settings_path), "--output", str(out_pdf)]) == 0
    assert out_pdf.exists()


def test_missing_input_file(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    assert main([str(tmp_path / "absent.json")]) == 1
    assert "cannot read input" in capsys.readouterr().err


def test_invalid_json(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    report_path = tmp_path / "report.json"
    report_path.write_text("{not json", encoding="utf-8")
    assert main([str(report_path)]) == 1
    assert "invalid JSON" in capsys.readouterr().err


@pytest.mark.parametrize(
    "payload",
    [
        [1, 2, 3],
        {"id": "r1", "clientId": "c1"},
        {"id": "r1", "clientId": "c1", "auditorId": "u1", "typeKey": "made_up"},
    ],
)
def test_invalid_records(tmp_path: Path, capsys: pytest.CaptureFixture, payload: object) -> None:
    report_path = _write_json(tmp_path / "report.json", payload)
    assert main([str(report_path)]) == 1
    assert "invalid record" in capsys.readouterr().err


def test_render_failure_returns_error(
    tmp_path: Path, capsys: pytest.CaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    from auditpro.report import pdf_builder

    def _boom(document):
        raise RuntimeError("canvas exploded")

    monkeypatch.setattr(pdf_builder, "render_pdf_bytes", _boom)
    report_path = _write_json(tmp_path / "report.json", make_report().to_dict())
    assert main([str(report_path)]) == 1
    assert "PDF generation failed" in capsys.readouterr().err


def test_unwritable_output_returns_error(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    report_path = _write_json(tmp_path / "report.json", make_report().to_dict())
    # the parent of the output is a regular file
    out_pdf = report_path / "out.pdf"
    assert main([str(report_path), "--output", str(out_pdf)]) == 1
    assert "cannot write output" in capsys.readouterr().err
