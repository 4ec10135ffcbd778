from __future__ import annotations

from urllib.parse import parse_qs, urlsplit

from builders import make_client, make_company, make_report

from auditpro.email_intent import compose_email
from auditpro.orchestrator import ExportArtifact


def test_email_goes_to_client_with_localised_text() -> None:
    intent = compose_email(make_report(), make_client(), make_company())
    assert intent.to == "manuel@marisco.pt"
    assert intent.subject == "Relatório de Intervenção - Restaurante O Marisco"
    assert "2023-10-15" in intent.body
    assert intent.body.endswith("AuditPro Solutions, Lda")


def test_english_email() -> None:
    intent = compose_email(make_report(), make_client(), make_company(), lang="en")
    assert intent.subject == "Intervention Report - Restaurante O Marisco"


def test_missing_client_has_no_recipient() -> None:
    intent = compose_email(make_report(client_name="Antigo"), None, make_company())
    assert intent.to == ""
    assert intent.subject.endswith("Antigo")


def test_mailto_url_is_fully_encoded() -> None:
    intent = compose_email(make_report(), make_client(), make_company())
    parts = urlsplit(intent.mailto_url)
    assert parts.scheme == "mailto"
    assert parts.path == "manuel@marisco.pt"
    query = parse_qs(parts.query)
    assert query["subject"] == [intent.subject]
    assert query["body"] == [intent.body]


def test_to_dict_names_attachment() -> None:
    artifact = ExportArtifact(filename="Relatorio_X_2023-10-15.pdf", content=b"%PDF")
    payload = compose_email(make_report(), make_client(), make_company(), artifact).to_dict()
    assert payload["attachmentFilename"] == "Relatorio_X_2023-10-15.pdf"
    assert payload["mailtoUrl"].startswith("mailto:manuel@marisco.pt?subject=")
