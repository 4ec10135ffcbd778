"""Compose the "send by email" action for a report.

No mail is sent from here: the intent carries the recipient, subject, body
and a ready ``mailto:`` URL, plus the PDF the user attaches manually.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from .domain_models import Client, CompanySettings, Report
from .report_i18n import DEFAULT_LANG, tr

if TYPE_CHECKING:
    from .orchestrator import ExportArtifact


@dataclass(slots=True, frozen=True)
class EmailIntent:
    to: str
    subject: str
    body: str
    attachment: ExportArtifact | None = None

    @property
    def mailto_url(self) -> str:
        return (
            f"mailto:{self.to}"
            f"?subject={quote(self.subject, safe='')}"
            f"&body={quote(self.body, safe='')}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "to": self.to,
            "subject": self.subject,
            "body": self.body,
            "mailtoUrl": self.mailto_url,
            "attachmentFilename": self.attachment.filename if self.attachment else None,
        }


def compose_email(
    report: Report,
    client: Client | None,
    company: CompanySettings,
    artifact: ExportArtifact | None = None,
    *,
    lang: str = DEFAULT_LANG,
) -> EmailIntent:
    client_name = client.name if client is not None else report.client_name
    return EmailIntent(
        to=client.email if client is not None else "",
        subject=tr(lang, "EMAIL_SUBJECT", client=client_name),
        body=tr(lang, "EMAIL_BODY", date=report.date, company=company.name),
        attachment=artifact,
    )
