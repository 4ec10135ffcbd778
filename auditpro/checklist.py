"""Pass/fail/NA checklist attached to a report.

The checklist is seeded from a template's default labels and stays
mutable until the editor that owns it switches to read-only.  Items are
independent: any of them may stay unset when the report is finalized.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from copy import deepcopy

from .domain_models import AuditCriteriaItem, CriteriaStatus, parse_enum
from .templates import ReportTemplate

LOGGER = logging.getLogger(__name__)


def criteria_item_id(position: int) -> str:
    return f"crit-{position}"


def init_from_template(template: ReportTemplate) -> list[AuditCriteriaItem]:
    """One unset item per default label, ids assigned by position."""
    return [
        AuditCriteriaItem(id=criteria_item_id(idx), label=label)
        for idx, label in enumerate(template.default_criteria)
    ]


def criteria_tally(items: Iterable[AuditCriteriaItem]) -> dict[str, int]:
    counts = Counter(item.status for item in items)
    return {status.value: counts.get(status, 0) for status in CriteriaStatus}


class CriteriaChecklist:
    """Criteria grid for one report editor session."""

    def __init__(
        self,
        items: Iterable[AuditCriteriaItem] = (),
        *,
        read_only: bool = False,
    ) -> None:
        self._items: list[AuditCriteriaItem] = [deepcopy(item) for item in items]
        self.read_only = read_only

    @classmethod
    def from_template(cls, template: ReportTemplate) -> CriteriaChecklist:
        return cls(init_from_template(template))

    # -- queries --------------------------------------------------------------

    @property
    def items(self) -> list[AuditCriteriaItem]:
        return [deepcopy(item) for item in self._items]

    def __len__(self) -> int:
        return len(self._items)

    def get(self, item_id: str) -> AuditCriteriaItem | None:
        for item in self._items:
            if item.id == item_id:
                return deepcopy(item)
        return None

    def tally(self) -> dict[str, int]:
        return criteria_tally(self._items)

    # -- mutation -------------------------------------------------------------

    def _find(self, item_id: str) -> AuditCriteriaItem | None:
        if self.read_only:
            LOGGER.debug("Ignoring checklist change on %s: checklist is read-only", item_id)
            return None
        for item in self._items:
            if item.id == item_id:
                return item
        LOGGER.debug("Ignoring checklist change: unknown item %s", item_id)
        return None

    def set_status(self, item_id: str, status: CriteriaStatus | str | None) -> bool:
        """Set an item's evaluation; returns ``False`` when nothing changed."""
        item = self._find(item_id)
        if item is None:
            return False
        item.status = parse_enum(CriteriaStatus, status, CriteriaStatus.UNSET)
        return True

    def set_notes(self, item_id: str, text: str | None) -> bool:
        item = self._find(item_id)
        if item is None:
            return False
        item.notes = str(text or "")
        return True
