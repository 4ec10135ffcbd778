from __future__ import annotations

import pytest
from builders import make_criteria

from auditpro.checklist import CriteriaChecklist, criteria_tally, init_from_template
from auditpro.domain_models import CriteriaStatus, ReportTypeKey
from auditpro.templates import REPORT_TEMPLATES, get_template, template_label


def test_every_report_type_has_a_template() -> None:
    assert set(REPORT_TEMPLATES) == set(ReportTypeKey)


@pytest.mark.parametrize(
    ("key", "count"),
    [
        (ReportTypeKey.VISIT_COMMERCIAL, 5),
        (ReportTypeKey.AUDIT_POOL, 16),
        (ReportTypeKey.AUDIT_HACCP, 6),
        (ReportTypeKey.MAINT_PREV, 5),
        (ReportTypeKey.SAFETY_CHECK, 5),
        (ReportTypeKey.PEST_CONTROL, 32),
        (ReportTypeKey.INTERVENTION_GENERAL, 0),
    ],
)
def test_template_default_criteria_counts(key: ReportTypeKey, count: int) -> None:
    assert len(get_template(key).default_criteria) == count


def test_only_commercial_visit_skips_signatures_and_has_order() -> None:
    for key, template in REPORT_TEMPLATES.items():
        commercial = key is ReportTypeKey.VISIT_COMMERCIAL
        assert template.requires_signatures is not commercial
        assert template.has_order_section is commercial


def test_unknown_template_key() -> None:
    with pytest.raises(ValueError):
        get_template("bogus")
    assert template_label("bogus") == "bogus"
    assert template_label("audit_haccp").startswith("3. Auditoria HACCP")


def test_init_from_template_assigns_positional_ids() -> None:
    items = init_from_template(get_template(ReportTypeKey.AUDIT_HACCP))
    assert [item.id for item in items] == [f"crit-{i}" for i in range(6)]
    assert all(item.status is CriteriaStatus.UNSET for item in items)
    assert all(item.notes == "" for item in items)
    assert items[0].label == "Higiene Pessoal dos Manipuladores"


def test_general_template_starts_empty() -> None:
    checklist = CriteriaChecklist.from_template(get_template("intervention_general"))
    assert len(checklist) == 0


def test_set_status_and_notes() -> None:
    checklist = CriteriaChecklist(make_criteria(3, CriteriaStatus.UNSET))
    assert checklist.set_status("crit-1", "fail") is True
    assert checklist.set_notes("crit-1", "Porta danificada") is True
    item = checklist.get("crit-1")
    assert item is not None
    assert item.status is CriteriaStatus.FAIL
    assert item.notes == "Porta danificada"
    assert checklist.tally() == {"pass": 0, "fail": 1, "na": 0, "unset": 2}


def test_status_can_be_cleared_back_to_unset() -> None:
    checklist = CriteriaChecklist(make_criteria(1))
    assert checklist.set_status("crit-0", None) is True
    item = checklist.get("crit-0")
    assert item is not None and item.status is CriteriaStatus.UNSET


def test_unknown_item_is_ignored() -> None:
    checklist = CriteriaChecklist(make_criteria(2))
    assert checklist.set_status("crit-9", "fail") is False
    assert checklist.tally()["pass"] == 2


def test_read_only_checklist_is_unchanged() -> None:
    checklist = CriteriaChecklist(make_criteria(2), read_only=True)
    assert checklist.set_status("crit-0", "fail") is False
    assert checklist.set_notes("crit-0", "x") is False
    item = checklist.get("crit-0")
    assert item is not None
    assert item.status is CriteriaStatus.PASS
    assert item.notes == ""


def test_items_are_copies() -> None:
    source = make_criteria(1)
    checklist = CriteriaChecklist(source)
    checklist.set_status("crit-0", "na")
    assert source[0].status is CriteriaStatus.PASS
    checklist.items[0].status = CriteriaStatus.FAIL
    item = checklist.get("crit-0")
    assert item is not None and item.status is CriteriaStatus.NA


def test_criteria_tally_counts_every_status() -> None:
    items = make_criteria(2) + make_criteria(1, CriteriaStatus.NA)
    assert criteria_tally(items) == {"pass": 2, "fail": 0, "na": 1, "unset": 0}
