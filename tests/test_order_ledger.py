from __future__ import annotations

import pytest
from builders import make_mixed_discount_order, make_order

from auditpro.domain_models import Order, OrderItem, coerce_number
from auditpro.order_ledger import OrderLedger
from auditpro.report.pdf_helpers import format_money


def test_canonical_order_total_is_28() -> None:
    ledger = OrderLedger.from_order(make_order())
    assert ledger.total() == pytest.approx(28.0)
    assert format_money(ledger.total()) == "28.00€"


def test_mixed_discount_lines_total_28() -> None:
    ledger = OrderLedger.from_order(make_mixed_discount_order())
    assert [item.line_total for item in ledger.items] == pytest.approx([18.0, 5.0, 5.0])
    assert ledger.total() == pytest.approx(28.0)
    assert format_money(ledger.total()) == "28.00€"


def test_mixed_discount_order_entered_as_text() -> None:
    ledger = OrderLedger()
    for quantity, price, discount in (("2", "10,00", "10"), ("1", "5", ""), ("4", "2.5", "50")):
        item = ledger.add_item()
        assert item is not None
        ledger.update_item(item.id, "quantity", quantity)
        ledger.update_item(item.id, "unitPrice", price)
        ledger.update_item(item.id, "discount", discount)
    assert format_money(ledger.total()) == "28.00€"


def test_repeating_an_update_leaves_the_total_unchanged() -> None:
    ledger = OrderLedger.from_order(make_mixed_discount_order())
    ledger.update_item("item-3", "discount", "25")
    once = ledger.total()
    ledger.update_item("item-3", "discount", "25")
    assert ledger.total() == once
    assert once == pytest.approx(30.5)


def test_added_items_get_sequential_ids_and_defaults() -> None:
    ledger = OrderLedger()
    first = ledger.add_item()
    second = ledger.add_item()
    assert first is not None and second is not None
    assert (first.id, second.id) == ("item-1", "item-2")
    assert first.quantity == 1.0
    assert first.unit_price == 0.0
    assert first.discount_percent == 0.0


def test_new_ids_skip_existing_ones() -> None:
    ledger = OrderLedger([OrderItem(id="item-2"), OrderItem(id="item-3")])
    item = ledger.add_item()
    assert item is not None
    assert item.id not in {"item-2", "item-3"}


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("abc", 0.0), ("", 0.0), ("12,5", 12.5), (" 3 ", 3.0), (None, 0.0), ("nan", 0.0)],
)
def test_numeric_input_is_forgiving(raw: object, expected: float) -> None:
    ledger = OrderLedger()
    item = ledger.add_item()
    assert item is not None
    updated = ledger.update_item(item.id, "unitPrice", raw)
    assert updated is not None
    assert updated.unit_price == expected


def test_discount_above_100_gives_negative_line_total() -> None:
    ledger = OrderLedger()
    item = ledger.add_item()
    assert item is not None
    ledger.update_item(item.id, "unitPrice", "10")
    updated = ledger.update_item(item.id, "discount", 150)
    assert updated is not None
    assert updated.line_total == pytest.approx(-5.0)
    assert ledger.total() == pytest.approx(-5.0)


def test_total_is_recomputed_after_every_change() -> None:
    ledger = OrderLedger.from_order(make_order())
    ledger.update_item("item-1", "quantity", "3")
    assert ledger.total() == pytest.approx(38.0)
    assert ledger.remove_item("item-2") is True
    assert ledger.total() == pytest.approx(30.0)


def test_unknown_field_raises() -> None:
    ledger = OrderLedger.from_order(make_order())
    with pytest.raises(ValueError, match="Unknown order item field"):
        ledger.update_item("item-1", "colour", "red")


def test_unknown_item_is_ignored() -> None:
    ledger = OrderLedger.from_order(make_order())
    assert ledger.update_item("missing", "quantity", 5) is None
    assert ledger.total() == pytest.approx(28.0)


def test_read_only_ledger_rejects_every_change() -> None:
    ledger = OrderLedger.from_order(make_order(), read_only=True)
    assert ledger.add_item() is None
    assert ledger.update_item("item-1", "quantity", 9) is None
    assert ledger.remove_item("item-1") is False
    ledger.set_delivery_conditions("Hoje")
    ledger.set_observations("Nada")
    assert len(ledger) == 2
    assert ledger.delivery_conditions == "Entrega em 48h"
    assert ledger.observations == "Pagamento a 30 dias"


def test_to_order_is_none_without_lines() -> None:
    ledger = OrderLedger(delivery_conditions="Entrega em 48h")
    assert ledger.to_order() is None


def test_ledger_does_not_alias_source_order() -> None:
    order = make_order()
    ledger = OrderLedger.from_order(order)
    ledger.update_item("item-1", "productName", "Outro")
    assert order.items[0].product_name == "Cloro 5kg"
    snapshot = ledger.to_order()
    assert snapshot is not None
    snapshot.items[0].product_name = "Mudado"
    assert ledger.items[0].product_name == "Outro"


def test_stored_total_value_is_ignored_on_load() -> None:
    payload = make_order().to_dict()
    payload["totalValue"] = 999.0
    order = Order.from_dict(payload)
    assert order is not None
    assert order.total_value == pytest.approx(28.0)


def test_coerce_number_accepts_plain_numbers() -> None:
    assert coerce_number(4) == 4.0
    assert coerce_number(2.5) == 2.5
    assert coerce_number(float("inf")) == 0.0
    assert coerce_number(["1"]) == 0.0
