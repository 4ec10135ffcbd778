"""Line-item ledger for the optional sales order on a report.

Input is forgiving: numeric fields accept free text and anything that does
not parse becomes 0.  Discount and quantity are not clamped, so a discount
above 100 % yields a negative line total instead of an error.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterable
from copy import deepcopy

from .domain_models import Order, OrderItem, coerce_number

LOGGER = logging.getLogger(__name__)

_FIELD_ALIASES: dict[str, str] = {
    "productName": "product_name",
    "product_name": "product_name",
    "quantity": "quantity",
    "unitPrice": "unit_price",
    "unit_price": "unit_price",
    "discount": "discount_percent",
    "discountPercent": "discount_percent",
    "discount_percent": "discount_percent",
}
_NUMERIC_FIELDS = frozenset({"quantity", "unit_price", "discount_percent"})


class OrderLedger:
    """Editable order lines; totals are always derived from the lines."""

    def __init__(
        self,
        items: Iterable[OrderItem] = (),
        *,
        delivery_conditions: str = "",
        observations: str = "",
        read_only: bool = False,
    ) -> None:
        self._items: list[OrderItem] = [deepcopy(item) for item in items]
        self.delivery_conditions = delivery_conditions
        self.observations = observations
        self.read_only = read_only
        self._ids = itertools.count(len(self._items) + 1)

    @classmethod
    def from_order(cls, order: Order | None, *, read_only: bool = False) -> OrderLedger:
        if order is None:
            return cls(read_only=read_only)
        return cls(
            order.items,
            delivery_conditions=order.delivery_conditions,
            observations=order.observations,
            read_only=read_only,
        )

    # -- queries --------------------------------------------------------------

    @property
    def items(self) -> list[OrderItem]:
        return [deepcopy(item) for item in self._items]

    def __len__(self) -> int:
        return len(self._items)

    def total(self) -> float:
        return sum(item.line_total for item in self._items)

    def to_order(self) -> Order | None:
        """Snapshot as an :class:`Order`; ``None`` while no line exists."""
        if not self._items:
            return None
        return Order(
            items=self.items,
            delivery_conditions=self.delivery_conditions,
            observations=self.observations,
        )

    # -- mutation -------------------------------------------------------------

    def _next_id(self) -> str:
        existing = {item.id for item in self._items}
        while True:
            candidate = f"item-{next(self._ids)}"
            if candidate not in existing:
                return candidate

    def add_item(self) -> OrderItem | None:
        if self.read_only:
            return None
        item = OrderItem(id=self._next_id())
        self._items.append(item)
        return deepcopy(item)

    def update_item(self, item_id: str, field: str, raw_value: object) -> OrderItem | None:
        """Set one field of a line from raw user input.

        Unknown fields raise ``ValueError``; unknown ids and read-only
        ledgers leave everything unchanged and return ``None``.
        """
        attr = _FIELD_ALIASES.get(field)
        if attr is None:
            raise ValueError(f"Unknown order item field: {field!r}")
        if self.read_only:
            return None
        for item in self._items:
            if item.id == item_id:
                if attr in _NUMERIC_FIELDS:
                    setattr(item, attr, coerce_number(raw_value))
                else:
                    item.product_name = "" if raw_value is None else str(raw_value)
                return deepcopy(item)
        LOGGER.debug("Ignoring update for unknown order item %s", item_id)
        return None

    def remove_item(self, item_id: str) -> bool:
        if self.read_only:
            return False
        before = len(self._items)
        self._items = [item for item in self._items if item.id != item_id]
        return len(self._items) != before

    def set_delivery_conditions(self, text: str | None) -> None:
        if not self.read_only:
            self.delivery_conditions = str(text or "")

    def set_observations(self, text: str | None) -> None:
        if not self.read_only:
            self.observations = str(text or "")
