"""
LineItem — one product in one order's cart.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

from orderkit.order._types import OptionSelection, Product

if TYPE_CHECKING:
    from orderkit.order._order import Order


class LineItem:
    """
    A product, a positive quantity and option selections.

    Note: Owned by exactly one Order at a time. Only the Order creates,
    re-quantifies and detaches line items; `order` is None once removed.
    """

    __slots__ = ("identifier", "product", "_quantity", "options", "made_for", "instructions", "_order")

    def __init__(
        self,
        order: Order,
        product: Product,
        quantity: int,
        options: list[OptionSelection] | None = None,
        *,
        identifier: str | None = None,
        made_for: str | None = None,
        instructions: str | None = None,
    ) -> None:
        self.identifier = identifier or uuid.uuid4().hex
        self.product = product
        self._quantity = quantity
        self.options: list[OptionSelection] = list(options or [])
        self.made_for = made_for
        self.instructions = instructions
        self._order: Order | None = order

    @property
    def order(self) -> Order | None:
        return self._order

    @property
    def quantity(self) -> int:
        return self._quantity

    def add_option(self, group_id: int | str, item_id: int | str) -> OptionSelection:
        selection = OptionSelection(group_id, item_id)
        if selection not in self.options:
            self.options.append(selection)
        return selection

    def remove_option(self, group_id: int | str, item_id: int | str) -> None:
        selection = OptionSelection(group_id, item_id)
        if selection in self.options:
            self.options.remove(selection)

    def format(self) -> dict[str, Any]:
        """Wire payload, options grouped by option group in selection order."""
        groups: dict[int | str, list[dict[str, Any]]] = {}
        for selection in self.options:
            groups.setdefault(selection.group_id, []).append({"id": selection.item_id})
        return {
            "id": self.product.product_id,
            "quantity": self._quantity,
            "made_for": self.made_for,
            "instructions": self.instructions,
            "option_groups": [
                {"id": group_id, "option_items": items} for group_id, items in groups.items()
            ],
        }

    def __repr__(self) -> str:
        return f"LineItem({self.product.product_id!r}, quantity={self._quantity}, id={self.identifier[:8]})"


__all__ = ("LineItem",)
