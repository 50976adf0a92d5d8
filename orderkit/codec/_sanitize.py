"""
Sanitizer — strips sensitive data from an order snapshot before persistence.

Only a card reference (customer_card_id) and no password may reach storage.
The live Order is never touched: sanitize() works on a deep copy of the
snapshot, so the in-memory session keeps full card data and the draft
password (e.g. to retry a remote card save).
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from orderkit.order._types import DATA, DRAFT, KIND, REFERENCE


@dataclass(frozen=True, slots=True)
class Removed:
    """Values stripped from the durable copy."""

    credit_card: dict[str, Any] | None = field(default=None, repr=False)
    password: str | None = field(default=None, repr=False)

    def fields(self) -> tuple[str, ...]:
        """Names of stripped fields. Safe to log, values are not included."""
        names: list[str] = []
        if self.credit_card is not None:
            names.append("credit_card")
        if self.password is not None:
            names.append("customer.password")
        return tuple(names)


@dataclass(frozen=True, slots=True)
class Sanitized:
    sanitized: dict[str, Any]
    removed: Removed


def sanitize(snapshot: dict[str, Any]) -> Sanitized:
    """
    Produce a storable copy of an order snapshot.

    - credit card draft → its reference if it has customer_card_id, else None
    - customer draft password → removed entirely
    """
    sanitized = copy.deepcopy(snapshot)
    removed_card: dict[str, Any] | None = None
    removed_password: str | None = None

    card = sanitized.get("credit_card")
    if card is not None and card.get(KIND) == DRAFT:
        removed_card = dict(card[DATA])
        card_id = removed_card.get("customer_card_id")
        if card_id:
            sanitized["credit_card"] = {KIND: REFERENCE, DATA: {"customer_card_id": card_id}}
        else:
            sanitized["credit_card"] = None

    customer = sanitized.get("customer")
    if customer is not None and customer.get(KIND) == DRAFT:
        password = customer[DATA].pop("password", None)
        if password is not None:
            removed_password = str(password)

    return Sanitized(
        sanitized=sanitized,
        removed=Removed(credit_card=removed_card, password=removed_password),
    )


__all__ = ("Removed", "Sanitized", "sanitize")
