"""
Resource collaborators — remote customer/address/menu clients.

The Order never computes validation rules itself: it hands drafts to these
and consumes the outcome. Implement the protocols against your API; the
presence-only RequiredFields is the default.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from kungfu import Result, Ok, Error

from orderkit._types import FieldErrors
from orderkit.order._types import AddressDraft, CustomerDraft, LineItemError

if TYPE_CHECKING:
    from orderkit.order._line_item import LineItem
    from orderkit.order._order import Order


# ═══════════════════════════════════════════════════════════════════════════════
# Protocols
# ═══════════════════════════════════════════════════════════════════════════════

class CustomerValidator(Protocol):
    async def validate(self, draft: CustomerDraft) -> Result[CustomerDraft, FieldErrors]:
        """Ok(draft) if valid, else field-keyed errors."""
        ...


class AddressValidator(Protocol):
    async def validate(self, draft: AddressDraft) -> Result[AddressDraft, FieldErrors]:
        """Ok(draft) if valid, else field-keyed errors."""
        ...


class MenuClient(Protocol):
    async def check_line_item(
        self,
        order: Order,
        line_item: LineItem,
        quantity: int,
    ) -> Result[None, LineItemError]:
        """Price/availability check for line_item at the given quantity."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# RequiredFields (presence-only default)
# ═══════════════════════════════════════════════════════════════════════════════

BLANK = "can't be blank"


@dataclass(frozen=True, slots=True)
class RequiredFields:
    """
    Rejects drafts with missing or blank fields.

    Example:
        RequiredFields(("first_name", "last_name", "email", "password"))
    """

    names: tuple[str, ...]

    async def validate[D: (CustomerDraft, AddressDraft)](self, draft: D) -> Result[D, FieldErrors]:
        errors: FieldErrors = {}
        for name in self.names:
            value = draft.fields.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                errors[name] = [BLANK]
        if errors:
            return Error(errors)
        return Ok(draft)


CUSTOMER_FIELDS = ("first_name", "last_name", "email", "password")
ADDRESS_FIELDS = ("street_address", "city", "state_code", "zip_code")


# ═══════════════════════════════════════════════════════════════════════════════
# Resources bundle
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class Resources:
    """Collaborators an Adapter hands to its orders. menu=None skips the check."""

    customers: CustomerValidator = field(default_factory=lambda: RequiredFields(CUSTOMER_FIELDS))
    addresses: AddressValidator = field(default_factory=lambda: RequiredFields(ADDRESS_FIELDS))
    menu: MenuClient | None = None


__all__ = (
    "CustomerValidator",
    "AddressValidator",
    "MenuClient",
    "RequiredFields",
    "CUSTOMER_FIELDS",
    "ADDRESS_FIELDS",
    "Resources",
)
