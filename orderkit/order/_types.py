"""
Order types — products, option selections and the reference/draft variants.

Customer, address and credit card each come in two mutually exclusive shapes:

    Reference — already exists remotely, only its id is held
    Draft     — full fields, pending remote validation/creation

Shapes are never merged: setting one replaces the other.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar
from collections.abc import Mapping

# ═══════════════════════════════════════════════════════════════════════════════
# Snapshot Tags
# ═══════════════════════════════════════════════════════════════════════════════

KIND = "kind"
DATA = "data"
REFERENCE = "reference"
DRAFT = "draft"


# ═══════════════════════════════════════════════════════════════════════════════
# Service Type
# ═══════════════════════════════════════════════════════════════════════════════

class ServiceType(Enum):
    PICKUP = "pickup"
    DELIVERY = "delivery"


# ═══════════════════════════════════════════════════════════════════════════════
# Menu
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class Product:
    """
    Product reference taken from a menu record.

    `data` keeps the full record as the menu returned it.
    """

    product_id: int | str
    name: str | None = None
    price: str | float | int | None = None
    data: Mapping[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> Product:
        """Build from a menu record; raises ValueError without an id."""
        product_id = data.get("product_id", data.get("id"))
        if product_id is None or isinstance(product_id, bool):
            raise ValueError("Product record has no id")
        return cls(
            product_id=product_id,
            name=data.get("name"),
            price=data.get("price"),
            data=dict(data),
        )

    def to_dict(self) -> dict[str, Any]:
        return {**self.data, "product_id": self.product_id, "name": self.name, "price": self.price}


@dataclass(frozen=True, slots=True)
class OptionSelection:
    """One chosen option item inside an option group."""

    group_id: int | str
    item_id: int | str


# ═══════════════════════════════════════════════════════════════════════════════
# Reference / Draft Variants
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class CustomerRef:
    ID_KEY: ClassVar[str] = "customer_id"
    customer_id: int | str

    def to_dict(self) -> dict[str, Any]:
        return {"customer_id": self.customer_id}


@dataclass(frozen=True, slots=True)
class CustomerDraft:
    """Unvalidated customer: first_name, last_name, email, password."""

    fields: dict[str, Any] = field(repr=False)

    def to_dict(self) -> dict[str, Any]:
        return dict(self.fields)


@dataclass(frozen=True, slots=True)
class AddressRef:
    ID_KEY: ClassVar[str] = "customer_address_id"
    customer_address_id: int | str

    def to_dict(self) -> dict[str, Any]:
        return {"customer_address_id": self.customer_address_id}


@dataclass(frozen=True, slots=True)
class AddressDraft:
    """Address as given by the caller, stored unchanged once valid."""

    fields: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return dict(self.fields)


@dataclass(frozen=True, slots=True)
class CardRef:
    ID_KEY: ClassVar[str] = "customer_card_id"
    customer_card_id: int | str

    def to_dict(self) -> dict[str, Any]:
        return {"customer_card_id": self.customer_card_id}


@dataclass(frozen=True, slots=True)
class CardDraft:
    """
    Full payment instrument, not yet tokenized remotely.

    May already carry customer_card_id once saved; the sanitizer then
    persists only that id.
    """

    fields: dict[str, Any] = field(repr=False)

    @property
    def customer_card_id(self) -> int | str | None:
        return self.fields.get("customer_card_id")

    def to_dict(self) -> dict[str, Any]:
        return dict(self.fields)


type Customer = CustomerRef | CustomerDraft
type Address = AddressRef | AddressDraft
type CreditCard = CardRef | CardDraft
type Variant = Customer | Address | CreditCard


# ═══════════════════════════════════════════════════════════════════════════════
# Parsing
# ═══════════════════════════════════════════════════════════════════════════════

def customer_from(data: Mapping[str, Any]) -> Customer:
    """customer_id present → reference (other keys dropped), else draft."""
    if data.get("customer_id") is not None:
        return CustomerRef(data["customer_id"])
    return CustomerDraft(dict(data))


def address_from(data: Mapping[str, Any]) -> Address:
    """customer_address_id present → reference (other keys dropped), else draft."""
    if data.get("customer_address_id") is not None:
        return AddressRef(data["customer_address_id"])
    return AddressDraft(dict(data))


def card_from(data: Mapping[str, Any]) -> CreditCard:
    """Only customer_card_id → reference; anything more is a full instrument."""
    if set(data) == {"customer_card_id"} and data["customer_card_id"] is not None:
        return CardRef(data["customer_card_id"])
    return CardDraft(dict(data))


# ═══════════════════════════════════════════════════════════════════════════════
# Snapshot Conversion
# ═══════════════════════════════════════════════════════════════════════════════

def variant_to_graph(value: Variant | None) -> dict[str, Any] | None:
    if value is None:
        return None
    kind = DRAFT if isinstance(value, (CustomerDraft, AddressDraft, CardDraft)) else REFERENCE
    return {KIND: kind, DATA: value.to_dict()}


def _from_graph[R, D](
    graph: Mapping[str, Any] | None,
    ref_cls: type[R],
    draft_cls: type[D],
) -> R | D | None:
    if graph is None:
        return None
    data = graph[DATA]
    match graph[KIND]:
        case "reference":
            return ref_cls(data[ref_cls.ID_KEY])  # type: ignore[attr-defined,call-arg]
        case "draft":
            return draft_cls(dict(data))  # type: ignore[call-arg]
        case other:
            raise ValueError(f"Unknown variant kind: {other!r}")


def customer_from_graph(graph: Mapping[str, Any] | None) -> Customer | None:
    return _from_graph(graph, CustomerRef, CustomerDraft)


def address_from_graph(graph: Mapping[str, Any] | None) -> Address | None:
    return _from_graph(graph, AddressRef, AddressDraft)


def card_from_graph(graph: Mapping[str, Any] | None) -> CreditCard | None:
    return _from_graph(graph, CardRef, CardDraft)


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class LineItemError:
    code: str
    message: str


class LineItemErrors:
    @staticmethod
    def invalid_product(msg: str) -> LineItemError:
        return LineItemError("INVALID_PRODUCT", msg)

    @staticmethod
    def invalid_quantity(quantity: object) -> LineItemError:
        return LineItemError("INVALID_QUANTITY", f"Quantity must be a positive integer, got {quantity!r}")

    @staticmethod
    def not_in_cart() -> LineItemError:
        return LineItemError("NOT_IN_CART", "Line item does not belong to this order")

    @staticmethod
    def unavailable(msg: str) -> LineItemError:
        return LineItemError("UNAVAILABLE", msg)


__all__ = (
    "KIND",
    "DATA",
    "REFERENCE",
    "DRAFT",
    "ServiceType",
    "Product",
    "OptionSelection",
    "CustomerRef",
    "CustomerDraft",
    "AddressRef",
    "AddressDraft",
    "CardRef",
    "CardDraft",
    "Customer",
    "Address",
    "CreditCard",
    "Variant",
    "customer_from",
    "address_from",
    "card_from",
    "variant_to_graph",
    "customer_from_graph",
    "address_from_graph",
    "card_from_graph",
    "LineItemError",
    "LineItemErrors",
)
