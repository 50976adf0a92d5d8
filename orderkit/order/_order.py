"""
Order — the cart/customer/address/payment/fulfillment aggregate.

Local cart edits are synchronous. Anything that may need the remote side
(menu check, customer/address validation, API calls) returns a
LazyCoroResult; await it to get Ok(value) or Error(err).

Note: No internal serialization. Concurrent set_customer / set_address /
cart edits against one Order race and the last resolution wins; chain
them if order matters.
"""

from __future__ import annotations

import json
import uuid
from collections.abc import Mapping
from datetime import datetime
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

import structlog
from kungfu import Result, Ok, Error, LazyCoroResult

from orderkit._types import FieldErrors
from orderkit.order._line_item import LineItem
from orderkit.order._types import (
    AddressDraft,
    AddressRef,
    CardDraft,
    CardRef,
    CustomerDraft,
    CustomerRef,
    LineItemError,
    LineItemErrors,
    OptionSelection,
    Product,
    ServiceType,
    address_from,
    address_from_graph,
    card_from,
    card_from_graph,
    customer_from,
    customer_from_graph,
    variant_to_graph,
)

if TYPE_CHECKING:
    from orderkit.adapter._adapter import Adapter
    from orderkit.adapter._errors import RequestError
    from orderkit.order._types import Address, CreditCard, Customer

logger = structlog.get_logger(__name__)

ASAP = "asap"


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════

class Cart:
    """Ordered line items; insertion order is display order."""

    __slots__ = ("line_items",)

    def __init__(self) -> None:
        self.line_items: list[LineItem] = []

    def index_of(self, line_item: LineItem) -> int | None:
        """Position by identity, None if not a member."""
        for i, item in enumerate(self.line_items):
            if item is line_item:
                return i
        return None

    def __contains__(self, line_item: object) -> bool:
        return any(item is line_item for item in self.line_items)

    def __len__(self) -> int:
        return len(self.line_items)

    def __iter__(self):
        return iter(self.line_items)


def _valid_quantity(quantity: object) -> bool:
    return isinstance(quantity, int) and not isinstance(quantity, bool) and quantity >= 1


def _json_options(options: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of misc_options; raises ValueError unless str-keyed plain JSON."""
    copied = dict(options)
    if not all(isinstance(key, str) for key in copied):
        raise ValueError("misc_options keys must be str")
    try:
        json.dumps(copied, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise ValueError(f"misc_options must be JSON-serializable: {e}") from e
    return copied


# ═══════════════════════════════════════════════════════════════════════════════
# Order
# ═══════════════════════════════════════════════════════════════════════════════

class Order:
    """
    In-memory order aggregate.

    Example:
        order = Order(adapter, location_id=19, service_type="pickup")

        match await order.add_line_item(product, 2):
            case Ok(line_item):
                ...
            case Error(e):
                print(e.message)

        match await order.set_customer({"customer_id": 42}):
            case Ok(order):
                await adapter.persist_current_order(order)
    """

    def __init__(
        self,
        adapter: Adapter,
        location_id: int | str,
        service_type: ServiceType | str,
        payment_type: str | None = None,
        misc_options: Mapping[str, Any] | None = None,
    ) -> None:
        self.adapter = adapter
        self.identifier = uuid.uuid4().hex
        self._location_id = location_id
        self._service_type = ServiceType(service_type)
        self._misc_options: Mapping[str, Any] = MappingProxyType(_json_options(misc_options or {}))

        self.cart = Cart()
        self._customer: Customer | None = None
        self._address: Address | None = None
        self._credit_card: CreditCard | None = None
        self.payment_type = payment_type
        self.requested_at: str = ASAP
        self.wants_future_order = False
        self.promo_code: str | None = None

    @classmethod
    def restore(cls, adapter: Adapter, graph: object) -> Order:
        """
        Rebuild an order from a decoded snapshot. Restore only.

        Raises ValueError, KeyError or TypeError when the graph does not have
        the shape snapshot() produces.
        """
        if not isinstance(graph, Mapping):
            raise ValueError("Stored order is not an object")

        order = cls(
            adapter,
            graph["location_id"],
            graph["service_type"],
            graph.get("payment_type"),
            graph.get("misc_options"),
        )
        if graph.get("identifier"):
            order.identifier = str(graph["identifier"])
        order.requested_at = graph.get("requested_at") or ASAP
        order.wants_future_order = bool(graph.get("wants_future_order"))
        order.promo_code = graph.get("promo_code")
        order._customer = customer_from_graph(graph.get("customer"))
        order._address = address_from_graph(graph.get("address"))
        order._credit_card = card_from_graph(graph.get("credit_card"))
        return order.rehydrate_cart(graph.get("cart") or {})

    # ── Immutable context ────────────────────────────────────────────────────

    @property
    def location_id(self) -> int | str:
        return self._location_id

    @property
    def service_type(self) -> ServiceType:
        return self._service_type

    @property
    def misc_options(self) -> Mapping[str, Any]:
        return self._misc_options

    # ── Attached records (changed only through set_* / clear_*) ──────────────

    @property
    def customer(self) -> Customer | None:
        return self._customer

    @property
    def address(self) -> Address | None:
        return self._address

    @property
    def credit_card(self) -> CreditCard | None:
        return self._credit_card

    # ═══════════════════════════════════════════════════════════════════════════
    # Cart
    # ═══════════════════════════════════════════════════════════════════════════

    def add_line_item(
        self,
        product: Product | Mapping[str, Any],
        quantity: int = 1,
        options: list[OptionSelection] | None = None,
    ) -> LazyCoroResult[LineItem, LineItemError]:
        """Validate, check with the menu, then append a new LineItem."""

        async def impl() -> Result[LineItem, LineItemError]:
            if isinstance(product, Product):
                resolved = product
            else:
                try:
                    resolved = Product.from_data(product)
                except (TypeError, ValueError, AttributeError) as e:
                    return Error(LineItemErrors.invalid_product(str(e)))

            if not _valid_quantity(quantity):
                return Error(LineItemErrors.invalid_quantity(quantity))

            line_item = LineItem(self, resolved, quantity, options)
            match await self._check(line_item, quantity):
                case Error(e):
                    line_item._order = None
                    return Error(e)
                case _:
                    pass

            self.cart.line_items.append(line_item)
            logger.debug(
                "Line item added",
                order_id=self.identifier,
                product_id=resolved.product_id,
                quantity=quantity,
            )
            return Ok(line_item)

        return LazyCoroResult(impl)

    def remove_line_item(self, line_item: LineItem) -> None:
        """Remove by identity. No-op if the item is not in this cart."""
        index = self.cart.index_of(line_item)
        if index is None:
            return
        del self.cart.line_items[index]
        line_item._order = None

    def get_line_item_quantity(self, line_item: LineItem) -> int:
        if line_item not in self.cart:
            raise ValueError("Line item does not belong to this order")
        return line_item.quantity

    def set_line_item_quantity(
        self,
        line_item: LineItem,
        quantity: int,
    ) -> LazyCoroResult[int, LineItemError]:
        """Re-check with the menu; the prior quantity stays on failure."""

        async def impl() -> Result[int, LineItemError]:
            if not _valid_quantity(quantity):
                return Error(LineItemErrors.invalid_quantity(quantity))
            if line_item not in self.cart:
                return Error(LineItemErrors.not_in_cart())

            match await self._check(line_item, quantity):
                case Error(e):
                    return Error(e)
                case _:
                    pass

            line_item._quantity = quantity
            return Ok(quantity)

        return LazyCoroResult(impl)

    async def _check(self, line_item: LineItem, quantity: int) -> Result[None, LineItemError]:
        menu = self.adapter.resources.menu
        if menu is None:
            return Ok(None)
        return await menu.check_line_item(self, line_item, quantity)

    def rehydrate_cart(self, serialized_cart: Mapping[str, Any]) -> Order:
        """
        Rebuild line items from a snapshot cart. Restore only.

        Back-references in the snapshot are ignored: every LineItem is new
        and owned solely by this order.
        """
        if not isinstance(serialized_cart, Mapping):
            raise ValueError("Cart is not an object")
        items = serialized_cart.get("line_items", [])
        if not isinstance(items, list):
            raise ValueError("Cart line_items is not a list")

        line_items: list[LineItem] = []
        for item in items:
            if not isinstance(item, Mapping) or not isinstance(item.get("product"), Mapping):
                raise ValueError("Malformed line item")
            quantity = int(item["quantity"])
            if not _valid_quantity(quantity):
                raise ValueError(f"Stored quantity is not positive: {quantity}")
            options = item.get("options", [])
            if not isinstance(options, list):
                raise ValueError("Line item options is not a list")
            line_items.append(
                LineItem(
                    self,
                    Product.from_data(item["product"]),
                    quantity,
                    [OptionSelection(o["group_id"], o["item_id"]) for o in options],
                    identifier=item.get("identifier"),
                    made_for=item.get("made_for"),
                    instructions=item.get("instructions"),
                )
            )
        self.cart.line_items = line_items
        return self

    # ═══════════════════════════════════════════════════════════════════════════
    # Customer / Address
    # ═══════════════════════════════════════════════════════════════════════════

    def set_customer(
        self,
        data: Mapping[str, Any] | CustomerRef | CustomerDraft,
    ) -> LazyCoroResult[Order, FieldErrors]:
        """
        Attach a customer.

        A reference ({"customer_id": ...}) is trusted as is. A draft goes
        through the customer validator; field-keyed errors on failure.
        """
        customer = data if isinstance(data, (CustomerRef, CustomerDraft)) else customer_from(data)

        async def impl() -> Result[Order, FieldErrors]:
            match customer:
                case CustomerRef():
                    self._customer = customer
                    return Ok(self)
                case CustomerDraft():
                    match await self.adapter.resources.customers.validate(customer):
                        case Ok(valid):
                            self._customer = valid
                            return Ok(self)
                        case Error(errors):
                            return Error(errors)

        return LazyCoroResult(impl)

    def set_address(
        self,
        data: Mapping[str, Any] | AddressRef | AddressDraft,
    ) -> LazyCoroResult[Order, FieldErrors]:
        """Attach an address; same reference/draft rules as set_customer."""
        address = data if isinstance(data, (AddressRef, AddressDraft)) else address_from(data)

        async def impl() -> Result[Order, FieldErrors]:
            match address:
                case AddressRef():
                    self._address = address
                    return Ok(self)
                case AddressDraft():
                    match await self.adapter.resources.addresses.validate(address):
                        case Ok(valid):
                            self._address = valid
                            return Ok(self)
                        case Error(errors):
                            return Error(errors)

        return LazyCoroResult(impl)

    def clear_customer(self) -> Order:
        self._customer = None
        return self

    def clear_address(self) -> Order:
        self._address = None
        return self

    # ═══════════════════════════════════════════════════════════════════════════
    # Payment / Fulfillment
    # ═══════════════════════════════════════════════════════════════════════════

    def set_payment_method(
        self,
        payment_type: str,
        card: Mapping[str, Any] | CardRef | CardDraft | None = None,
    ) -> Order:
        self.payment_type = payment_type
        if card is None or isinstance(card, (CardRef, CardDraft)):
            self._credit_card = card
        else:
            self._credit_card = card_from(card)
        return self

    def set_requested_at(self, when: datetime | str, wants_future_order: bool = False) -> Order:
        """`when` is a datetime, an ISO-8601 string or "asap"."""
        if isinstance(when, datetime):
            self.requested_at = when.isoformat()
        elif when == ASAP:
            self.requested_at = ASAP
        else:
            self.requested_at = datetime.fromisoformat(when).isoformat()
        self.wants_future_order = wants_future_order
        return self

    def set_promo_code(self, code: str | None) -> Order:
        self.promo_code = code
        return self

    # ═══════════════════════════════════════════════════════════════════════════
    # Representations
    # ═══════════════════════════════════════════════════════════════════════════

    def snapshot(self) -> dict[str, Any]:
        """
        Plain graph of this order for persistence.

        Line items point back at the root, so the graph is cyclic and must go
        through the arena codec.
        """
        root: dict[str, Any] = {
            "identifier": self.identifier,
            "location_id": self._location_id,
            "service_type": self._service_type.value,
            "misc_options": dict(self._misc_options),
            "payment_type": self.payment_type,
            "requested_at": self.requested_at,
            "wants_future_order": self.wants_future_order,
            "promo_code": self.promo_code,
            "customer": variant_to_graph(self._customer),
            "address": variant_to_graph(self._address),
            "credit_card": variant_to_graph(self._credit_card),
        }
        root["cart"] = {
            "line_items": [
                {
                    "identifier": item.identifier,
                    "product": item.product.to_dict(),
                    "quantity": item.quantity,
                    "options": [{"group_id": o.group_id, "item_id": o.item_id} for o in item.options],
                    "made_for": item.made_for,
                    "instructions": item.instructions,
                    "order": root,
                }
                for item in self.cart.line_items
            ]
        }
        return root

    def format(self) -> dict[str, Any]:
        """Wire payload for orders/validate and orders/create."""
        payload: dict[str, Any] = {
            **self._misc_options,
            "location_id": self._location_id,
            "service_type": self._service_type.value,
            "requested_at": self.requested_at,
            "wants_future_order": self.wants_future_order,
            "payment_type": self.payment_type,
            "promo_code": self.promo_code,
            "cart": [item.format() for item in self.cart.line_items],
        }
        if self._customer is not None:
            payload["customer"] = self._customer.to_dict()
        if self._address is not None:
            payload["address"] = self._address.to_dict()
        if self._credit_card is not None:
            payload["credit_card"] = self._credit_card.to_dict()
        return payload

    # ═══════════════════════════════════════════════════════════════════════════
    # Checkout
    # ═══════════════════════════════════════════════════════════════════════════

    def validate(self) -> LazyCoroResult[Any, RequestError]:
        """Ask the API to validate the order as it stands."""
        return self.adapter.request("POST", "orders/validate", self.format())

    def submit(self) -> LazyCoroResult[Any, RequestError]:
        """
        Place the order.

        On success the order is flushed from the adapter if it is current.
        A storage failure during that flush is logged only: the remote order
        already exists.
        """

        async def impl() -> Result[Any, RequestError]:
            match await self.adapter.request("POST", "orders/create", self.format()):
                case Ok(body):
                    logger.info("Order submitted", order_id=self.identifier)
                    if self.adapter.current_order is self:
                        match await self.adapter.flush_current_order():
                            case Error(e):
                                logger.warning(
                                    "Failed to flush submitted order",
                                    order_id=self.identifier,
                                    error=e.message,
                                )
                            case _:
                                pass
                    return Ok(body)
                case Error(e):
                    return Error(e)

        return LazyCoroResult(impl)

    def __repr__(self) -> str:
        return (
            f"Order(id={self.identifier[:8]}, location={self._location_id!r}, "
            f"service={self._service_type.value}, items={len(self.cart)})"
        )


__all__ = ("Cart", "Order", "ASAP")
