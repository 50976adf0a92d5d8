"""
Order — cart, customer, address, payment and fulfillment state.

    from orderkit import order as O

    o = O.Order(adapter, location_id=19, service_type=O.ServiceType.PICKUP)
    match await o.add_line_item(product, 2):
        case Ok(line_item):
            o.remove_line_item(line_item)
    await o.set_customer({"customer_id": 42})

Reference vs draft:

    {"customer_id": 42}                   → CustomerRef, attached without validation
    {"first_name": ..., "email": ...}     → CustomerDraft, validated by Resources.customers
"""

from orderkit.order._types import (
    ServiceType,
    Product,
    OptionSelection,
    CustomerRef,
    CustomerDraft,
    AddressRef,
    AddressDraft,
    CardRef,
    CardDraft,
    Customer,
    Address,
    CreditCard,
    customer_from,
    address_from,
    card_from,
    customer_from_graph,
    address_from_graph,
    card_from_graph,
    LineItemError,
    LineItemErrors,
)
from orderkit.order._line_item import LineItem
from orderkit.order._resources import (
    CustomerValidator,
    AddressValidator,
    MenuClient,
    RequiredFields,
    CUSTOMER_FIELDS,
    ADDRESS_FIELDS,
    Resources,
)
from orderkit.order._order import Cart, Order, ASAP

__all__ = (
    # Types
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
    "customer_from",
    "address_from",
    "card_from",
    "customer_from_graph",
    "address_from_graph",
    "card_from_graph",
    "LineItemError",
    "LineItemErrors",
    # Aggregate
    "LineItem",
    "Cart",
    "Order",
    "ASAP",
    # Collaborators
    "CustomerValidator",
    "AddressValidator",
    "MenuClient",
    "RequiredFields",
    "CUSTOMER_FIELDS",
    "ADDRESS_FIELDS",
    "Resources",
)
