"""Tests for the Order aggregate: cart edits, customer and address."""

import math
from datetime import datetime
from decimal import Decimal

import pytest

from orderkit.adapter import TransportError
from orderkit.order import (
    AddressDraft,
    AddressRef,
    CardDraft,
    CardRef,
    CustomerDraft,
    CustomerRef,
    OptionSelection,
    Product,
    ServiceType,
)
from tests.conftest import (
    LOCATION_ID,
    PRODUCT,
    TESTING_ADDRESS,
    TESTING_CUSTOMER,
    err,
    ok,
)


class TestAddLineItem:
    async def test_add_line_item(self, order):
        line_item = ok(await order.add_line_item(PRODUCT))
        assert len(order.cart.line_items) == 1
        assert order.cart.line_items[0] is line_item
        assert line_item.order is order
        assert line_item.quantity == 1

    async def test_add_with_quantity(self, order):
        line_item = ok(await order.add_line_item(PRODUCT, 3))
        assert order.get_line_item_quantity(line_item) == 3

    async def test_insertion_order_is_display_order(self, order):
        first = ok(await order.add_line_item(PRODUCT))
        second = ok(await order.add_line_item({**PRODUCT, "id": 99}))
        assert order.cart.line_items == [first, second]

    async def test_accepts_product_instance(self, order):
        line_item = ok(await order.add_line_item(Product.from_data(PRODUCT), 2))
        assert line_item.product.product_id == 1234

    async def test_each_add_creates_distinct_item(self, order):
        a = ok(await order.add_line_item(PRODUCT))
        b = ok(await order.add_line_item(PRODUCT))
        assert a is not b
        assert len(order.cart) == 2

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True, "2"])
    async def test_rejects_invalid_quantity(self, order, quantity):
        error = err(await order.add_line_item(PRODUCT, quantity))
        assert error.code == "INVALID_QUANTITY"
        assert len(order.cart) == 0

    async def test_rejects_product_without_id(self, order):
        error = err(await order.add_line_item({"name": "Mystery"}))
        assert error.code == "INVALID_PRODUCT"
        assert len(order.cart) == 0

    async def test_menu_rejection_leaves_cart_unchanged(self, order, menu):
        menu.unavailable.add(1234)
        error = err(await order.add_line_item(PRODUCT))
        assert error.code == "UNAVAILABLE"
        assert len(order.cart) == 0

    async def test_menu_is_consulted(self, order, menu):
        ok(await order.add_line_item(PRODUCT, 2))
        assert menu.calls == 1

    async def test_options_are_kept_in_selection_order(self, order):
        options = [OptionSelection(10, 101), OptionSelection(10, 102), OptionSelection(11, 201)]
        line_item = ok(await order.add_line_item(PRODUCT, 1, options))
        assert line_item.format()["option_groups"] == [
            {"id": 10, "option_items": [{"id": 101}, {"id": 102}]},
            {"id": 11, "option_items": [{"id": 201}]},
        ]

    async def test_add_and_remove_option(self, order):
        line_item = ok(await order.add_line_item(PRODUCT))
        line_item.add_option(10, 101)
        line_item.add_option(10, 101)
        line_item.add_option(11, 201)
        line_item.remove_option(10, 101)
        line_item.remove_option(99, 999)
        assert line_item.options == [OptionSelection(11, 201)]


class TestRemoveLineItem:
    async def test_remove_line_item(self, order):
        line_item = ok(await order.add_line_item(PRODUCT))
        order.remove_line_item(line_item)
        assert len(order.cart.line_items) == 0
        assert line_item.order is None

    async def test_removing_non_member_is_noop(self, order, adapter):
        ok(await order.add_line_item(PRODUCT))
        other = adapter.new_order(LOCATION_ID, "pickup")
        stranger = ok(await other.add_line_item(PRODUCT))

        order.remove_line_item(stranger)

        assert len(order.cart) == 1
        assert stranger.order is other

    async def test_removing_twice_is_noop(self, order):
        line_item = ok(await order.add_line_item(PRODUCT))
        order.remove_line_item(line_item)
        order.remove_line_item(line_item)
        assert len(order.cart) == 0

    async def test_removes_by_identity(self, order):
        a = ok(await order.add_line_item(PRODUCT))
        b = ok(await order.add_line_item(PRODUCT))
        order.remove_line_item(b)
        assert order.cart.line_items == [a]


class TestLineItemQuantity:
    @pytest.mark.parametrize("quantity", [1, 2, 3, 7, 10])
    async def test_set_then_get(self, order, quantity):
        line_item = ok(await order.add_line_item(PRODUCT, 1))
        assert ok(await order.set_line_item_quantity(line_item, quantity)) == quantity
        assert order.get_line_item_quantity(line_item) == quantity

    async def test_rejection_keeps_prior_quantity(self, order, menu):
        line_item = ok(await order.add_line_item(PRODUCT, 2))
        menu.max_quantity = 5
        error = err(await order.set_line_item_quantity(line_item, 6))
        assert error.code == "UNAVAILABLE"
        assert order.get_line_item_quantity(line_item) == 2

    async def test_invalid_quantity_keeps_prior_quantity(self, order):
        line_item = ok(await order.add_line_item(PRODUCT, 2))
        error = err(await order.set_line_item_quantity(line_item, 0))
        assert error.code == "INVALID_QUANTITY"
        assert order.get_line_item_quantity(line_item) == 2

    async def test_removed_item_cannot_be_requantified(self, order):
        line_item = ok(await order.add_line_item(PRODUCT))
        order.remove_line_item(line_item)
        error = err(await order.set_line_item_quantity(line_item, 2))
        assert error.code == "NOT_IN_CART"

    async def test_get_on_non_member_raises(self, order):
        line_item = ok(await order.add_line_item(PRODUCT))
        order.remove_line_item(line_item)
        with pytest.raises(ValueError):
            order.get_line_item_quantity(line_item)


class TestSetCustomer:
    async def test_reference_skips_validation(self, order, customers):
        saved = ok(await order.set_customer({"customer_id": 123}))
        assert saved is order
        assert saved.customer == CustomerRef(123)
        assert saved.customer.customer_id == 123
        assert customers.calls == 0

    async def test_invalid_customer_returns_field_errors(self, order):
        errors = err(await order.set_customer({"invalidKey": "hi"}))
        assert set(errors) == {"first_name", "last_name", "password", "email"}
        assert order.customer is None

    async def test_only_invalid_fields_are_reported(self, order):
        errors = err(await order.set_customer({**TESTING_CUSTOMER, "email": " "}))
        assert set(errors) == {"email"}

    async def test_valid_customer(self, order, customers):
        ok(await order.set_customer(TESTING_CUSTOMER))
        assert isinstance(order.customer, CustomerDraft)
        assert set(order.customer.to_dict()) == {"first_name", "last_name", "password", "email"}
        assert customers.calls == 1

    async def test_reset_replaces_reference_with_draft(self, order):
        ok(await order.set_customer({"customer_id": 123}))
        ok(await order.set_customer(TESTING_CUSTOMER))
        assert order.customer == CustomerDraft(TESTING_CUSTOMER)

    async def test_failed_draft_keeps_reference(self, order):
        ok(await order.set_customer({"customer_id": 123}))
        err(await order.set_customer({"first_name": "Hugh"}))
        assert order.customer == CustomerRef(123)

    async def test_draft_repr_hides_fields(self, order):
        ok(await order.set_customer(TESTING_CUSTOMER))
        assert "pizzapasta" not in repr(order.customer)

        order.set_payment_method("credit", {"cc_number": "4111111111111111"})
        assert "4111111111111111" not in repr(order.credit_card)
        assert "pizzapasta" not in repr(order)

    def test_customer_cannot_be_assigned_directly(self, order):
        with pytest.raises(AttributeError):
            order.customer = CustomerDraft(TESTING_CUSTOMER)

    async def test_clear_customer(self, order):
        ok(await order.set_customer({"customer_id": 123}))
        order.clear_customer()
        assert order.customer is None


class TestSetAddress:
    async def test_reference_skips_validation(self, order):
        saved = ok(await order.set_address({"customer_address_id": 123}))
        assert saved.address == AddressRef(123)

    async def test_invalid_address_returns_errors(self, order):
        errors = err(await order.set_address({"invalidKey": "hi"}))
        assert isinstance(errors, dict)
        assert set(errors) == {"street_address", "city", "state_code", "zip_code"}

    async def test_valid_address_is_stored_unchanged(self, order):
        ok(await order.set_address(TESTING_ADDRESS))
        assert isinstance(order.address, AddressDraft)
        assert order.address.to_dict() == TESTING_ADDRESS

    async def test_clear_address(self, order):
        ok(await order.set_address(TESTING_ADDRESS))
        order.clear_address()
        assert order.address is None


class TestPaymentAndFulfillment:
    def test_card_reference(self, order):
        order.set_payment_method("credit", {"customer_card_id": 55})
        assert order.payment_type == "credit"
        assert order.credit_card == CardRef(55)

    def test_full_card_is_a_draft(self, order):
        order.set_payment_method("credit", {"cc_number": "4111111111111111", "customer_card_id": 55})
        assert isinstance(order.credit_card, CardDraft)
        assert order.credit_card.customer_card_id == 55

    def test_cash_clears_card(self, order):
        order.set_payment_method("credit", {"customer_card_id": 55})
        order.set_payment_method("cash")
        assert order.credit_card is None

    def test_requested_at_defaults_to_asap(self, order):
        assert order.requested_at == "asap"
        assert order.wants_future_order is False

    def test_requested_at_datetime(self, order):
        order.set_requested_at(datetime(2026, 11, 2, 18, 30), wants_future_order=True)
        assert order.requested_at == "2026-11-02T18:30:00"
        assert order.wants_future_order is True

    def test_requested_at_rejects_garbage(self, order):
        with pytest.raises(ValueError):
            order.set_requested_at("next tuesday")

    def test_service_type_is_parsed(self, order):
        assert order.service_type is ServiceType.PICKUP

    def test_unknown_service_type_raises(self, adapter):
        with pytest.raises(ValueError):
            adapter.new_order(LOCATION_ID, "teleport")

    @pytest.mark.parametrize("options", [{"tip": Decimal("1.50")}, {1: "one"}, {"ratio": math.nan}])
    def test_misc_options_must_be_json(self, adapter, options):
        with pytest.raises(ValueError):
            adapter.new_order(LOCATION_ID, "pickup", misc_options=options)

    def test_misc_options_are_read_only(self, adapter):
        o = adapter.new_order(LOCATION_ID, "delivery", misc_options={"include_utensils": True})
        with pytest.raises(TypeError):
            o.misc_options["include_utensils"] = False


class TestFormat:
    async def test_format(self, order):
        ok(await order.add_line_item(PRODUCT, 2))
        ok(await order.set_customer({"customer_id": 123}))
        order.set_payment_method("credit", {"customer_card_id": 55}).set_promo_code("FREEBIE")

        payload = order.format()

        assert payload["location_id"] == LOCATION_ID
        assert payload["service_type"] == "pickup"
        assert payload["customer"] == {"customer_id": 123}
        assert payload["credit_card"] == {"customer_card_id": 55}
        assert payload["promo_code"] == "FREEBIE"
        assert payload["cart"][0]["id"] == 1234
        assert payload["cart"][0]["quantity"] == 2
        assert "address" not in payload


class TestCheckout:
    async def test_validate_posts_order(self, order, transport):
        transport.reply(200, {"valid": True})
        ok(await order.add_line_item(PRODUCT))

        assert ok(await order.validate()) == {"valid": True}

        sent = transport.calls[0]
        assert sent.method == "POST"
        assert sent.url.endswith("orders/validate")

    async def test_unencodable_body_is_an_error(self, order, transport):
        ok(await order.set_customer({**TESTING_CUSTOMER, "tip": Decimal("1.50")}))

        pending = order.validate()
        error = err(await pending)

        assert isinstance(error, TransportError)
        assert isinstance(error.cause, TypeError)
        assert transport.calls == []

    async def test_submit_flushes_current_order(self, order, adapter, storage, transport):
        transport.reply(201, {"order_id": 777})
        ok(await order.add_line_item(PRODUCT))
        ok(await adapter.persist_current_order(order))

        assert ok(await order.submit()) == {"order_id": 777}

        assert adapter.current_order is None
        assert storage.keys() == []
        assert transport.calls[0].url.endswith("orders/create")

    async def test_failed_submit_keeps_order(self, order, adapter, transport):
        transport.reply(400, {"errors": [{"code": "orders.closed"}]})
        ok(await adapter.persist_current_order(order))

        assert err(await order.submit()) == {"errors": [{"code": "orders.closed"}]}
        assert adapter.current_order is order
