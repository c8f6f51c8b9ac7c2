"""
Sale processor tests.

Verifies:
- Commit records the sale and decrements stock in one transition
- All-or-nothing: any over-quota line means no sale and no stock change
- Live-catalog re-validation (stale carts, deleted products, repeated lines)
- Shift and operator preconditions
- Cart helpers and API payload parsing
"""

from decimal import Decimal

import pytest

from sellespro.errors import (
    EmptyCartError,
    InsufficientStockError,
    NoActiveShiftError,
    NotFoundError,
    ValidationError,
)
from sellespro.models import Cart, CartLine, ShiftType
from sellespro.services import auth_service, products_service, sales_service, shift_service

from conftest import NOW, TEST_ROUNDS


@pytest.fixture
def on_shift(five_left):
    """Seed state (product '1' at 5 units) with cashier1 holding shift A."""
    state, _ = shift_service.activate_shift(five_left, "user1", "A", now=NOW)
    return state


def cart_for(state, *quantities):
    """Cart with one line per (product_id, quantity) pair at catalog price."""
    return Cart([CartLine.for_product(state.find_product(pid), qty) for pid, qty in quantities])


# =============================================================================
# COMMIT
# =============================================================================


class TestCommitSale:

    def test_sell_exact_stock_then_retry_fails(self, on_shift):
        cart = cart_for(on_shift, ("1", 5))
        state, sale = sales_service.commit_sale(on_shift, cart, "user1", now=NOW)

        assert state.find_product("1").quantity == 0
        assert state.sales == (sale,)

        with pytest.raises(InsufficientStockError) as exc:
            sales_service.commit_sale(state, cart, "user1", now=NOW)
        assert exc.value.product_id == "1"
        assert exc.value.shortfall == 5

    def test_total_uses_edited_prices(self, on_shift):
        cart = cart_for(on_shift, ("2", 2), ("3", 3))
        cart.set_price("2", "1.50")
        cart.set_price("3", 2)

        _, sale = sales_service.commit_sale(on_shift, cart, "user1", now=NOW)

        assert sale.total_amount == Decimal("9.00")
        assert [i.total for i in sale.items] == [Decimal("3.00"), Decimal("6.00")]

    def test_sale_records_operator_and_shift(self, on_shift):
        _, sale = sales_service.commit_sale(on_shift, cart_for(on_shift, ("2", 1)), "user1", now=NOW)
        assert sale.user_id == "user1"
        assert sale.username == "cashier1"
        assert sale.shift is ShiftType.A
        assert sale.timestamp == NOW
        assert sale.items[0].name == "Milk 1L"

    def test_input_state_is_untouched(self, on_shift):
        sales_service.commit_sale(on_shift, cart_for(on_shift, ("1", 2)), "user1")
        assert on_shift.find_product("1").quantity == 5
        assert on_shift.sales == ()

    def test_manager_can_sell_under_any_active_shift(self, on_shift):
        _, sale = sales_service.commit_sale(on_shift, cart_for(on_shift, ("3", 1)), "admin")
        assert sale.username == "admin"
        assert sale.shift is ShiftType.A

    def test_plain_line_sequence_is_accepted(self, on_shift):
        lines = [CartLine.for_product(on_shift.find_product("2"), 2)]
        state, sale = sales_service.commit_sale(on_shift, lines, "user1")
        assert state.find_product("2").quantity == 28


class TestAllOrNothing:

    def test_one_valid_one_over_quota_line(self, on_shift):
        cart = cart_for(on_shift, ("2", 1), ("1", 6))
        with pytest.raises(InsufficientStockError) as exc:
            sales_service.commit_sale(on_shift, cart, "user1")

        assert exc.value.name == "Coffee Beans"
        assert on_shift.sales == ()
        assert on_shift.find_product("2").quantity == 30
        assert on_shift.find_product("1").quantity == 5

    def test_repeated_lines_are_checked_together(self, on_shift):
        cart = cart_for(on_shift, ("1", 3), ("1", 3))
        with pytest.raises(InsufficientStockError) as exc:
            sales_service.commit_sale(on_shift, cart, "user1")
        assert exc.value.requested == 6
        assert exc.value.available == 5

    def test_stale_cart_is_revalidated_against_live_stock(self, on_shift):
        cart = cart_for(on_shift, ("1", 4))
        # Stock drops after the line was carted
        state, _ = products_service.update_product(on_shift, "1", {"quantity": 2})
        with pytest.raises(InsufficientStockError):
            sales_service.commit_sale(state, cart, "user1")

    def test_deleted_product_has_nothing_available(self, on_shift):
        cart = cart_for(on_shift, ("3", 1))
        state, _ = products_service.delete_product(on_shift, "3")
        with pytest.raises(InsufficientStockError) as exc:
            sales_service.commit_sale(state, cart, "user1")
        assert exc.value.available == 0
        assert exc.value.name == "Sugar 1kg"

    def test_every_shortfall_is_reported(self, on_shift):
        cart = cart_for(on_shift, ("1", 6), ("2", 31))
        with pytest.raises(InsufficientStockError) as exc:
            sales_service.commit_sale(on_shift, cart, "user1")
        assert [i["product_id"] for i in exc.value.details["items"]] == ["1", "2"]


class TestCommitPreconditions:

    def test_empty_cart(self, on_shift):
        with pytest.raises(EmptyCartError):
            sales_service.commit_sale(on_shift, Cart(), "user1")

    def test_no_active_shift(self, five_left):
        with pytest.raises(NoActiveShiftError):
            sales_service.commit_sale(five_left, cart_for(five_left, ("2", 1)), "user1")

    def test_cashier_must_hold_the_shift(self, five_left):
        state, _ = shift_service.activate_shift(five_left, "admin", "B")
        state, _ = auth_service.create_user(state, "cashier2", "x", rounds=TEST_ROUNDS)
        other = state.users[-1]
        with pytest.raises(NoActiveShiftError):
            sales_service.commit_sale(state, cart_for(state, ("2", 1)), other.id)

    def test_unknown_operator(self, on_shift):
        with pytest.raises(NotFoundError):
            sales_service.commit_sale(on_shift, cart_for(on_shift, ("2", 1)), "ghost")

    def test_zero_quantity_line(self, on_shift):
        lines = [CartLine.for_product(on_shift.find_product("2"), 0)]
        with pytest.raises(ValidationError):
            sales_service.commit_sale(on_shift, lines, "user1")

    def test_deleted_operator_keeps_username_on_history(self, on_shift):
        state, sale = sales_service.commit_sale(on_shift, cart_for(on_shift, ("2", 1)), "user1")
        state, _ = auth_service.delete_user(state, "user1")
        assert state.sales[0].username == "cashier1"


# =============================================================================
# CART
# =============================================================================


class TestCart:
    """Add-time checks are a convenience; commit re-checks regardless."""

    def test_add_increments_existing_line(self, five_left):
        cart = Cart()
        product = five_left.find_product("1")
        cart.add(product)
        cart.add(product)
        assert len(cart) == 1
        assert cart.quantity_of("1") == 2

    def test_add_stops_at_displayed_stock(self, five_left):
        cart = Cart()
        product = five_left.find_product("1")
        for _ in range(5):
            cart.add(product)
        with pytest.raises(InsufficientStockError):
            cart.add(product)
        assert cart.quantity_of("1") == 5

    def test_set_quantity_clamps_to_one(self, five_left):
        cart = Cart()
        product = five_left.find_product("2")
        cart.add(product)
        assert cart.set_quantity(product, 0).cart_quantity == 1

    def test_set_quantity_above_stock(self, five_left):
        cart = Cart()
        product = five_left.find_product("1")
        cart.add(product)
        with pytest.raises(InsufficientStockError):
            cart.set_quantity(product, 9)

    def test_set_negative_price(self, five_left):
        cart = Cart()
        cart.add(five_left.find_product("2"))
        with pytest.raises(ValidationError):
            cart.set_price("2", -1)

    def test_set_price_for_missing_line(self):
        with pytest.raises(NotFoundError):
            Cart().set_price("2", 1)

    def test_total_and_clear(self, five_left):
        cart = Cart()
        cart.add(five_left.find_product("2"))
        cart.add(five_left.find_product("3"))
        assert cart.total == Decimal("3.70")
        cart.remove("2")
        assert cart.total == Decimal("1.20")
        cart.clear()
        assert len(cart) == 0


class TestCartFromPayload:

    def test_defaults_to_catalog_price(self, on_shift):
        cart = sales_service.cart_from_payload(on_shift, [{"product_id": "2", "quantity": 3}])
        assert cart.lines[0].edited_price == Decimal("2.50")
        assert cart.total == Decimal("7.50")

    def test_camel_case_keys_and_price_override(self, on_shift):
        cart = sales_service.cart_from_payload(
            on_shift, [{"productId": "3", "cartQuantity": 2, "editedPrice": 1}]
        )
        assert cart.lines[0].edited_price == Decimal("1.00")

    def test_unknown_product(self, on_shift):
        with pytest.raises(NotFoundError):
            sales_service.cart_from_payload(on_shift, [{"product_id": "99"}])

    @pytest.mark.parametrize(
        "items",
        [
            "nope",
            ["nope"],
            [{"quantity": 1}],
            [{"product_id": "2", "quantity": "2"}],
            [{"product_id": "2", "price": "free"}],
        ],
    )
    def test_bad_shapes(self, on_shift, items):
        with pytest.raises(ValidationError):
            sales_service.cart_from_payload(on_shift, items)
