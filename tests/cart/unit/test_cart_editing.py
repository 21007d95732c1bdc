"""
Unit Tests: CartEditingService

Tests for services/cart_editing.py covering:
- parse_quantity() / parse_price() - free-text input
- increment() / decrement() - decrement stops at 0 and keeps the line
- set_quantity_from_text() / set_price_from_text()
- quick_add() - product list shortcut
"""

from decimal import Decimal

import pytest

from conftest import make_line
from exceptions.cart import CartLineNotFoundException
from services.cart import CartStore
from services.cart_editing import CartEditingService, parse_quantity, parse_price


@pytest.fixture
def store():
    store = CartStore()
    store._active_customer_id = 42
    store.load_cart(42, [make_line(1, quantity=2, price="10")])
    return store


class TestParseInput:

    @pytest.mark.parametrize("text, expected", [
        ("12", 12),
        ("12 pcs", 12),
        ("  3", 3),
        ("abc", 0),
        ("", 0),
        (None, 0),
        ("-3", 0),
    ])
    def test_parse_quantity(self, text, expected):
        assert parse_quantity(text) == expected

    @pytest.mark.parametrize("text, expected", [
        ("1.5", Decimal("1.5")),
        (".5", Decimal("0.5")),
        ("2.250 OMR", Decimal("2.250")),
        ("price", Decimal("0")),
        (None, Decimal("0")),
        ("-2", Decimal("0")),
    ])
    def test_parse_price(self, text, expected):
        assert parse_price(text) == expected


class TestLineEdits:

    def test_increment(self, store):
        updated = CartEditingService.increment(store, 1)

        assert updated.quantity == 3
        assert store.find_line(1).quantity == 3

    def test_decrement_stops_at_zero_and_keeps_line(self, store):
        CartEditingService.decrement(store, 1)
        CartEditingService.decrement(store, 1)
        updated = CartEditingService.decrement(store, 1)

        assert updated.quantity == 0
        assert store.find_line(1) is not None

    def test_set_quantity_from_text(self, store):
        CartEditingService.set_quantity_from_text(store, 1, "7")

        assert store.find_line(1).quantity == 7

    def test_non_numeric_quantity_becomes_zero(self, store):
        CartEditingService.set_quantity_from_text(store, 1, "many")

        assert store.find_line(1).quantity == 0

    def test_set_price_from_text(self, store):
        CartEditingService.set_price_from_text(store, 1, "4.125")

        line = store.find_line(1)
        assert line.unit_price == Decimal("4.125")
        assert line.quantity == 2

    def test_edit_missing_line_raises(self, store):
        with pytest.raises(CartLineNotFoundException) as exc_info:
            CartEditingService.increment(store, 999)

        assert exc_info.value.product_id == 999
        assert exc_info.value.customer_id == 42


class TestQuickAdd:

    def test_quick_add_new_product_at_quantity_one(self, store):
        added = CartEditingService.quick_add(store, {"id": 5, "name": "Tea", "list_price": 2.5, "qty": 40})

        assert added.quantity == 1
        assert added.unit_price == Decimal("2.5")
        assert [line.product_id for line in store.get_current_cart()] == [1, 5]

    def test_quick_add_existing_product_adds_one(self, store):
        added = CartEditingService.quick_add(store, make_line(1, quantity=1, price="99"))

        assert added.quantity == 3
        assert added.unit_price == Decimal("10")
        assert len(store.get_current_cart()) == 1
