"""
Unit Tests: CartSummaryService

Tests for services/cart_summary.py covering:
- build_summary() - rendered rows and totals
- build_checkout_lines() - payment hand-off with per-line taxes
"""

from decimal import Decimal

import pytest

from conftest import make_line
from models.tax import TaxAssignment
from services.cart import CartStore
from services.cart_summary import CartSummaryService


@pytest.fixture
def store():
    store = CartStore()
    store._active_customer_id = 42
    store.load_cart(42, [make_line(1, quantity=2, price="10"), make_line(2, quantity=3, price="1.25")])
    return store


class TestBuildSummary:

    def test_rows_and_totals(self, store, tax_catalog):
        summary = CartSummaryService.build_summary(store, TaxAssignment({1: {1}}), tax_catalog)

        first, second = summary.lines
        assert summary.customer_id == 42
        assert first.unit_price_text == "10.000"
        assert first.line_total_text == "20.000"
        assert first.tax_names == "VAT 5%"
        assert first.tax_text == "+1.000"
        assert second.tax_names is None
        assert second.tax_text is None
        assert summary.untaxed_text == "23.750"
        assert summary.tax_text == "1.000"
        assert summary.grand_text == "24.750"
        assert summary.totals.total_quantity == 5

    def test_decimal_places(self, store, tax_catalog):
        summary = CartSummaryService.build_summary(store, TaxAssignment(), tax_catalog, decimal_places=2)

        assert summary.grand_text == "23.75"

    def test_plain_mapping_assignments(self, store, tax_catalog):
        summary = CartSummaryService.build_summary(store, {2: [2]}, tax_catalog)

        assert summary.lines[1].tax_text == "+1.500"


class TestBuildCheckoutLines:

    def test_lines_annotated_with_taxes(self, store, tax_catalog):
        handoff = CartSummaryService.build_checkout_lines(store, TaxAssignment({1: {2, 1}}), tax_catalog)

        first, second = handoff.lines
        assert first.tax_ids == (1, 2)
        assert first.tax_amount == Decimal("2.0")
        assert second.tax_ids == ()
        assert second.tax_amount == Decimal("0")
        assert handoff.untaxed_total == Decimal("23.75")
        assert handoff.tax_total == Decimal("2.0")
        assert handoff.grand_total == Decimal("25.75")
