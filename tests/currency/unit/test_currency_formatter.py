"""
Unit Tests: CurrencyFormatter

Tests for services/currency.py covering:
- Symbol placement (before/after)
- Decimal places and half-up rounding at display time
- Backend currency data with missing or unknown values
"""

from decimal import Decimal

import pytest

from enums.currency_position import CurrencyPosition
from models.currency import CurrencyDTO
from services.currency import CurrencyFormatter, format_number, quantize_amount


class TestFormatNumber:

    @pytest.mark.parametrize("amount, places, expected", [
        (Decimal("21"), 3, "21.000"),
        (Decimal("0.0005"), 3, "0.001"),
        (Decimal("0.0004"), 3, "0.000"),
        (Decimal("2.675"), 2, "2.68"),
        (1.5, 2, "1.50"),
        (None, 3, "0.000"),
        ("abc", 2, "0.00"),
        ("Infinity", 2, "0.00"),
    ])
    def test_format_number(self, amount, places, expected):
        assert format_number(amount, places) == expected

    def test_quantize_amount(self):
        assert quantize_amount(Decimal("1.23456"), 3) == Decimal("1.235")

    def test_amount_beyond_default_precision(self):
        assert format_number(Decimal("1e30"), 3) == "1" + "0" * 30 + ".000"
        assert format_number(Decimal("123456789012345678901234567890.5"), 0) == "123456789012345678901234567891"


class TestCurrencyFormatter:

    def test_after_position_uses_code(self):
        formatter = CurrencyFormatter(CurrencyDTO(name="OMR", symbol="ر.ع.", position=CurrencyPosition.AFTER))

        assert formatter.format_amount(Decimal("21")) == "21.000 OMR"

    def test_before_position_uses_symbol(self):
        formatter = CurrencyFormatter(
            CurrencyDTO(name="USD", symbol="$", position=CurrencyPosition.BEFORE, decimal_places=2)
        )

        assert formatter.format_amount(Decimal("1234.5")) == "$ 1234.50"

    def test_decimal_places_override(self):
        formatter = CurrencyFormatter(CurrencyDTO(name="OMR", symbol="OMR"))

        assert formatter.format_amount(Decimal("1.5"), decimal_places=2) == "1.50 OMR"

    def test_defaults_from_config(self):
        formatter = CurrencyFormatter()

        assert formatter.currency.name == "OMR"
        assert formatter.currency.decimal_places == 3

    def test_from_backend(self):
        formatter = CurrencyFormatter.from_backend(
            {"name": "AED", "symbol": "د.إ", "position": "before", "decimal_places": 2}
        )

        assert formatter.format_amount(Decimal("10")) == "د.إ 10.00"

    def test_backend_defaults(self):
        formatter = CurrencyFormatter.from_backend({"symbol": False, "position": False})

        assert formatter.currency.name == "OMR"
        assert formatter.currency.symbol == "OMR"
        assert formatter.currency.position == CurrencyPosition.AFTER
        assert formatter.currency.decimal_places == 3

    def test_unknown_position_falls_back_to_after(self):
        formatter = CurrencyFormatter.from_backend({"name": "USD", "position": "middle", "decimal_places": 2})

        assert formatter.format_amount(5) == "5.00 USD"

    def test_empty_backend_data_keeps_currency(self):
        formatter = CurrencyFormatter(CurrencyDTO(name="USD", symbol="$"))

        formatter.set_from_backend(None)

        assert formatter.currency.name == "USD"
