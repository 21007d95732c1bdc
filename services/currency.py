import logging
from collections.abc import Mapping
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, localcontext

import config
from enums.currency_position import CurrencyPosition
from models.currency import CurrencyDTO


def quantize_amount(amount, decimal_places: int) -> Decimal:
    """Round an amount for display. The only place monetary values get rounded."""
    try:
        value = Decimal(str(amount if amount is not None else 0))
    except InvalidOperation:
        value = Decimal("0")
    if not value.is_finite():
        return Decimal("0")
    # Large amounts need more digits than the default 28
    with localcontext() as context:
        context.prec = max(context.prec, value.adjusted() + decimal_places + 2)
        return value.quantize(Decimal(1).scaleb(-decimal_places), rounding=ROUND_HALF_UP)


def format_number(amount, decimal_places: int) -> str:
    return f"{quantize_amount(amount, decimal_places):.{decimal_places}f}"


class CurrencyFormatter:
    """
    Formats amounts in the company currency.

    Starts from the configured currency (CURRENCY_* settings) and can be
    switched to the currency reported by the sales backend. Symbol placement
    follows the backend convention: "<symbol> 1.000" before, "1.000 <code>" after.
    """

    def __init__(self, currency: CurrencyDTO | None = None):
        self.currency = currency or CurrencyDTO(
            name=config.CURRENCY_NAME,
            symbol=config.CURRENCY_SYMBOL,
            position=config.CURRENCY_POSITION,
            decimal_places=config.CURRENCY_DECIMAL_PLACES
        )

    def set_from_backend(self, currency_data: Mapping | None) -> CurrencyDTO:
        """
        Apply company currency data from the backend. Missing keys keep sensible defaults.

        Args:
            currency_data: {"name", "symbol", "position", "decimal_places"} or None (ignored)

        Returns:
            The currency now in use
        """
        if not currency_data:
            return self.currency

        name = currency_data.get("name") or "OMR"
        try:
            position = CurrencyPosition(currency_data.get("position") or CurrencyPosition.AFTER.value)
        except ValueError:
            logging.warning(f"Unknown currency position {currency_data.get('position')!r}, using 'after'")
            position = CurrencyPosition.AFTER
        decimal_places = currency_data.get("decimal_places")

        self.currency = CurrencyDTO(
            name=name,
            symbol=currency_data.get("symbol") or name,
            position=position,
            decimal_places=3 if decimal_places is None else decimal_places
        )
        logging.info(f"💱 Currency set to {self.currency.name} ({self.currency.decimal_places} decimals)")
        return self.currency

    @classmethod
    def from_backend(cls, currency_data: Mapping | None) -> "CurrencyFormatter":
        formatter = cls()
        formatter.set_from_backend(currency_data)
        return formatter

    def format_amount(self, amount, decimal_places: int | None = None) -> str:
        """
        Format an amount with the currency.

        Args:
            amount: Decimal/float/int/str (None counts as 0)
            decimal_places: Override the currency's decimal places

        Returns:
            e.g. "21.000 OMR" or "$ 21.00"
        """
        places = self.currency.decimal_places if decimal_places is None else decimal_places
        value = format_number(amount, places)
        if self.currency.position == CurrencyPosition.BEFORE:
            return f"{self.currency.symbol} {value}"
        return f"{value} {self.currency.name}"
