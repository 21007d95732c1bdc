from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from models.cart import CartLineItemDTO
from models.tax import CartTotalsDTO


class CartSummaryLineDTO(BaseModel):
    """One rendered cart row. Amount texts are already rounded for display."""
    product_id: int | str
    name: str
    quantity: int
    unit_price_text: str
    line_total_text: str
    tax_names: str | None = None
    tax_text: str | None = None       # e.g. "+1.000", None without taxes


class CartSummaryDTO(BaseModel):
    customer_id: int | str | None = None
    lines: list[CartSummaryLineDTO] = []
    totals: CartTotalsDTO
    untaxed_text: str
    tax_text: str
    grand_text: str


class CheckoutLineDTO(BaseModel):
    """Cart line handed to the POS payment step, annotated with its taxes."""
    model_config = ConfigDict(frozen=True)

    line: CartLineItemDTO
    tax_ids: tuple[int | str, ...] = ()
    tax_amount: Decimal = Decimal("0")


class CheckoutHandoffDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    customer_id: int | str | None = None
    lines: tuple[CheckoutLineDTO, ...] = ()
    untaxed_total: Decimal = Decimal("0")
    tax_total: Decimal = Decimal("0")
    grand_total: Decimal = Decimal("0")
