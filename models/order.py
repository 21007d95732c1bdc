from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class OrderLineDTO(BaseModel):
    """
    One product line of an order payload.

    Several aliases (qty/product_uom_qty, unit_price/price_unit) are carried on
    purpose: backend integrations read different keys and the names must stay
    stable.
    """
    model_config = ConfigDict(frozen=True)

    product_id: int | str
    product_internal_id: str | None = None
    product_odoo_id: int | None = None
    product_name: str = ""
    product_code: str | None = None
    uom_id: int | str | None = None
    uom: str = "Pcs"
    qty: int
    product_uom_qty: int
    unit_price: Decimal
    price_unit: Decimal
    discount_percentage: Decimal = Decimal("0")
    remarks: str = ""
    tax_ids: tuple[int | str, ...] = ()
    tax_amount: Decimal = Decimal("0")
    total: Decimal


class OrderPayloadDTO(BaseModel):
    """Write-once order payload. Exists only for one submission attempt."""
    model_config = ConfigDict(frozen=True)

    date: str
    quotation_status: str = "new"
    address: str
    remarks: str | None = None
    customer_id: int | str
    warehouse_id: int | str
    pipeline_id: int | None = None
    payment_terms_id: int | None = None
    delivery_method_id: int | None = None
    untaxed_total_amount: Decimal
    tax_total_amount: Decimal
    total_amount: Decimal
    crm_product_line_ids: tuple[OrderLineDTO, ...]
    sales_person_id: int | str | None = None
    sales_person_name: str = ""
    note: str | None = None
