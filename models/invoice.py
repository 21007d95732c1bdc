from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class InvoiceLineDTO(BaseModel):
    """Reduced line for direct invoices: no tax breakdown."""
    model_config = ConfigDict(frozen=True)

    id: int | str
    name: str
    price: Decimal
    quantity: int


class InvoicePayloadDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    customer_id: int | str
    lines: tuple[InvoiceLineDTO, ...]
