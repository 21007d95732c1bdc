# A cart line is one product's quantity/price entry for one customer. Lines are
# frozen: every edit (quantity +/-, price change, ...) builds a new line with
# model_copy(update=...) and hands it to CartStore.add_or_update_line(), which
# replaces the old line in place.
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from models.odoo_fields import false_to_none, many2one_id

# Product records coming from list/detail screens use other keys for the same data.
# (keys that already carry the value, fallback key)
BACKEND_LINE_ALIASES = (
    (("quantity",), "qty"),
    (("price", "unit_price"), "list_price"),
    (("name",), "product_name"),
    (("image_url",), "imageUrl"),
)


class InventoryLedgerDTO(BaseModel):
    """Stock hint attached to a product record (which warehouse holds it)."""
    model_config = ConfigDict(frozen=True, extra="allow")

    warehouse_id: int | str | None = None
    warehouse_name: str | None = None
    quantity: float | None = None

    normalize_warehouse = field_validator("warehouse_id", mode="before")(many2one_id)
    normalize_name = field_validator("warehouse_name", mode="before")(false_to_none)


class UomDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    uom_id: int | str | None = None
    uom_name: str | None = None

    normalize_fields = field_validator("uom_id", "uom_name", mode="before")(false_to_none)


class CartLineItemDTO(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    product_id: int | str = Field(alias="id")
    name: str = ""
    unit_price: Decimal = Field(default=Decimal("0"), ge=0, alias="price")
    quantity: int = Field(default=0, ge=0)
    product_code: str | None = None
    internal_id: str | None = Field(default=None, alias="_id")  # backend database id
    external_id: int | str | None = None                        # Odoo record id
    inventory_ledgers: tuple[InventoryLedgerDTO, ...] = ()
    uom: UomDTO | None = None
    default_tax_ids: tuple[int | str, ...] = Field(default=(), alias="taxes_id")
    image_url: str | None = None

    normalize_optional = field_validator(
        "product_code", "internal_id", "external_id", "uom", "image_url", mode="before"
    )(false_to_none)

    @model_validator(mode="before")
    @classmethod
    def _accept_backend_aliases(cls, data):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for keys, fallback in BACKEND_LINE_ALIASES:
            if all(data.get(key) is None for key in keys) and fallback in data:
                data[keys[0]] = data.pop(fallback)
        return data

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value):
        value = false_to_none(value)
        return value.strip() if isinstance(value, str) else (value or "")

    @field_validator("inventory_ledgers", "default_tax_ids", mode="before")
    @classmethod
    def _empty_when_missing(cls, value):
        value = false_to_none(value)
        return () if value is None else value

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def warehouse_hint(self) -> int | str | None:
        """Warehouse of the first inventory ledger entry, if any."""
        if self.inventory_ledgers:
            return self.inventory_ledgers[0].warehouse_id
        return None
