from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.odoo_fields import false_to_none, many2one_id


class CustomerDTO(BaseModel):
    """
    Customer record as handed over by the customer list/detail screens.

    Different backends fill different keys (id vs _id, address vs
    customer_address), so all of them are optional and the submission workflow
    picks the first one present.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int | str | None = None
    internal_id: str | None = Field(default=None, alias="_id")
    customer_id: int | str | None = None
    name: str | None = None
    address: str | None = None
    customer_address: str | None = None
    address_line: str | None = None
    mobile: str | None = None
    customer_mobile: str | None = None
    phone: str | None = None

    normalize_fields = field_validator(
        "id", "internal_id", "customer_id", "name", "address", "customer_address",
        "address_line", "mobile", "customer_mobile", "phone", mode="before"
    )(false_to_none)

    @property
    def cart_owner_id(self) -> int | str | None:
        """Key under which this customer's cart is stored."""
        return self.id if self.id is not None else self.internal_id


class WarehouseRefDTO(BaseModel):
    model_config = ConfigDict(extra="allow")

    warehouse_id: int | str | None = None
    id: int | str | None = None
    name: str | None = None

    normalize_fields = field_validator("warehouse_id", "id", mode="before")(many2one_id)


class SalesProfileDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    internal_id: str | None = Field(default=None, alias="_id")
    name: str | None = None


class SessionUserDTO(BaseModel):
    """The logged-in POS user (sales person)."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int | str | None = None
    name: str | None = None
    warehouse: WarehouseRefDTO | None = None
    warehouse_id: int | str | None = None
    related_profile: SalesProfileDTO | None = None

    normalize_fields = field_validator("warehouse_id", mode="before")(many2one_id)
