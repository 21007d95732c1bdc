from collections.abc import Iterable, Mapping
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from enums.tax_amount_type import TaxAmountType


class TaxDefinitionDTO(BaseModel):
    """One tax from the backend catalog. Never mutated locally."""
    model_config = ConfigDict(frozen=True)

    id: int | str
    name: str
    amount_type: TaxAmountType
    amount: Decimal


class CartTotalsDTO(BaseModel):
    """Cart totals at full precision; round only when formatting."""
    model_config = ConfigDict(frozen=True)

    untaxed: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")
    grand: Decimal = Decimal("0")
    total_quantity: int = 0


class TaxAssignment(Mapping):
    """
    Immutable mapping of product id -> frozenset of tax ids applied to that line.

    An empty selection and a missing product are equivalent: both mean "no taxes
    chosen yet", and equality treats them the same. Tax ids are not checked
    against the catalog here; unknown ids simply contribute nothing when taxes
    are computed.

    Every "change" (toggle, seeding) returns a new TaxAssignment, so readers
    holding an older mapping never see it change underneath them.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping | None = None):
        self._entries = {
            product_id: frozenset(tax_ids)
            for product_id, tax_ids in (entries or {}).items()
        }

    def __getitem__(self, product_id) -> frozenset:
        return self._entries[product_id]

    def __iter__(self):
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        return self._selected() == {
            product_id: frozenset(tax_ids)
            for product_id, tax_ids in other.items()
            if tax_ids
        }

    __hash__ = None

    def __repr__(self) -> str:
        entries = ", ".join(f"{pid!r}: {sorted(ids, key=str)}" for pid, ids in self._entries.items())
        return f"TaxAssignment({{{entries}}})"

    def _selected(self) -> dict:
        return {product_id: ids for product_id, ids in self._entries.items() if ids}

    def tax_ids_for(self, product_id) -> frozenset:
        return self._entries.get(product_id, frozenset())

    def has_selection(self, product_id) -> bool:
        return bool(self._entries.get(product_id))

    def with_tax_ids(self, product_id, tax_ids: Iterable) -> "TaxAssignment":
        entries = dict(self._entries)
        entries[product_id] = frozenset(tax_ids)
        return TaxAssignment(entries)
