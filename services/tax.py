import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal

from enums.tax_amount_type import TaxAmountType
from models.cart import CartLineItemDTO
from models.tax import CartTotalsDTO, TaxAssignment, TaxDefinitionDTO

HUNDRED = Decimal(100)


def index_catalog(catalog) -> Mapping:
    """Accept a TaxCatalog, a {tax_id: TaxDefinitionDTO} mapping or a plain list of taxes."""
    if catalog is None:
        return {}
    if hasattr(catalog, "by_id"):
        return catalog.by_id
    if isinstance(catalog, Mapping):
        return catalog
    return {tax.id: tax for tax in catalog}


def _as_assignment(assignments) -> TaxAssignment:
    if isinstance(assignments, TaxAssignment):
        return assignments
    return TaxAssignment(assignments or {})


def _plain_decimal(value: Decimal) -> str:
    normalized = value.normalize()
    return format(normalized, "f")


class TaxService:
    """
    Pure tax computations over a tax catalog snapshot and per-product tax assignments.

    Nothing here rounds: amounts keep full Decimal precision and are rounded only
    when formatted for display (see CurrencyFormatter).
    """

    @staticmethod
    def compute_line_tax(
        line: CartLineItemDTO,
        assigned_tax_ids: Iterable,
        catalog
    ) -> Decimal:
        """
        Calculate tax for one cart line.

        For each assigned tax present in the catalog:
        - percent: (quantity × unit_price) × amount / 100
        - fixed:   amount × quantity

        Tax ids missing from the catalog contribute zero (the catalog may not have
        been refreshed yet).

        Args:
            line: Cart line
            assigned_tax_ids: Tax ids applied to this line
            catalog: TaxCatalog, mapping or list of TaxDefinitionDTO

        Returns:
            Tax amount at full precision
        """
        taxes = index_catalog(catalog)
        subtotal = line.unit_price * line.quantity
        tax_amount = Decimal("0")

        # Sorted for a stable summation order given the same catalog snapshot
        for tax_id in sorted(set(assigned_tax_ids), key=str):
            tax: TaxDefinitionDTO | None = taxes.get(tax_id)
            if tax is None:
                continue
            if tax.amount_type == TaxAmountType.PERCENT:
                tax_amount += subtotal * tax.amount / HUNDRED
            elif tax.amount_type == TaxAmountType.FIXED:
                tax_amount += tax.amount * line.quantity
        return tax_amount

    @staticmethod
    def compute_cart_totals(
        cart: Iterable[CartLineItemDTO],
        assignments,
        catalog
    ) -> CartTotalsDTO:
        """
        Aggregate untaxed, tax and grand totals for a cart.

        untaxed = Σ(unit_price × quantity), tax = Σ line tax, grand = untaxed + tax.
        """
        assignments = _as_assignment(assignments)
        taxes = index_catalog(catalog)

        untaxed = Decimal("0")
        tax = Decimal("0")
        total_quantity = 0
        for line in cart:
            untaxed += line.subtotal
            total_quantity += line.quantity
            tax += TaxService.compute_line_tax(line, assignments.tax_ids_for(line.product_id), taxes)

        return CartTotalsDTO(
            untaxed=untaxed,
            tax=tax,
            grand=untaxed + tax,
            total_quantity=total_quantity
        )

    @staticmethod
    def auto_seed_assignments(products: Iterable, existing_assignments=None) -> TaxAssignment:
        """
        Seed tax assignments from the products' default taxes.

        A product with default tax ids (taxes_id on the backend record) gets them
        assigned unless the user already picked a non-empty set for it. Empty
        selections are overridden by defaults. Seeding twice with the same inputs
        gives the same result.

        Args:
            products: Cart lines (or raw product records) carrying default_tax_ids
            existing_assignments: Current TaxAssignment or plain mapping

        Returns:
            New TaxAssignment; the input is left untouched
        """
        existing = _as_assignment(existing_assignments)
        entries = dict(existing)
        seeded = 0

        for product in products:
            if isinstance(product, Mapping):
                product = CartLineItemDTO.model_validate(product)
            if not product.default_tax_ids or existing.has_selection(product.product_id):
                continue
            entries[product.product_id] = frozenset(product.default_tax_ids)
            seeded += 1

        if seeded:
            logging.debug(f"Seeded default taxes for {seeded} product(s)")
        return TaxAssignment(entries)

    @staticmethod
    def toggle_tax(assignments, product_id, tax_id) -> TaxAssignment:
        """
        Add the tax to the product's selection if absent, remove it if present.

        Returns a new TaxAssignment; readers of the old one are unaffected.
        """
        assignments = _as_assignment(assignments)
        current = assignments.tax_ids_for(product_id)
        return assignments.with_tax_ids(product_id, current ^ {tax_id})

    @staticmethod
    def tax_names(product_id, assignments, catalog) -> str | None:
        """
        Comma-separated names of the taxes applied to a product, in catalog order.

        Returns:
            Names string, or None when nothing (known) is applied
        """
        applied = _as_assignment(assignments).tax_ids_for(product_id)
        if not applied:
            return None
        taxes = index_catalog(catalog)
        names = [tax.name for tax_id, tax in taxes.items() if tax_id in applied and tax.name]
        return ", ".join(names) or None

    @staticmethod
    def describe_tax(tax: TaxDefinitionDTO, decimal_places: int | None = None) -> str:
        """Label for a tax option, e.g. "5%" or "Fixed 0.500" (with decimal_places=3)."""
        if tax.amount_type == TaxAmountType.PERCENT:
            return f"{_plain_decimal(tax.amount)}%"
        if decimal_places is None:
            return f"Fixed {_plain_decimal(tax.amount)}"
        return f"Fixed {tax.amount:.{decimal_places}f}"
