from models.cart_summary import (
    CartSummaryDTO,
    CartSummaryLineDTO,
    CheckoutHandoffDTO,
    CheckoutLineDTO
)
from models.tax import TaxAssignment
from services.cart import CartStore
from services.currency import format_number
from services.tax import TaxService, index_catalog

# Cart screens show amounts with 3 decimals regardless of the company currency
SUMMARY_DECIMAL_PLACES = 3


class CartSummaryService:

    @staticmethod
    def build_summary(
        cart_store: CartStore,
        assignments: TaxAssignment,
        catalog,
        decimal_places: int = SUMMARY_DECIMAL_PLACES
    ) -> CartSummaryDTO:
        """
        Build the rows and totals of the active cart for rendering.

        Args:
            cart_store: Session cart store
            assignments: Current tax assignments
            catalog: Tax catalog snapshot
            decimal_places: Display precision of amount texts

        Returns:
            CartSummaryDTO with full-precision totals and rounded texts
        """
        if not isinstance(assignments, TaxAssignment):
            assignments = TaxAssignment(assignments)
        cart = cart_store.get_current_cart()
        taxes = index_catalog(catalog)
        totals = TaxService.compute_cart_totals(cart, assignments, taxes)

        rows = []
        for line in cart:
            line_tax = TaxService.compute_line_tax(line, assignments.tax_ids_for(line.product_id), taxes)
            tax_names = TaxService.tax_names(line.product_id, assignments, taxes)
            rows.append(CartSummaryLineDTO(
                product_id=line.product_id,
                name=line.name,
                quantity=line.quantity,
                unit_price_text=format_number(line.unit_price, decimal_places),
                line_total_text=format_number(line.subtotal, decimal_places),
                tax_names=tax_names,
                tax_text=f"+{format_number(line_tax, decimal_places)}" if tax_names else None
            ))

        return CartSummaryDTO(
            customer_id=cart_store.active_customer_id,
            lines=rows,
            totals=totals,
            untaxed_text=format_number(totals.untaxed, decimal_places),
            tax_text=format_number(totals.tax, decimal_places),
            grand_text=format_number(totals.grand, decimal_places)
        )

    @staticmethod
    def build_checkout_lines(cart_store: CartStore, assignments: TaxAssignment, catalog) -> CheckoutHandoffDTO:
        """Annotate the active cart's lines with tax ids and tax amounts for the payment step."""
        if not isinstance(assignments, TaxAssignment):
            assignments = TaxAssignment(assignments)
        cart = cart_store.get_current_cart()
        taxes = index_catalog(catalog)
        totals = TaxService.compute_cart_totals(cart, assignments, taxes)

        lines = []
        for line in cart:
            tax_ids = assignments.tax_ids_for(line.product_id)
            lines.append(CheckoutLineDTO(
                line=line,
                tax_ids=tuple(sorted(tax_ids, key=str)),
                tax_amount=TaxService.compute_line_tax(line, tax_ids, taxes)
            ))

        return CheckoutHandoffDTO(
            customer_id=cart_store.active_customer_id,
            lines=tuple(lines),
            untaxed_total=totals.untaxed,
            tax_total=totals.tax,
            grand_total=totals.grand
        )
