from collections.abc import Mapping, Sequence
from datetime import date

from models.cart import CartLineItemDTO
from models.invoice import InvoiceLineDTO, InvoicePayloadDTO
from models.order import OrderLineDTO, OrderPayloadDTO
from models.tax import TaxAssignment
from services.tax import TaxService


def odoo_product_id(product_id) -> int | None:
    """Backend record id of a product when its id is numeric ("42" or 42), else None."""
    if isinstance(product_id, bool):
        return None
    if isinstance(product_id, int):
        return product_id
    if isinstance(product_id, str) and product_id.isdigit():
        return int(product_id)
    return None


class SubmissionPayloadBuilder:
    """
    Builds frozen order/invoice payloads from a cart snapshot.

    Inputs are snapshots (tuples of frozen lines, an immutable TaxAssignment and
    a catalog mapping captured by the caller), so the same cart and catalog always
    give the same payload apart from the date.
    """

    @staticmethod
    def build_order_lines(
        lines: Sequence[CartLineItemDTO],
        assignments: TaxAssignment,
        taxes: Mapping
    ) -> tuple[OrderLineDTO, ...]:
        order_lines = []
        for line in lines:
            tax_ids = assignments.tax_ids_for(line.product_id)
            order_lines.append(OrderLineDTO(
                product_id=line.product_id,
                product_internal_id=line.internal_id,
                product_odoo_id=odoo_product_id(
                    line.external_id if line.external_id is not None else line.product_id
                ),
                product_name=line.name,
                product_code=line.product_code,
                uom_id=line.uom.uom_id if line.uom else None,
                uom=(line.uom.uom_name if line.uom and line.uom.uom_name else "Pcs"),
                qty=line.quantity,
                product_uom_qty=line.quantity,
                unit_price=line.unit_price,
                price_unit=line.unit_price,
                tax_ids=tuple(sorted(tax_ids, key=str)),
                tax_amount=TaxService.compute_line_tax(line, tax_ids, taxes),
                total=line.subtotal
            ))
        return tuple(order_lines)

    @staticmethod
    def build_order_payload(
        lines: Sequence[CartLineItemDTO],
        assignments: TaxAssignment,
        taxes: Mapping,
        customer_id,
        warehouse_id,
        address: str,
        sales_person_id: str | None = None,
        sales_person_name: str | None = None,
        note: str | None = None,
        order_date: date | None = None
    ) -> OrderPayloadDTO:
        """
        Build the sale order payload.

        Args:
            lines: Cart snapshot
            assignments: Tax assignment snapshot
            taxes: Catalog snapshot {tax_id: TaxDefinitionDTO}
            customer_id: Resolved customer id
            warehouse_id: Resolved warehouse id
            address: Resolved delivery address
            sales_person_id: Sales person profile id of the session user
            sales_person_name: Sales person display name
            note: Order note shown in the backend
            order_date: Defaults to today

        Returns:
            Frozen OrderPayloadDTO
        """
        totals = TaxService.compute_cart_totals(lines, assignments, taxes)
        return OrderPayloadDTO(
            date=(order_date or date.today()).isoformat(),
            address=address,
            customer_id=customer_id,
            warehouse_id=warehouse_id,
            untaxed_total_amount=totals.untaxed,
            tax_total_amount=totals.tax,
            total_amount=totals.grand,
            crm_product_line_ids=SubmissionPayloadBuilder.build_order_lines(lines, assignments, taxes),
            sales_person_id=sales_person_id,
            sales_person_name=sales_person_name or "",
            note=note
        )

    @staticmethod
    def build_invoice_payload(lines: Sequence[CartLineItemDTO], customer_id) -> InvoicePayloadDTO:
        """Reduced invoice payload: id, name, price and quantity per line, no taxes."""
        return InvoicePayloadDTO(
            customer_id=customer_id,
            lines=tuple(
                InvoiceLineDTO(id=line.product_id, name=line.name, price=line.unit_price, quantity=line.quantity)
                for line in lines
            )
        )
