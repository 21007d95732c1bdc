from typing import Protocol

from models.invoice import InvoicePayloadDTO
from models.order import OrderPayloadDTO


class SalesBackend(Protocol):
    """
    Remote sales system used by the tax catalog and the submission workflow.

    Implemented by odoo_api.OdooApiWrapper. Response shapes are loose on purpose
    (ids may come back under "result" or "id"); callers read them through
    utils.response_fields rules.
    """

    async def fetch_taxes(self, type_tax_use: str) -> dict:
        """{"result": [{id, name, amount_type, amount}, ...]} for the given usage."""
        ...

    async def fetch_customer_details(self, customer_id) -> dict:
        """Customer record; at least {"address": ...} when the backend knows one."""
        ...

    async def create_order(self, payload: OrderPayloadDTO) -> dict:
        """Create a sale order. Returns {"result": order_id} (or {"id": ...})."""
        ...

    async def confirm_order(self, order_id) -> dict:
        ...

    async def create_invoice(self, payload: InvoicePayloadDTO) -> dict:
        """Create an invoice. Returns {"id" | "result": invoice_id} or {"error": ...}."""
        ...
