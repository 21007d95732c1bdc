import logging
from collections.abc import Mapping
from datetime import date

import config
from enums.submission_kind import SubmissionKind
from enums.submission_state import SubmissionState
from exceptions.order import SubmissionInProgressException
from models.customer import CustomerDTO, SessionUserDTO
from models.submission import SubmissionResultDTO
from models.tax import TaxAssignment
from services.cart import CartStore
from services.notification import NotificationService
from services.order_submission import OrderSubmissionWorkflow, submission_error_from
from services.sales_backend import SalesBackend
from services.tax_catalog import TaxCatalog


class CheckoutService:
    """
    Entry points for the cart screen's "Place order" and "Direct invoice" buttons.

    At most one submission runs per cart. A second call for the same cart
    while one is in flight is rejected right away with a FAILED result
    (SUBMISSION_IN_PROGRESS); it is never queued or interleaved, so a double tap
    cannot create two orders.
    """

    def __init__(
        self,
        cart_store: CartStore,
        backend: SalesBackend,
        tax_catalog: TaxCatalog,
        notification_service: NotificationService | None = None,
        default_warehouse_id: int | None = config.DEFAULT_WAREHOUSE_ID,
        order_note: str | None = config.ORDER_NOTE
    ):
        self.tax_catalog = tax_catalog
        self.workflow = OrderSubmissionWorkflow(
            cart_store,
            backend,
            notification_service,
            default_warehouse_id=default_warehouse_id,
            order_note=order_note
        )
        self._in_flight: set = set()

    def is_submitting(self, cart_owner) -> bool:
        return cart_owner in self._in_flight

    async def place_order(
        self,
        customer: CustomerDTO | Mapping,
        user: SessionUserDTO | Mapping | None = None,
        assignments: TaxAssignment | None = None,
        order_date: date | None = None
    ) -> SubmissionResultDTO:
        """
        Submit the cart as a sale order using the current tax catalog.

        Args:
            customer: Customer record of the cart
            user: Logged-in sales user
            assignments: Tax assignments shown on the cart screen
            order_date: Payload date, defaults to today

        Returns:
            Terminal SubmissionResultDTO
        """
        cart_owner = self.workflow.resolve_cart_owner(customer)
        if cart_owner in self._in_flight:
            return self._reject(SubmissionKind.ORDER, cart_owner)

        # Taken before the first await, released even on cancellation
        self._in_flight.add(cart_owner)
        try:
            return await self.workflow.place_order(
                customer, user, assignments, self.tax_catalog.by_id, order_date=order_date
            )
        finally:
            self._in_flight.discard(cart_owner)

    async def direct_invoice(self, customer: CustomerDTO | Mapping) -> SubmissionResultDTO:
        """Submit the cart as a direct invoice. Returns the invoice id on success."""
        cart_owner = self.workflow.resolve_cart_owner(customer)
        if cart_owner in self._in_flight:
            return self._reject(SubmissionKind.DIRECT_INVOICE, cart_owner)

        self._in_flight.add(cart_owner)
        try:
            return await self.workflow.direct_invoice(customer)
        finally:
            self._in_flight.discard(cart_owner)

    @staticmethod
    def _reject(kind: SubmissionKind, cart_owner) -> SubmissionResultDTO:
        exception = SubmissionInProgressException(cart_owner)
        logging.warning(f"⚠️ {exception} - {kind.value} request ignored")
        return SubmissionResultDTO(
            kind=kind,
            state=SubmissionState.FAILED,
            customer_id=cart_owner,
            error=submission_error_from(exception)
        )
