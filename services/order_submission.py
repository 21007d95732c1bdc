import logging
from collections.abc import Mapping
from datetime import date

from pydantic import BaseModel, ValidationError

import config
from enums.message_entity import MessageEntity
from enums.submission_error_kind import SubmissionErrorKind
from enums.submission_kind import SubmissionKind
from enums.submission_state import SubmissionState
from enums.submission_warning import SubmissionWarning
from exceptions.cart import CartPersistenceException
from exceptions.order import (
    SubmissionException,
    MissingRequiredFieldsException,
    SubmissionFailedException,
    SubmissionInProgressException,
    ConfirmationWarningException
)
from models.customer import CustomerDTO, SessionUserDTO
from models.submission import SubmissionErrorDTO, SubmissionResultDTO
from models.tax import TaxAssignment
from services.cart import CartStore, normalize_customer_id
from services.notification import NotificationService
from services.order_payload import SubmissionPayloadBuilder
from services.sales_backend import SalesBackend
from services.tax import index_catalog
from utils.error_handler import handle_submission_error, error_title
from utils.localizator import Localizator
from utils.response_fields import (
    first_present,
    is_missing,
    CUSTOMER_ID_RULES,
    CUSTOMER_CART_OWNER_RULES,
    CUSTOMER_ADDRESS_RULES,
    CUSTOMER_NAME_RULES,
    USER_WAREHOUSE_RULES,
    SALES_PERSON_ID_RULES,
    SALES_PERSON_NAME_RULES,
    ORDER_ID_RULES,
    INVOICE_ID_RULES,
    SERVER_MESSAGE_RULES
)
from utils.submission_state_machine import SubmissionTracker

ERROR_KINDS = {
    MissingRequiredFieldsException: SubmissionErrorKind.MISSING_REQUIRED_FIELDS,
    SubmissionFailedException: SubmissionErrorKind.SUBMISSION_FAILED,
    SubmissionInProgressException: SubmissionErrorKind.SUBMISSION_IN_PROGRESS,
}


def as_record(source, model: type[BaseModel]) -> dict:
    """Normalize a DTO or raw mapping into a plain dict with backend key names."""
    if source is None:
        return {}
    if not isinstance(source, model):
        source = model.model_validate(source)
    return source.model_dump(by_alias=True)


def server_message_from(error) -> str | None:
    """Best message a backend error carries: an exception, an error payload or a plain string."""
    if error is None:
        return None
    if isinstance(error, str):
        return error or None
    message = getattr(error, "server_message", None)
    if message:
        return message
    payload = getattr(error, "payload", error)
    message = first_present(payload, SERVER_MESSAGE_RULES)
    return str(message) if message is not None else None


def submission_error_from(exception: SubmissionException) -> SubmissionErrorDTO:
    return SubmissionErrorDTO(
        kind=ERROR_KINDS.get(type(exception), SubmissionErrorKind.SUBMISSION_FAILED),
        message=handle_submission_error(exception),
        missing_fields=getattr(exception, "missing_fields", []),
        server_message=getattr(exception, "server_message", None)
    )


class OrderSubmissionWorkflow:
    """
    Runs one order or direct-invoice submission attempt through the submission state machine.

    The cart is only ever cleared after the backend created the order or invoice.
    Every failure ends in a FAILED result with the cart exactly as it was. Retrying
    means calling place_order()/direct_invoice() again.

    Overlap protection lives in CheckoutService; this class assumes it is not
    running twice for the same customer.
    """

    def __init__(
        self,
        cart_store: CartStore,
        backend: SalesBackend,
        notification_service: NotificationService | None = None,
        default_warehouse_id: int | None = config.DEFAULT_WAREHOUSE_ID,
        order_note: str | None = config.ORDER_NOTE
    ):
        self.cart_store = cart_store
        self.backend = backend
        self.notifications = notification_service or NotificationService()
        self.default_warehouse_id = default_warehouse_id
        self.order_note = order_note

    # ------------------------------------------------------------------
    # Order path
    # ------------------------------------------------------------------

    async def place_order(
        self,
        customer: CustomerDTO | Mapping,
        user: SessionUserDTO | Mapping | None,
        assignments: TaxAssignment | None,
        taxes: Mapping,
        order_date: date | None = None
    ) -> SubmissionResultDTO:
        """
        Submit the active cart as a sale order.

        Args:
            customer: Customer record of the cart
            user: Logged-in sales user (warehouse, sales person profile)
            assignments: Tax assignments shown on the cart screen
            taxes: Tax catalog snapshot {tax_id: TaxDefinitionDTO}
            order_date: Payload date, defaults to today

        Returns:
            SubmissionResultDTO in state SUCCEEDED or FAILED
        """
        customer_record = as_record(customer, CustomerDTO)
        user_record = as_record(user, SessionUserDTO)
        cart_owner = self.resolve_cart_owner(customer_record)
        await self.cart_store.ensure_loaded(cart_owner)
        tracker = SubmissionTracker(SubmissionKind.ORDER, cart_owner)
        warnings: list[SubmissionWarning] = []

        tracker.advance(SubmissionState.VALIDATING)
        customer_id = first_present(customer_record, CUSTOMER_ID_RULES)
        address = first_present(customer_record, CUSTOMER_ADDRESS_RULES)
        warehouse_id = first_present(user_record, USER_WAREHOUSE_RULES)

        if address is None or warehouse_id is None:
            tracker.advance(SubmissionState.RESOLVING_FALLBACKS)
            if address is None:
                address = await self._resolve_address(customer_record, warnings)
            if warehouse_id is None:
                warehouse_id = await self._resolve_warehouse(cart_owner, warnings)

        missing = [
            field for field, value in (
                ("customer_id", customer_id),
                ("warehouse_id", warehouse_id),
                ("address", address),
            )
            if is_missing(value)
        ]
        if missing:
            return await self._fail(tracker, MissingRequiredFieldsException(missing), warnings)

        tracker.advance(SubmissionState.BUILDING_PAYLOAD)
        # Snapshot: later cart edits or tax toggles do not reach this payload
        lines = tuple(self.cart_store.get_cart(cart_owner))
        assignments = assignments if isinstance(assignments, TaxAssignment) else TaxAssignment(assignments)
        taxes = dict(index_catalog(taxes))
        try:
            payload = SubmissionPayloadBuilder.build_order_payload(
                lines, assignments, taxes,
                customer_id=customer_id,
                warehouse_id=warehouse_id,
                address=str(address),
                sales_person_id=first_present(user_record, SALES_PERSON_ID_RULES),
                sales_person_name=first_present(user_record, SALES_PERSON_NAME_RULES),
                note=self.order_note,
                order_date=order_date
            )
        except ValidationError as e:
            logging.error(f"Could not build order payload for customer {customer_id}: {e}")
            return await self._fail(tracker, SubmissionFailedException(self._order_failed_text()), warnings)

        tracker.advance(SubmissionState.SUBMITTING)
        logging.info(
            f"📤 Submitting order for customer {customer_id}: {len(payload.crm_product_line_ids)} line(s), "
            f"total {payload.total_amount}"
        )
        try:
            response = await self.backend.create_order(payload)
        except Exception as e:
            logging.error(f"❌ Order creation failed for customer {customer_id}: {type(e).__name__} - {e}")
            failure = SubmissionFailedException(self._order_failed_text(), server_message_from(e))
            return await self._fail(tracker, failure, warnings, payload)

        order_id = first_present(response, ORDER_ID_RULES)
        if order_id is None:
            logging.error(f"❌ Order creation for customer {customer_id} returned no order id: {response!r}")
            server_message = server_message_from(response.get("error")) if isinstance(response, Mapping) else None
            failure = SubmissionFailedException(self._order_failed_text(), server_message)
            return await self._fail(tracker, failure, warnings, payload)

        tracker.advance(SubmissionState.CONFIRMING)
        try:
            await self.backend.confirm_order(order_id)
        except Exception as e:
            logging.warning(f"⚠️ {ConfirmationWarningException(order_id, str(e))}")
            warnings.append(SubmissionWarning.CONFIRMATION_FAILED)
            await self.notifications.confirmation_failed(order_id)

        tracker.advance(SubmissionState.SUCCEEDED)
        await self._clear_submitted_cart(cart_owner, lines, warnings)
        logging.info(f"✅ Order {order_id} created for customer {customer_id}")
        await self.notifications.order_created()
        return SubmissionResultDTO(
            kind=SubmissionKind.ORDER,
            state=tracker.state,
            customer_id=customer_id,
            order_id=order_id,
            warnings=warnings,
            payload=payload
        )

    # ------------------------------------------------------------------
    # Direct invoice path
    # ------------------------------------------------------------------

    async def direct_invoice(self, customer: CustomerDTO | Mapping) -> SubmissionResultDTO:
        """
        Submit the active cart as an invoice (no address, warehouse or tax breakdown).

        Returns:
            SubmissionResultDTO with invoice_id on success
        """
        customer_record = as_record(customer, CustomerDTO)
        cart_owner = self.resolve_cart_owner(customer_record)
        await self.cart_store.ensure_loaded(cart_owner)
        tracker = SubmissionTracker(SubmissionKind.DIRECT_INVOICE, cart_owner)
        warnings: list[SubmissionWarning] = []

        tracker.advance(SubmissionState.VALIDATING)
        customer_id = first_present(customer_record, CUSTOMER_CART_OWNER_RULES)
        if customer_id is None:
            return await self._fail(tracker, MissingRequiredFieldsException(["customer_id"]), warnings)

        tracker.advance(SubmissionState.BUILDING_PAYLOAD)
        lines = tuple(self.cart_store.get_cart(cart_owner))
        payload = SubmissionPayloadBuilder.build_invoice_payload(lines, customer_id)

        tracker.advance(SubmissionState.SUBMITTING)
        logging.info(f"📤 Submitting direct invoice for customer {customer_id}: {len(payload.lines)} line(s)")
        invoice_failed = Localizator.get_text(MessageEntity.ORDER, "error_invoice_failed")
        try:
            response = await self.backend.create_invoice(payload)
        except Exception as e:
            logging.error(f"❌ Direct invoice failed for customer {customer_id}: {type(e).__name__} - {e}")
            failure = SubmissionFailedException(invoice_failed, server_message_from(e))
            return await self._fail(tracker, failure, warnings, payload)

        if not isinstance(response, Mapping) or not is_missing(response.get("error")):
            logging.error(f"❌ Direct invoice rejected for customer {customer_id}: {response!r}")
            server_message = server_message_from(response.get("error")) if isinstance(response, Mapping) else None
            return await self._fail(tracker, SubmissionFailedException(invoice_failed, server_message), warnings, payload)

        invoice_id = first_present(response, INVOICE_ID_RULES)
        if invoice_id is None:
            failure = SubmissionFailedException(Localizator.get_text(MessageEntity.ORDER, "error_invoice_no_id"))
            return await self._fail(tracker, failure, warnings, payload)

        tracker.advance(SubmissionState.SUCCEEDED)
        await self._clear_submitted_cart(cart_owner, lines, warnings)
        logging.info(f"✅ Invoice {invoice_id} created for customer {customer_id}")
        await self.notifications.invoice_created()
        return SubmissionResultDTO(
            kind=SubmissionKind.DIRECT_INVOICE,
            state=tracker.state,
            customer_id=customer_id,
            invoice_id=invoice_id,
            warnings=warnings,
            payload=payload
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def resolve_cart_owner(self, customer):
        """Cart being submitted: the active one, else the customer's own cart (loaded on demand)."""
        if self.cart_store.active_customer_id is not None:
            return self.cart_store.active_customer_id
        if not isinstance(customer, Mapping):
            customer = as_record(customer, CustomerDTO)
        return normalize_customer_id(first_present(customer, CUSTOMER_CART_OWNER_RULES))

    async def _resolve_address(self, customer_record: dict, warnings: list) -> str | None:
        partner_id = first_present(customer_record, CUSTOMER_CART_OWNER_RULES)
        if partner_id is not None:
            try:
                details = await self.backend.fetch_customer_details(partner_id)
                address = first_present(details, CUSTOMER_ADDRESS_RULES)
                if address is not None:
                    logging.info(f"Using backend address for customer {partner_id}")
                    return address
            except Exception as e:
                logging.warning(f"Could not fetch address of customer {partner_id}: {type(e).__name__} - {e}")

        address = first_present(customer_record, CUSTOMER_NAME_RULES)
        if address is not None:
            logging.info(f"Fallback: using customer name as address for customer {partner_id}")
            warnings.append(SubmissionWarning.ADDRESS_FROM_NAME)
        return address

    async def _resolve_warehouse(self, cart_owner, warnings: list):
        cart = self.cart_store.get_cart(cart_owner)
        if cart and cart[0].warehouse_hint is not None:
            return cart[0].warehouse_hint

        if self.default_warehouse_id is None:
            return None
        logging.warning(
            f"No warehouse found for user or product; falling back to warehouse id {self.default_warehouse_id}"
        )
        warnings.append(SubmissionWarning.DEFAULT_WAREHOUSE_USED)
        await self.notifications.default_warehouse_used(self.default_warehouse_id)
        return self.default_warehouse_id

    async def _clear_submitted_cart(self, cart_owner, submitted_lines, warnings: list) -> None:
        if cart_owner is None:
            return
        if not submitted_lines:
            # A stored copy that could not be read is kept
            logging.info(f"Nothing submitted from cart of customer {cart_owner}, stored cart kept")
            return
        self.cart_store.clear_cart(cart_owner)
        try:
            await self.cart_store.delete_persisted_cart(cart_owner)
        except CartPersistenceException as e:
            logging.warning(f"⚠️ {e}")
            warnings.append(SubmissionWarning.CART_CLEANUP_FAILED)
            await self.notifications.cart_cleanup_failed()

    async def _fail(self, tracker: SubmissionTracker, exception: SubmissionException,
                    warnings: list, payload=None) -> SubmissionResultDTO:
        tracker.advance(SubmissionState.FAILED)
        error = submission_error_from(exception)
        logging.warning(f"Submission {tracker.kind.value} failed for customer {tracker.customer_id}: {exception}")
        await self.notifications.submission_failed(error_title(exception), error.message)
        return SubmissionResultDTO(
            kind=tracker.kind,
            state=tracker.state,
            customer_id=tracker.customer_id,
            error=error,
            warnings=warnings,
            payload=payload
        )

    @staticmethod
    def _order_failed_text() -> str:
        return Localizator.get_text(MessageEntity.ORDER, "error_order_failed")
