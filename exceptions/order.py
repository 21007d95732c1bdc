"""
Order and invoice submission exceptions.
"""

from .base import PosCartException


class SubmissionException(PosCartException):
    """Base exception for order/invoice submission errors."""
    pass


class MissingRequiredFieldsException(SubmissionException):
    """Raised when required fields are still unresolved after fallback resolution."""

    def __init__(self, missing_fields: list[str]):
        super().__init__(
            f"Missing required data: {', '.join(missing_fields)}",
            details={'missing_fields': list(missing_fields)}
        )
        self.missing_fields = list(missing_fields)


class SubmissionFailedException(SubmissionException):
    """
    Raised when the backend rejects a submission, times out, or returns no identifier.

    Attributes:
        reason: Short description of what failed
        server_message: Message reported by the backend, if any
    """

    def __init__(self, reason: str, server_message: str | None = None):
        message = f"{reason}: {server_message}" if server_message else reason
        super().__init__(
            message,
            details={'reason': reason, 'server_message': server_message}
        )
        self.reason = reason
        self.server_message = server_message


class SubmissionInProgressException(SubmissionException):
    """Raised when a second submission starts while one is in flight for the same cart."""

    def __init__(self, customer_id):
        super().__init__(
            f"A submission is already in progress for customer {customer_id}",
            details={'customer_id': customer_id}
        )
        self.customer_id = customer_id


class ConfirmationWarningException(SubmissionException):
    """Raised when the order exists remotely but could not be confirmed. Non-fatal."""

    def __init__(self, order_id, reason: str):
        super().__init__(
            f"Order {order_id} was created but confirmation failed: {reason}",
            details={'order_id': order_id, 'reason': reason}
        )
        self.order_id = order_id
        self.reason = reason


class InvalidSubmissionStateException(SubmissionException):
    """Raised when the submission state machine is asked for an invalid transition."""

    def __init__(self, current_state: str, requested_state: str):
        super().__init__(
            f"Submission is in state '{current_state}', cannot move to '{requested_state}'",
            details={'current_state': current_state, 'requested_state': requested_state}
        )
        self.current_state = current_state
        self.requested_state = requested_state
