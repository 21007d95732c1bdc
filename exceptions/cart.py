"""
Cart-related exceptions.
"""

from .base import PosCartException


class CartException(PosCartException):
    """Base exception for cart-related errors."""
    pass


class NoActiveCustomerException(CartException):
    """Raised when a cart mutation is attempted before any customer is active."""

    def __init__(self, operation: str):
        super().__init__(
            f"Cannot {operation}: no active customer selected",
            details={'operation': operation}
        )
        self.operation = operation


class CartLineNotFoundException(CartException):
    """Raised when a line for the given product is not in the active cart."""

    def __init__(self, customer_id, product_id):
        super().__init__(
            f"Product {product_id} is not in the cart of customer {customer_id}",
            details={'customer_id': customer_id, 'product_id': product_id}
        )
        self.customer_id = customer_id
        self.product_id = product_id


class CorruptCartSnapshotException(CartException):
    """Raised when a persisted cart cannot be decoded."""

    def __init__(self, key: str, reason: str):
        super().__init__(
            f"Persisted cart '{key}' is unreadable: {reason}",
            details={'key': key, 'reason': reason}
        )
        self.key = key
        self.reason = reason


class CartPersistenceException(CartException):
    """
    Raised when the durable copy of a cart could not be read, written or deleted.

    Non-fatal: the in-memory cart stays authoritative for the session.
    """

    def __init__(self, key: str, operation: str, reason: str):
        super().__init__(
            f"Cart persistence {operation} failed for '{key}': {reason}",
            details={'key': key, 'operation': operation, 'reason': reason}
        )
        self.key = key
        self.operation = operation
        self.reason = reason
