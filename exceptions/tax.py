"""
Tax catalog exceptions.
"""

from .base import PosCartException


class TaxException(PosCartException):
    """Base exception for tax-related errors."""
    pass


class TaxCatalogUnavailableException(TaxException):
    """
    Raised when the tax list cannot be fetched.

    Non-fatal: the catalog is treated as empty until the next successful refresh.
    """

    def __init__(self, reason: str):
        super().__init__(
            f"Tax catalog unavailable: {reason}",
            details={'reason': reason}
        )
        self.reason = reason
