from enum import Enum


class SubmissionWarning(Enum):
    CONFIRMATION_FAILED = "CONFIRMATION_FAILED"        # Order created, confirm call failed
    DEFAULT_WAREHOUSE_USED = "DEFAULT_WAREHOUSE_USED"  # No user/line warehouse, configured default used
    ADDRESS_FROM_NAME = "ADDRESS_FROM_NAME"            # Customer name used as delivery address
    CART_CLEANUP_FAILED = "CART_CLEANUP_FAILED"        # Persisted cart could not be deleted
