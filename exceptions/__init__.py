"""
Custom exceptions for the POS cart core.

Exception Hierarchy:
--------------------
PosCartException (base)
├── CartException
│   ├── NoActiveCustomerException
│   ├── CartLineNotFoundException
│   ├── CorruptCartSnapshotException
│   └── CartPersistenceException        (non-fatal)
├── TaxException
│   └── TaxCatalogUnavailableException  (non-fatal)
├── SubmissionException
│   ├── MissingRequiredFieldsException  (fatal)
│   ├── SubmissionFailedException       (fatal)
│   ├── SubmissionInProgressException   (fatal, attempt rejected)
│   ├── ConfirmationWarningException    (non-fatal)
│   └── InvalidSubmissionStateException
└── RemoteCallException
    └── RemoteAuthenticationException

Usage:
------
Services raise specific exceptions:
    raise MissingRequiredFieldsException(["warehouse_id", "address"])

UI layers turn them into messages:
    message = handle_submission_error(result_exception)
"""

from .base import PosCartException
from .cart import (
    CartException,
    NoActiveCustomerException,
    CartLineNotFoundException,
    CorruptCartSnapshotException,
    CartPersistenceException
)
from .order import (
    SubmissionException,
    MissingRequiredFieldsException,
    SubmissionFailedException,
    SubmissionInProgressException,
    ConfirmationWarningException,
    InvalidSubmissionStateException
)
from .remote import RemoteCallException, RemoteAuthenticationException
from .tax import TaxException, TaxCatalogUnavailableException

__all__ = [
    # Base
    'PosCartException',

    # Cart
    'CartException',
    'NoActiveCustomerException',
    'CartLineNotFoundException',
    'CorruptCartSnapshotException',
    'CartPersistenceException',

    # Submission
    'SubmissionException',
    'MissingRequiredFieldsException',
    'SubmissionFailedException',
    'SubmissionInProgressException',
    'ConfirmationWarningException',
    'InvalidSubmissionStateException',

    # Remote
    'RemoteCallException',
    'RemoteAuthenticationException',

    # Tax
    'TaxException',
    'TaxCatalogUnavailableException',
]
