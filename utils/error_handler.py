"""
Error Handler Utility for the POS cart and checkout flows

Provides centralized error handling for UI layers with:
- Localized error messages
- Consistent user experience
- Automatic exception to message mapping
- Logging for debugging

Usage in screens:
    from utils.error_handler import handle_submission_error

    result = await checkout.place_order(customer, user, assignments)
    if not result.succeeded:
        show_toast(error_title(exception), handle_submission_error(exception))
"""

import logging

from enums.message_entity import MessageEntity
from exceptions import (
    PosCartException,
    NoActiveCustomerException,
    CartLineNotFoundException,
    CartPersistenceException,
    MissingRequiredFieldsException,
    SubmissionFailedException,
    SubmissionInProgressException,
    TaxCatalogUnavailableException,
    RemoteCallException,
)
from utils.localizator import Localizator

# Map exception types to (entity, localization key)
ERROR_MAPPING = {
    # Cart exceptions
    NoActiveCustomerException: (MessageEntity.CART, "error_no_active_customer"),
    CartLineNotFoundException: (MessageEntity.CART, "error_cart_line_not_found"),
    CartPersistenceException: (MessageEntity.CART, "error_cart_not_saved"),

    # Submission exceptions
    MissingRequiredFieldsException: (MessageEntity.ORDER, "error_missing_fields"),
    SubmissionInProgressException: (MessageEntity.ORDER, "error_submission_in_progress"),

    # Tax / remote exceptions
    TaxCatalogUnavailableException: (MessageEntity.COMMON, "error_tax_catalog_unavailable"),
    RemoteCallException: (MessageEntity.COMMON, "error_backend_unavailable"),
}


def handle_submission_error(exception: PosCartException) -> str:
    """
    Convert a cart/checkout exception to a localized user-facing message.

    SubmissionFailedException carries its own text: the server's message when the
    backend sent one, otherwise the localized generic reason it was raised with.

    Args:
        exception: The custom exception raised or reported by a service

    Returns:
        Localized error message string

    Example:
        message = handle_submission_error(MissingRequiredFieldsException(["address"]))
        # "Please provide: address"
    """
    logging.warning(f"Service error handled: {type(exception).__name__} - {str(exception)}")

    if isinstance(exception, SubmissionFailedException):
        return exception.server_message or exception.reason

    mapping = ERROR_MAPPING.get(type(exception))
    if not mapping:
        logging.error(f"Unmapped exception type: {type(exception).__name__}")
        return Localizator.get_text(MessageEntity.COMMON, "error_unexpected")

    entity, localization_key = mapping
    exception_data = {}
    if hasattr(exception, 'missing_fields'):
        exception_data['missing_fields'] = ", ".join(exception.missing_fields)
    if hasattr(exception, 'customer_id'):
        exception_data['customer_id'] = exception.customer_id
    if hasattr(exception, 'reason'):
        exception_data['reason'] = exception.reason

    try:
        return Localizator.get_text(entity, localization_key).format(**exception_data)
    except KeyError as e:
        logging.error(f"Missing format parameter in error message: {e}")
        return Localizator.get_text(entity, localization_key)


def error_title(exception: PosCartException) -> str:
    """Toast title for a submission error."""
    if isinstance(exception, MissingRequiredFieldsException):
        if exception.missing_fields == ["customer_id"]:
            return Localizator.get_text(MessageEntity.ORDER, "error_missing_customer_title")
        return Localizator.get_text(MessageEntity.ORDER, "error_missing_fields_title")
    return Localizator.get_text(MessageEntity.COMMON, "error_title")

