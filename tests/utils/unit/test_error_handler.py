"""
Unit tests for error message mapping (utils/error_handler.py) and Localizator.
"""

from unittest.mock import patch

import pytest

from enums.message_entity import MessageEntity
from exceptions import (
    PosCartException,
    NoActiveCustomerException,
    CartPersistenceException,
    MissingRequiredFieldsException,
    SubmissionFailedException,
    SubmissionInProgressException,
    RemoteCallException,
)
from utils.error_handler import handle_submission_error, error_title
from utils.localizator import Localizator


class TestLocalizator:

    def test_get_text_by_entity(self):
        assert Localizator.get_text(MessageEntity.ORDER, "error_order_failed") == "Failed to create sale order"
        assert Localizator.get_text(MessageEntity.CART, "error_no_active_customer") == "Select a customer first"
        assert Localizator.get_text(MessageEntity.COMMON, "error_title") == "ERROR"

    @patch('config.LANGUAGE', 'en')
    def test_default_language_from_config(self):
        assert Localizator.get_text(MessageEntity.ORDER, "success_title") == "Success"

    def test_explicit_language(self):
        assert Localizator.get_text(MessageEntity.ORDER, "success_title", lang="en") == "Success"

    def test_unknown_key_raises(self):
        with pytest.raises(KeyError):
            Localizator.get_text(MessageEntity.ORDER, "no_such_key")


class TestHandleSubmissionError:

    def test_missing_fields_are_listed(self):
        message = handle_submission_error(MissingRequiredFieldsException(["warehouse_id", "address"]))

        assert message == "Please provide: warehouse_id, address"

    def test_server_message_preferred(self):
        exception = SubmissionFailedException("Failed to create sale order", "Partner is archived")

        assert handle_submission_error(exception) == "Partner is archived"

    def test_generic_reason_without_server_message(self):
        exception = SubmissionFailedException("Failed to create sale order")

        assert handle_submission_error(exception) == "Failed to create sale order"

    def test_mapped_exceptions(self):
        assert handle_submission_error(NoActiveCustomerException("update the cart")) == "Select a customer first"
        assert handle_submission_error(SubmissionInProgressException(42)) == (
            "A submission is already running for this customer"
        )
        assert handle_submission_error(CartPersistenceException("cart_42", "write", "down")) == (
            "The cart could not be saved on this device"
        )
        assert handle_submission_error(RemoteCallException("common.login", "timed out")) == (
            "The sales server could not be reached"
        )

    def test_unmapped_exception(self):
        assert handle_submission_error(PosCartException("boom")) == "Unexpected error, please try again"


class TestErrorTitle:

    def test_missing_customer(self):
        assert error_title(MissingRequiredFieldsException(["customer_id"])) == "Missing customer"

    def test_missing_fields(self):
        assert error_title(MissingRequiredFieldsException(["address"])) == "Missing required data"

    def test_other_errors(self):
        assert error_title(SubmissionFailedException("Failed")) == "ERROR"
