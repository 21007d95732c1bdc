"""
Unit tests for the POS exception hierarchy.
"""

import pytest

from exceptions import (
    PosCartException,
    CartException,
    NoActiveCustomerException,
    CorruptCartSnapshotException,
    CartPersistenceException,
    SubmissionException,
    MissingRequiredFieldsException,
    SubmissionFailedException,
    SubmissionInProgressException,
    ConfirmationWarningException,
    RemoteCallException,
    RemoteAuthenticationException,
    TaxCatalogUnavailableException,
)


class TestExceptionHierarchy:

    @pytest.mark.parametrize("exception, parent", [
        (NoActiveCustomerException("clear the cart"), CartException),
        (CorruptCartSnapshotException("cart_1", "invalid JSON"), CartException),
        (CartPersistenceException("cart_1", "write", "down"), CartException),
        (MissingRequiredFieldsException(["address"]), SubmissionException),
        (SubmissionFailedException("Failed"), SubmissionException),
        (SubmissionInProgressException(42), SubmissionException),
        (ConfirmationWarningException(901, "locked"), SubmissionException),
        (RemoteAuthenticationException("pos"), RemoteCallException),
        (TaxCatalogUnavailableException("timeout"), PosCartException),
    ])
    def test_parents(self, exception, parent):
        assert isinstance(exception, parent)
        assert isinstance(exception, PosCartException)


class TestExceptionMessages:

    def test_missing_fields(self):
        exception = MissingRequiredFieldsException(["warehouse_id", "address"])

        assert str(exception) == "Missing required data: warehouse_id, address"
        assert exception.details == {"missing_fields": ["warehouse_id", "address"]}

    def test_submission_failed_with_server_message(self):
        exception = SubmissionFailedException("Failed to create sale order", "Access denied")

        assert str(exception) == "Failed to create sale order: Access denied"
        assert exception.server_message == "Access denied"

    def test_remote_call_prefers_server_message(self):
        exception = RemoteCallException("object.execute_kw", "server error", server_message="Record locked")

        assert str(exception) == "Remote call object.execute_kw failed: Record locked"

    def test_repr_includes_details(self):
        assert repr(SubmissionInProgressException(42)) == (
            "SubmissionInProgressException('A submission is already in progress for customer 42', customer_id=42)"
        )

    def test_repr_without_details(self):
        assert repr(PosCartException("boom")) == "PosCartException('boom')"
