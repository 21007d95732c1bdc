"""
Unit Tests: CheckoutService

Tests for services/checkout.py covering:
- Single submission in flight per cart (double tap protection)
- Guard release after success, failure and cancellation
- Tax catalog snapshot handed to the workflow
- Payload frozen once built, cart loaded from storage for an inactive owner
"""

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from conftest import make_line
from enums.submission_error_kind import SubmissionErrorKind
from enums.submission_state import SubmissionState
from models.tax import TaxAssignment
from services.cart import CartStore
from services.checkout import CheckoutService
from services.tax_catalog import TaxCatalog

CUSTOMER = {"id": 42, "name": "Acme Trading", "address": "Way 3021, Muscat"}
USER = {"warehouse": {"warehouse_id": 3}}


@pytest.fixture
def checkout(cart_store, sales_backend, vat_5, eco_fee):
    return CheckoutService(cart_store, sales_backend, TaxCatalog([vat_5, eco_fee]), default_warehouse_id=1)


async def fill_cart(store):
    await store.set_active_customer(42)
    store.add_or_update_line(make_line(1, quantity=2, price="10"))
    await store.wait_for_pending_writes()


class TestSingleFlight:

    @pytest.mark.asyncio
    async def test_second_order_is_rejected_while_first_runs(self, checkout, cart_store, sales_backend):
        await fill_cart(cart_store)
        gate = asyncio.Event()

        async def slow_create_order(payload):
            await gate.wait()
            return {"result": 901}

        sales_backend.create_order.side_effect = slow_create_order

        first = asyncio.create_task(checkout.place_order(CUSTOMER, USER))
        await asyncio.sleep(0)
        assert checkout.is_submitting(42)

        second = await checkout.place_order(CUSTOMER, USER)
        gate.set()
        first_result = await first

        assert second.state == SubmissionState.FAILED
        assert second.error.kind == SubmissionErrorKind.SUBMISSION_IN_PROGRESS
        assert first_result.succeeded
        assert sales_backend.create_order.await_count == 1
        assert not checkout.is_submitting(42)

    @pytest.mark.asyncio
    async def test_invoice_is_rejected_while_order_runs(self, checkout, cart_store, sales_backend):
        await fill_cart(cart_store)
        gate = asyncio.Event()

        async def slow_create_order(payload):
            await gate.wait()
            return {"result": 901}

        sales_backend.create_order.side_effect = slow_create_order

        first = asyncio.create_task(checkout.place_order(CUSTOMER, USER))
        await asyncio.sleep(0)
        rejected = await checkout.direct_invoice(CUSTOMER)
        gate.set()
        await first

        assert rejected.error.kind == SubmissionErrorKind.SUBMISSION_IN_PROGRESS
        sales_backend.create_invoice.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_guard_released_after_failure(self, checkout, cart_store, sales_backend):
        await fill_cart(cart_store)
        sales_backend.create_order.side_effect = [asyncio.TimeoutError(), {"result": 901}]

        failed = await checkout.place_order(CUSTOMER, USER)
        retried = await checkout.place_order(CUSTOMER, USER)

        assert failed.error.kind == SubmissionErrorKind.SUBMISSION_FAILED
        assert retried.succeeded

    @pytest.mark.asyncio
    async def test_guard_released_on_cancellation(self, checkout, cart_store, sales_backend):
        await fill_cart(cart_store)

        async def never_answers(payload):
            await asyncio.Event().wait()

        sales_backend.create_order.side_effect = never_answers

        task = asyncio.create_task(checkout.place_order(CUSTOMER, USER))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert not checkout.is_submitting(42)
        assert len(cart_store.get_current_cart()) == 1


class TestCatalogSnapshot:

    @pytest.mark.asyncio
    async def test_order_uses_current_catalog(self, checkout, cart_store, sales_backend):
        await fill_cart(cart_store)

        result = await checkout.place_order(CUSTOMER, USER, TaxAssignment({1: {1, 2}}))

        assert result.payload.tax_total_amount == Decimal("1.0") + Decimal("1.0")
        assert result.payload.total_amount == Decimal("22.0")

    @pytest.mark.asyncio
    async def test_empty_catalog_gives_zero_tax(self, cart_store, sales_backend):
        checkout = CheckoutService(cart_store, sales_backend, TaxCatalog(), default_warehouse_id=1)
        await fill_cart(cart_store)

        result = await checkout.place_order(CUSTOMER, USER, TaxAssignment({1: {1}}))

        assert result.succeeded
        assert result.payload.tax_total_amount == Decimal("0")


class TestPayloadSnapshot:

    @pytest.mark.asyncio
    async def test_cart_edits_during_submit_do_not_reach_payload(self, checkout, cart_store, sales_backend):
        await fill_cart(cart_store)
        reached_backend = asyncio.Event()
        gate = asyncio.Event()
        submitted = []

        async def slow_create_order(payload):
            submitted.append(payload)
            reached_backend.set()
            await gate.wait()
            return {"result": 901}

        sales_backend.create_order.side_effect = slow_create_order

        task = asyncio.create_task(checkout.place_order(CUSTOMER, USER, TaxAssignment({1: {1}})))
        await reached_backend.wait()
        cart_store.add_or_update_line(make_line(1, quantity=9, price="10"))
        cart_store.add_or_update_line(make_line(2, quantity=1, price="5"))
        gate.set()
        result = await task

        payload = submitted[0]
        assert result.payload is payload
        assert [(line.product_id, line.qty) for line in payload.crm_product_line_ids] == [(1, 2)]
        assert payload.untaxed_total_amount == Decimal("20")
        assert payload.tax_total_amount == Decimal("1.0")
        assert payload.total_amount == Decimal("21.0")


class TestInactiveCartOwner:

    @pytest.mark.asyncio
    async def test_persisted_cart_is_loaded_and_submitted(self, cart_store, cart_storage, redis_client,
                                                         sales_backend, tax_catalog):
        await fill_cart(cart_store)
        fresh_store = CartStore(cart_storage)
        checkout = CheckoutService(fresh_store, sales_backend, TaxCatalog(tax_catalog.values()), default_warehouse_id=1)

        result = await checkout.place_order(CUSTOMER, USER)
        await fresh_store.wait_for_pending_writes()

        assert result.succeeded
        assert [(line.product_id, line.qty) for line in result.payload.crm_product_line_ids] == [(1, 2)]
        assert await redis_client.get("cart_42") is None
        assert fresh_store.active_customer_id is None

    @pytest.mark.asyncio
    async def test_text_customer_id_uses_same_cart(self, cart_store, cart_storage, sales_backend):
        await fill_cart(cart_store)
        fresh_store = CartStore(cart_storage)
        checkout = CheckoutService(fresh_store, sales_backend, TaxCatalog(), default_warehouse_id=1)

        result = await checkout.direct_invoice({"id": "42", "name": "Acme Trading"})

        assert result.succeeded
        assert [line.id for line in result.payload.lines] == [1]

    @pytest.mark.asyncio
    async def test_unreadable_cart_is_not_deleted(self, sales_backend):
        storage = AsyncMock()
        storage.get.side_effect = ConnectionError("redis down")
        checkout = CheckoutService(CartStore(storage), sales_backend, TaxCatalog(), default_warehouse_id=1)

        result = await checkout.place_order(CUSTOMER, USER)

        assert result.succeeded
        assert result.payload.crm_product_line_ids == ()
        storage.delete.assert_not_awaited()
