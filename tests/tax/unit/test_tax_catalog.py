"""
Unit Tests: TaxCatalog

Tests for services/tax_catalog.py covering:
- refresh() - {"result": [...]} and plain list responses
- Malformed records are skipped
- Backend failures leave an empty catalog (fail-open)
"""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from enums.tax_amount_type import TaxAmountType
from exceptions.remote import RemoteCallException
from services.tax_catalog import TaxCatalog

TAX_RECORDS = [
    {"id": 1, "name": "VAT 5%", "amount_type": "percent", "amount": 5.0},
    {"id": 2, "name": "Eco fee", "amount_type": "fixed", "amount": 0.5},
]


@pytest.fixture
def backend():
    backend = AsyncMock()
    backend.fetch_taxes.return_value = {"result": TAX_RECORDS}
    return backend


class TestTaxCatalogRefresh:

    @pytest.mark.asyncio
    async def test_refresh_loads_taxes(self, backend):
        catalog = TaxCatalog()

        taxes = await catalog.refresh(backend, "sale")

        backend.fetch_taxes.assert_awaited_once_with("sale")
        assert len(taxes) == 2
        assert len(catalog) == 2
        assert catalog.get(1).amount_type == TaxAmountType.PERCENT
        assert catalog.get(2).amount == Decimal("0.5")

    @pytest.mark.asyncio
    async def test_list_response_is_accepted(self, backend):
        backend.fetch_taxes.return_value = TAX_RECORDS
        catalog = TaxCatalog()

        await catalog.refresh(backend)

        assert [tax.id for tax in catalog] == [1, 2]

    @pytest.mark.asyncio
    async def test_malformed_records_are_skipped(self, backend):
        backend.fetch_taxes.return_value = {"result": TAX_RECORDS + [
            {"id": 3, "name": "Group", "amount_type": "group", "amount": 0},
            {"name": "No id", "amount_type": "percent", "amount": 1},
        ]}
        catalog = TaxCatalog()

        await catalog.refresh(backend)

        assert sorted(catalog.by_id) == [1, 2]

    @pytest.mark.asyncio
    async def test_backend_failure_empties_catalog(self, backend):
        catalog = TaxCatalog()
        await catalog.refresh(backend)
        backend.fetch_taxes.side_effect = RemoteCallException("object.execute_kw", "timed out after 30s")

        taxes = await catalog.refresh(backend)

        assert taxes == []
        assert len(catalog) == 0

    @pytest.mark.asyncio
    async def test_snapshot_is_not_affected_by_later_refresh(self, backend):
        catalog = TaxCatalog()
        await catalog.refresh(backend)
        snapshot = catalog.by_id
        backend.fetch_taxes.return_value = {"result": []}

        await catalog.refresh(backend)

        assert len(snapshot) == 2
        assert len(catalog.snapshot()) == 0
