"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import sys
import os
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from fakeredis import FakeAsyncRedis
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Seed the environment before config is imported anywhere
os.environ.setdefault("RUNTIME_ENVIRONMENT", "TEST")
os.environ.setdefault("POS_LANGUAGE", "en")
os.environ.setdefault("ODOO_URL", "https://erp.test.local")
os.environ.setdefault("ODOO_DB", "test")
os.environ.setdefault("ODOO_USERNAME", "pos@test.local")
os.environ.setdefault("ODOO_PASSWORD", "test-password")
os.environ.setdefault("DEFAULT_WAREHOUSE_ID", "1")
os.environ.setdefault("POS_GUEST_CUSTOMER_ID", "pos_guest")
os.environ.setdefault("CURRENCY_NAME", "OMR")
os.environ.setdefault("CURRENCY_POSITION", "after")
os.environ.setdefault("CURRENCY_DECIMAL_PLACES", "3")

from enums.tax_amount_type import TaxAmountType
from models.cart import CartLineItemDTO
from models.tax import TaxDefinitionDTO
from repositories.cart_snapshot import RedisCartSnapshotStorage
from services.cart import CartStore


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create test database engine (in-memory SQLite)."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool
    )

    # Import and create all tables
    from db import Base
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Cleanup
    await engine.dispose()


@pytest_asyncio.fixture
async def test_session_factory(test_engine):
    """Session factory bound to the in-memory test database."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


# ============================================================================
# Redis Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def redis_client():
    """Create fake Redis client for testing (no real Redis server needed)."""
    client = FakeAsyncRedis(decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
def cart_storage(redis_client):
    return RedisCartSnapshotStorage(redis_client)


@pytest.fixture
def cart_store(cart_storage):
    """Session cart store persisting to fake Redis."""
    return CartStore(cart_storage)


# ============================================================================
# Domain Fixtures
# ============================================================================

def make_line(product_id, quantity=1, price="10", **extra) -> CartLineItemDTO:
    """Cart line with sensible defaults (importable helper for tests)."""
    return CartLineItemDTO(
        product_id=product_id,
        name=extra.pop("name", f"Product {product_id}"),
        unit_price=Decimal(price),
        quantity=quantity,
        **extra
    )


@pytest.fixture
def vat_5():
    return TaxDefinitionDTO(id=1, name="VAT 5%", amount_type=TaxAmountType.PERCENT, amount=Decimal("5"))


@pytest.fixture
def eco_fee():
    return TaxDefinitionDTO(id=2, name="Eco fee", amount_type=TaxAmountType.FIXED, amount=Decimal("0.5"))


@pytest.fixture
def tax_catalog(vat_5, eco_fee):
    """Tax catalog snapshot {tax_id: TaxDefinitionDTO}."""
    return {vat_5.id: vat_5, eco_fee.id: eco_fee}


@pytest.fixture
def sales_backend():
    """Mocked SalesBackend (Odoo) with successful defaults."""
    backend = AsyncMock()
    backend.fetch_taxes.return_value = {"result": []}
    backend.fetch_customer_details.return_value = {}
    backend.create_order.return_value = {"result": 901}
    backend.confirm_order.return_value = {"result": True}
    backend.create_invoice.return_value = {"id": 55}
    backend.fetch_company_currency.return_value = None
    return backend


@pytest.fixture
def notifications_received():
    return []


@pytest.fixture
def notification_sink(notifications_received):
    """UI sink collecting NotificationDTOs."""
    return notifications_received.append
