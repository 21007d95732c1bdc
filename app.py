import logging
from collections.abc import Callable

from redis.asyncio import Redis

import config
from db import create_db_and_tables, engine
from enums.cart_storage_backend import CartStorageBackend
from models.cart import CartLineItemDTO
from models.customer import CustomerDTO
from models.tax import TaxAssignment
from odoo_api.OdooApiWrapper import OdooApiWrapper
from repositories.cart_snapshot import (
    CartSnapshotStorage,
    RedisCartSnapshotStorage,
    SqlCartSnapshotStorage
)
from services.cart import CartStore
from services.checkout import CheckoutService
from services.currency import CurrencyFormatter
from services.notification import NotificationService
from services.sales_backend import SalesBackend
from services.tax import TaxService
from services.tax_catalog import TaxCatalog
from utils.config_validator import validate_or_exit
from utils.logging_config import setup_logging


class PosApp:
    """
    One POS application session: the cart store, tax catalog, checkout and
    backend client, built once at startup and handed to the screens.

    Usage:
        app = await PosApp.create(notification_sink=show_toast)
        await app.refresh_taxes()
        await app.open_customer_cart({"id": 42, "name": "Acme"})
        ...
        await app.close()
    """

    def __init__(
        self,
        cart_store: CartStore,
        tax_catalog: TaxCatalog,
        backend: SalesBackend,
        checkout: CheckoutService,
        currency: CurrencyFormatter,
        notifications: NotificationService,
        redis: Redis | None = None
    ):
        self.cart_store = cart_store
        self.tax_catalog = tax_catalog
        self.backend = backend
        self.checkout = checkout
        self.currency = currency
        self.notifications = notifications
        self.redis = redis

    @classmethod
    async def create(
        cls,
        backend: SalesBackend | None = None,
        storage: CartSnapshotStorage | None = None,
        notification_sink: Callable | None = None,
        configure_logging: bool = True
    ) -> "PosApp":
        """
        Build the session from config.

        Args:
            backend: Sales backend; an OdooApiWrapper from ODOO_* settings when omitted
            storage: Cart snapshot storage; chosen by CART_STORAGE_BACKEND when omitted
            notification_sink: UI callback receiving NotificationDTO toasts
            configure_logging: Install the rotating/masked log handlers
        """
        if configure_logging:
            setup_logging()

        if backend is None:
            validate_or_exit(config)
            backend = OdooApiWrapper()

        redis = None
        if storage is None:
            if config.CART_STORAGE_BACKEND == CartStorageBackend.REDIS:
                redis = Redis(
                    host=config.REDIS_HOST,
                    port=config.REDIS_PORT,
                    db=config.REDIS_DB,
                    password=config.REDIS_PASSWORD,
                    decode_responses=True
                )
                storage = RedisCartSnapshotStorage(redis)
            else:
                await create_db_and_tables(engine)
                storage = SqlCartSnapshotStorage()
        logging.info(f"🛒 Cart storage: {type(storage).__name__}")

        notifications = NotificationService(notification_sink)
        cart_store = CartStore(storage)
        tax_catalog = TaxCatalog()
        checkout = CheckoutService(cart_store, backend, tax_catalog, notifications)
        return cls(cart_store, tax_catalog, backend, checkout, CurrencyFormatter(), notifications, redis)

    async def refresh_taxes(self) -> list:
        return await self.tax_catalog.refresh(self.backend, config.TAX_TYPE_USE)

    async def load_currency(self) -> None:
        """Switch to the company currency reported by the backend (kept as configured on failure)."""
        fetch_currency = getattr(self.backend, "fetch_company_currency", None)
        if fetch_currency is None:
            return
        try:
            currency_data = await fetch_currency()
        except Exception as e:
            logging.warning(f"Could not load company currency, keeping {self.currency.currency.name}: {e}")
            return
        self.currency.set_from_backend(currency_data)

    async def open_customer_cart(self, customer: CustomerDTO | dict) -> list[CartLineItemDTO]:
        """Make the customer's cart current (loading the saved copy on first use)."""
        if not isinstance(customer, CustomerDTO):
            customer = CustomerDTO.model_validate(customer)
        return await self.cart_store.set_active_customer(customer.cart_owner_id)

    async def start_quick_sale(self) -> list[CartLineItemDTO]:
        """Make the POS guest cart current."""
        return await self.cart_store.set_active_customer(config.POS_GUEST_CUSTOMER_ID)

    async def assign_customer(self, customer: CustomerDTO | dict) -> list[CartLineItemDTO]:
        """Move the current (usually guest) cart to the picked customer."""
        if not isinstance(customer, CustomerDTO):
            customer = CustomerDTO.model_validate(customer)
        return await self.cart_store.migrate_current_cart(customer.cart_owner_id)

    def seed_tax_assignments(self, existing: TaxAssignment | None = None) -> TaxAssignment:
        """Default taxes of the current cart's products, keeping user selections."""
        return TaxService.auto_seed_assignments(self.cart_store.get_current_cart(), existing)

    async def close(self) -> None:
        await self.cart_store.wait_for_pending_writes()
        close_backend = getattr(self.backend, "close", None)
        if close_backend is not None:
            await close_backend()
        if self.redis is not None:
            await self.redis.aclose()
        logging.info("POS session closed")
