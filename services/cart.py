import asyncio
import json
import logging
from collections.abc import Iterable, Mapping

from pydantic import ValidationError

from exceptions.cart import (
    NoActiveCustomerException,
    CorruptCartSnapshotException,
    CartPersistenceException
)
from models.cart import CartLineItemDTO
from repositories.cart_snapshot import CartSnapshotStorage, cart_key


def normalize_customer_id(customer_id):
    """Numeric ids given as text ("42") name the same cart as 42; both persist as cart_42."""
    if isinstance(customer_id, str) and customer_id.strip().isdecimal():
        return int(customer_id.strip())
    return customer_id


class CartStore:
    """
    Owns one cart per customer id and tracks the active customer.

    The in-memory carts are authoritative for the session. Every mutation bumps a
    per-customer version and schedules a fire-and-forget write of the whole cart
    to the durable storage under cart_<customer_id>. Writes for one customer run
    one at a time and skip themselves when a newer version exists, so only the
    last state is kept. Storage failures are logged and never touch memory.

    Built once per application session (see PosApp) and passed to the services
    that need it.
    """

    def __init__(self, storage: CartSnapshotStorage | None = None):
        self._storage = storage
        self._carts: dict = {}
        self._active_customer_id = None
        self._versions: dict = {}
        self._write_locks: dict = {}
        self._pending_writes: set[asyncio.Task] = set()

    @property
    def active_customer_id(self):
        return self._active_customer_id

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_current_cart(self) -> list[CartLineItemDTO]:
        """Active customer's lines in insertion order (empty when no customer is active)."""
        if self._active_customer_id is None:
            return []
        return list(self._carts.get(self._active_customer_id, []))

    def get_cart(self, customer_id) -> list[CartLineItemDTO]:
        customer_id = normalize_customer_id(customer_id)
        return list(self._carts.get(customer_id, []))

    def find_line(self, product_id) -> CartLineItemDTO | None:
        for line in self.get_current_cart():
            if line.product_id == product_id:
                return line
        return None

    # ------------------------------------------------------------------
    # Active customer
    # ------------------------------------------------------------------

    async def set_active_customer(self, customer_id) -> list[CartLineItemDTO]:
        """
        Make customer_id the active customer.

        A customer seen for the first time gets its persisted cart loaded (or an
        empty cart). Carts already in memory are never reloaded, so switching
        away and back returns exactly the same lines.

        Returns:
            The now-current cart
        """
        customer_id = normalize_customer_id(customer_id)
        self._active_customer_id = customer_id
        await self.ensure_loaded(customer_id)
        return self.get_current_cart()

    async def ensure_loaded(self, customer_id) -> list[CartLineItemDTO]:
        """
        Bring a customer's persisted cart into memory without making it active.

        Carts already in memory are left untouched.
        """
        customer_id = normalize_customer_id(customer_id)
        if customer_id is None or customer_id in self._carts:
            return self.get_cart(customer_id)

        self._carts[customer_id] = []
        version_before_load = self._versions.get(customer_id, 0)
        lines = await self._read_persisted(customer_id)

        # Keep edits made while the read was in flight
        if self._versions.get(customer_id, 0) == version_before_load:
            self._carts[customer_id] = lines
            if lines:
                logging.info(f"🛒 Restored cart of customer {customer_id} ({len(lines)} line(s))")
        return self.get_cart(customer_id)

    async def migrate_current_cart(self, customer_id) -> list[CartLineItemDTO]:
        """
        Move the active cart to another customer and make that customer active.

        Used when a quick-sale (guest) cart gets a real customer. The target's
        previous cart is replaced; the source cart is emptied.
        """
        customer_id = normalize_customer_id(customer_id)
        source_id = self._active_customer_id
        lines = self.get_current_cart()
        if source_id == customer_id:
            return lines

        self.load_cart(customer_id, lines)
        if source_id is not None:
            self.clear_cart(source_id)
        self._active_customer_id = customer_id
        logging.info(f"🛒 Moved cart from customer {source_id} to {customer_id} ({len(lines)} line(s))")
        return self.get_current_cart()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_or_update_line(self, item: CartLineItemDTO) -> list[CartLineItemDTO]:
        """
        Replace the line with the same product id, or append a new one.

        The item is taken as-is: callers compute new quantities and prices
        (see CartEditingService).

        Raises:
            NoActiveCustomerException: No customer is active
        """
        customer_id = self._require_active("update the cart")
        cart = self._carts.setdefault(customer_id, [])

        for index, line in enumerate(cart):
            if line.product_id == item.product_id:
                cart[index] = item
                break
        else:
            cart.append(item)

        self._schedule_write(customer_id)
        return list(cart)

    def remove_line(self, product_id) -> list[CartLineItemDTO]:
        """Remove the product's line from the active cart. Unknown products are ignored."""
        customer_id = self._require_active("remove a cart line")
        cart = self._carts.setdefault(customer_id, [])
        remaining = [line for line in cart if line.product_id != product_id]

        if len(remaining) != len(cart):
            self._carts[customer_id] = remaining
            self._schedule_write(customer_id)
        return list(remaining)

    def load_cart(self, customer_id, lines: Iterable) -> list[CartLineItemDTO]:
        """
        Replace a customer's whole in-memory cart.

        Lines may be CartLineItemDTO or raw product records. A repeated product
        id keeps its first position and the last given values.
        """
        customer_id = normalize_customer_id(customer_id)
        by_product: dict = {}
        for line in lines:
            if isinstance(line, Mapping):
                line = CartLineItemDTO.model_validate(line)
            by_product[line.product_id] = line

        self._carts[customer_id] = list(by_product.values())
        self._schedule_write(customer_id)
        return list(self._carts[customer_id])

    def clear_current_cart(self) -> None:
        customer_id = self._require_active("clear the cart")
        self.clear_cart(customer_id)

    def clear_cart(self, customer_id) -> None:
        """Empty a customer's in-memory cart (the persisted copy is overwritten with an empty cart)."""
        customer_id = normalize_customer_id(customer_id)
        self._carts[customer_id] = []
        self._schedule_write(customer_id)

    # ------------------------------------------------------------------
    # Durable copy
    # ------------------------------------------------------------------

    async def delete_persisted_cart(self, customer_id) -> None:
        """
        Delete cart_<customer_id> from the durable storage.

        Writes still pending for this customer are invalidated first, so a
        deleted cart is not brought back by an older write.

        Raises:
            CartPersistenceException: The storage delete failed
        """
        customer_id = normalize_customer_id(customer_id)
        self._bump_version(customer_id)
        if self._storage is None:
            return

        key = cart_key(customer_id)
        async with self._write_lock(customer_id):
            try:
                await self._storage.delete(key)
            except Exception as e:
                raise CartPersistenceException(key, "delete", str(e)) from e
        logging.info(f"🗑️ Deleted persisted cart {key}")

    async def wait_for_pending_writes(self) -> None:
        """Wait until every scheduled write has finished (used on shutdown and in tests)."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes), return_exceptions=True)

    def _require_active(self, operation: str):
        if self._active_customer_id is None:
            raise NoActiveCustomerException(operation)
        return self._active_customer_id

    def _bump_version(self, customer_id) -> int:
        version = self._versions.get(customer_id, 0) + 1
        self._versions[customer_id] = version
        return version

    def _write_lock(self, customer_id) -> asyncio.Lock:
        if customer_id not in self._write_locks:
            self._write_locks[customer_id] = asyncio.Lock()
        return self._write_locks[customer_id]

    def _schedule_write(self, customer_id) -> None:
        version = self._bump_version(customer_id)
        if self._storage is None:
            return

        lines = list(self._carts.get(customer_id, []))
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logging.warning(f"No running event loop, cart of customer {customer_id} kept in memory only")
            return

        task = loop.create_task(self._write_persisted(customer_id, version, lines))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _write_persisted(self, customer_id, version: int, lines: list[CartLineItemDTO]) -> None:
        key = cart_key(customer_id)
        async with self._write_lock(customer_id):
            if self._versions.get(customer_id) != version:
                # Superseded by a newer write or a delete
                return
            try:
                await self._storage.set(key, self.serialize_lines(lines))
            except Exception as e:
                logging.warning(f"⚠️ {CartPersistenceException(key, 'write', str(e))}")

    async def _read_persisted(self, customer_id) -> list[CartLineItemDTO]:
        if self._storage is None:
            return []

        key = cart_key(customer_id)
        try:
            raw = await self._storage.get(key)
        except Exception as e:
            logging.warning(f"⚠️ {CartPersistenceException(key, 'read', str(e))} - starting with an empty cart")
            return []
        if raw is None:
            return []

        try:
            return self.deserialize_lines(key, raw)
        except CorruptCartSnapshotException as e:
            logging.warning(f"⚠️ {e} - starting with an empty cart")
            return []

    @staticmethod
    def serialize_lines(lines: Iterable[CartLineItemDTO]) -> str:
        return json.dumps([line.model_dump(mode="json", by_alias=True) for line in lines])

    @staticmethod
    def deserialize_lines(key: str, raw: str | bytes) -> list[CartLineItemDTO]:
        """
        Decode a persisted cart.

        Raises:
            CorruptCartSnapshotException: Not JSON, not a list, or a line fails validation
        """
        try:
            records = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CorruptCartSnapshotException(key, f"invalid JSON ({e})") from e
        if not isinstance(records, list):
            raise CorruptCartSnapshotException(key, f"expected a list, got {type(records).__name__}")

        lines: dict = {}
        for record in records:
            try:
                line = CartLineItemDTO.model_validate(record)
            except ValidationError as e:
                raise CorruptCartSnapshotException(key, f"invalid line ({e.error_count()} error(s))") from e
            lines[line.product_id] = line
        return list(lines.values())
