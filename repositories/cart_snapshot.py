import logging
from typing import Protocol

from redis.asyncio import Redis
from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from db import get_db_session, session_execute, session_flush, session_commit
from models.cart_snapshot import CartSnapshot

CART_KEY_PREFIX = "cart_"


def cart_key(customer_id) -> str:
    """Durable key of a customer's cart, e.g. cart_42."""
    return f"{CART_KEY_PREFIX}{customer_id}"


class CartSnapshotStorage(Protocol):
    """Durable key-value store for serialized carts. Values are JSON strings."""

    async def get(self, key: str) -> str | None:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...


class CartSnapshotRepository:
    """
    Repository for the cart_snapshots table.

    Same key-value shape as the Redis storage, so a single-node POS can keep
    carts in the local SQLite database instead.
    """

    @staticmethod
    async def get(key: str, session: AsyncSession) -> str | None:
        """
        Get a serialized cart by key.

        Args:
            key: Cart key (e.g., "cart_42")
            session: Database session

        Returns:
            JSON string, or None if not found
        """
        stmt = select(CartSnapshot).where(CartSnapshot.key == key)
        result = await session_execute(stmt, session)
        snapshot = result.scalar()
        return snapshot.value if snapshot else None

    @staticmethod
    async def set(key: str, value: str, session: AsyncSession) -> None:
        """Insert or update a serialized cart."""
        existing = await CartSnapshotRepository.get(key, session)

        if existing is not None:
            stmt = update(CartSnapshot).where(CartSnapshot.key == key).values(value=value)
            await session_execute(stmt, session)
        else:
            session.add(CartSnapshot(key=key, value=value))
            await session_flush(session)

    @staticmethod
    async def delete(key: str, session: AsyncSession) -> None:
        stmt = delete(CartSnapshot).where(CartSnapshot.key == key)
        await session_execute(stmt, session)


class SqlCartSnapshotStorage:
    """CartSnapshotStorage on SQLAlchemy (aiosqlite). One short session per call."""

    def __init__(self, session_factory: async_sessionmaker | None = None):
        self.session_factory = session_factory

    async def get(self, key: str) -> str | None:
        async with get_db_session(self.session_factory) as session:
            return await CartSnapshotRepository.get(key, session)

    async def set(self, key: str, value: str) -> None:
        async with get_db_session(self.session_factory) as session:
            await CartSnapshotRepository.set(key, value, session)
            await session_commit(session)

    async def delete(self, key: str) -> None:
        async with get_db_session(self.session_factory) as session:
            await CartSnapshotRepository.delete(key, session)
            await session_commit(session)
        logging.debug(f"Deleted cart snapshot {key}")


class RedisCartSnapshotStorage:
    """
    CartSnapshotStorage on Redis.

    Usage:
        storage = RedisCartSnapshotStorage(redis)
        await storage.set(cart_key(42), "[...]")
    """

    def __init__(self, redis: Redis):
        """
        Args:
            redis: Redis client (decode_responses may be on or off)
        """
        self.redis = redis

    async def get(self, key: str) -> str | None:
        value = await self.redis.get(key)
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str) -> None:
        await self.redis.set(key, value)

    async def delete(self, key: str) -> None:
        await self.redis.delete(key)
        logging.debug(f"Deleted cart snapshot {key}")
