from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import text, Result, CursorResult
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncEngine

import config
from models.base import Base
"""
Imports of these models are needed to correctly create tables in the database.
For more information see https://stackoverflow.com/questions/7478403/sqlalchemy-classes-across-files
"""
from models.cart_snapshot import CartSnapshot

# SQL echo stays off; SQLAlchemy/aiosqlite loggers are tuned in utils/logging_config.py
sql_echo = False

data_folder = Path("data")
url = f"sqlite+aiosqlite:///{data_folder / config.DB_NAME}"
engine = create_async_engine(url, echo=sql_echo)
session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@asynccontextmanager
async def get_db_session(factory: async_sessionmaker | None = None) -> AsyncSession:
    async with (factory or session_maker)() as session:
        try:
            yield session
        finally:
            await session.close()


async def session_execute(stmt, session: AsyncSession) -> Result[Any] | CursorResult[Any]:
    query_result = await session.execute(stmt)
    return query_result


async def session_flush(session: AsyncSession) -> None:
    await session.flush()


async def session_commit(session: AsyncSession) -> None:
    await session.commit()


async def check_all_tables_exist(session: AsyncSession) -> bool:
    for table in Base.metadata.tables.values():
        sql_query = text("SELECT name FROM sqlite_master WHERE type='table' AND name=:name")
        result = await session.execute(sql_query, {"name": table.name})
        if result.scalar() is None:
            return False
    return True


async def create_db_and_tables(db_engine: AsyncEngine | None = None):
    """Create missing tables. Existing cart snapshots are kept."""
    db_engine = db_engine or engine
    if db_engine is engine and data_folder.exists() is False:
        data_folder.mkdir()
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with get_db_session(factory) as session:
        if await check_all_tables_exist(session):
            return
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
