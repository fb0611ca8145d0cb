from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator
import logging

from sqlalchemy import CursorResult, Result, event, inspect
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncEngine

import config
from models import Base

"""
Imports in models/__init__.py are needed to correctly create tables in the database.
For more information see https://stackoverflow.com/questions/7478403/sqlalchemy-classes-across-files
"""

logger = logging.getLogger(__name__)

# HARD DISABLE SQL echo - logs would be cluttered with SQL statements
sql_echo = False

# Execution option: start the transaction holding the SQLite write lock
IMMEDIATE_TRANSACTION = "storefront_begin_immediate"


def configure_sqlite_engine(engine: AsyncEngine) -> None:
    """
    Apply SQLite connection settings to an async engine.

    - PRAGMA foreign_keys=ON (order_items -> orders cascade, products restrict)
    - plain reads run in a deferred BEGIN and never block each other
    - connections opened with IMMEDIATE_TRANSACTION start with BEGIN IMMEDIATE

    SQLite has no SELECT ... FOR UPDATE. Taking the write lock at BEGIN makes the
    stock check/decrement and the payment status guard serializable; other
    writers wait on the busy timeout instead of failing with a deadlock.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        # Disable the driver's own BEGIN, do_begin() below emits it
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        if conn.get_execution_options().get(IMMEDIATE_TRANSACTION):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


def build_engine(url: str) -> AsyncEngine:
    if url.startswith("sqlite"):
        new_engine = create_async_engine(url, echo=sql_echo, connect_args={"timeout": 30})
        configure_sqlite_engine(new_engine)
    else:
        new_engine = create_async_engine(url, echo=sql_echo, pool_pre_ping=True)
    return new_engine


def build_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


if config.DB_URL.startswith("sqlite+aiosqlite:///data/"):
    data_folder = Path("data")
    if data_folder.exists() is False:
        data_folder.mkdir()

engine = build_engine(config.DB_URL)
session_maker = build_session_maker(engine)


@asynccontextmanager
async def get_db_session() -> AsyncIterator[AsyncSession]:
    async with session_maker() as session:
        yield session


async def check_all_tables_exist(bind: AsyncEngine) -> bool:
    async with bind.connect() as conn:
        existing = await conn.run_sync(lambda sync_conn: set(inspect(sync_conn).get_table_names()))
    return all(table.name in existing for table in Base.metadata.tables.values())


async def create_db_and_tables(bind: AsyncEngine | None = None):
    bind = bind or engine
    if await check_all_tables_exist(bind):
        logger.info("[DB] All tables present")
        return
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"[DB] Created tables: {', '.join(Base.metadata.tables.keys())}")


async def session_execute(stmt, session: AsyncSession) -> Result[Any] | CursorResult[Any]:
    query_result = await session.execute(stmt)
    return query_result


async def session_flush(session: AsyncSession) -> None:
    await session.flush()
