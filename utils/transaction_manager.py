import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from db import IMMEDIATE_TRANSACTION

logger = logging.getLogger(__name__)


class TransactionManager:
    """
    Commit-or-rollback boundary around a unit of work on an existing session.

    Everything executed on the session since its transaction began (including
    the guard reads done before entering the block) becomes visible together
    on commit, or not at all.

    A unit of work opened on a fresh session takes the database write lock up
    front (BEGIN IMMEDIATE on SQLite). Plain reads outside atomic() do not.
    """

    # Units of work slower than this are logged
    SLOW_TRANSACTION_SECONDS = 5

    @staticmethod
    @asynccontextmanager
    async def atomic(session: AsyncSession, name: str = "transaction") -> AsyncIterator[AsyncSession]:
        """
        Usage:
            async with TransactionManager.atomic(session, "create_order"):
                session.add(order)
                await session.execute(stmt)
        """
        transaction_start = datetime.now()
        if not session.in_transaction():
            await session.connection(execution_options={IMMEDIATE_TRANSACTION: True})
        try:
            yield session
            await session.commit()
        except BaseException as e:
            try:
                await session.rollback()
                logger.info(f"[{name}] rolled back: {type(e).__name__}: {e}")
            except Exception as rollback_error:
                logger.critical(f"[{name}] failed to rollback: {rollback_error}")
            raise

        duration = (datetime.now() - transaction_start).total_seconds()
        if duration > TransactionManager.SLOW_TRANSACTION_SECONDS:
            logger.warning(f"[{name}] exceeded {TransactionManager.SLOW_TRANSACTION_SECONDS}s: {duration:.2f}s")
        else:
            logger.debug(f"[{name}] committed in {duration:.2f}s")
