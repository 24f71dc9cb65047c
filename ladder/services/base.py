"""
Base class for read-side ladder services.

Services take an async session factory rather than the Database facade, so
they can be built from the bot's sessionmaker or a test's. Reads that hit a
locked SQLite file while a ledger or lifecycle transaction is committing are
retried with exponential backoff.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Awaitable, Callable, TypeVar
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from ladder.constants import DatabaseConstants

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseService:
    """Read-only session scope plus lock-aware retries."""

    def __init__(self, session_factory, max_retries: int = DatabaseConstants.MAX_READ_RETRIES):
        self.session_factory = session_factory
        self.max_retries = max_retries

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session for reads; nothing is committed and the transaction is always rolled back"""
        async with self.session_factory() as session:
            try:
                yield session
            finally:
                await session.rollback()

    @staticmethod
    def is_lock_error(error: OperationalError) -> bool:
        message = str(error.orig if error.orig is not None else error).lower()
        return any(marker in message for marker in DatabaseConstants.LOCK_ERROR_MARKERS)

    async def execute_with_retry(self, func: Callable[[], Awaitable[T]]) -> T:
        """Run a read, retrying only while the database reports it is locked"""
        delay = DatabaseConstants.RETRY_BASE_DELAY
        for attempt in range(1, self.max_retries + 1):
            try:
                return await func()
            except OperationalError as e:
                if attempt == self.max_retries or not self.is_lock_error(e):
                    raise
                logger.warning(f"Database locked during {func.__name__} (attempt {attempt}), retrying in {delay:.2f}s")
                await asyncio.sleep(delay)
                delay *= 2
