"""
Base service class providing common functionality for all services.
"""

import contextlib
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from hostel_ledger.core.logging import get_logger


class BaseService:
    """
    Base service with common behaviors:
    - Shared logger and db session
    - Transaction management utilities

    Services raise application exceptions from ``hostel_ledger.core.exceptions``;
    the API layer renders them.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize base service.

        Args:
            session: Async database session
        """
        self.session = session
        self._logger = get_logger(self.__class__.__name__)

    # -------------------------------------------------------------------------
    # Transaction Management
    # -------------------------------------------------------------------------

    @contextlib.asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """
        Commit on success, roll back on any exception.

        Example:
            async with self.transaction():
                await self.repository.create(data)
        """
        try:
            yield self.session
            await self._commit()
        except Exception as e:
            await self._rollback()
            self._logger.debug(f"Transaction rolled back: {type(e).__name__}")
            raise

    async def _commit(self) -> None:
        await self.session.commit()
        self._logger.debug("Transaction committed successfully")

    async def _rollback(self) -> None:
        """Rollback the current transaction, suppressing rollback errors."""
        try:
            await self.session.rollback()
        except Exception as e:
            # Rollback errors must not mask the original error
            self._logger.warning(f"Rollback failed: {e}")
