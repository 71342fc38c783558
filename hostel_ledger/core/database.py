"""
Database Management and Connection Handling

Async engine, session factory and the per-request session dependency.
"""

import contextlib
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from hostel_ledger.config.settings import settings
from hostel_ledger.core.exceptions import DatabaseError
from hostel_ledger.core.logging import get_logger

logger = get_logger(__name__)


class DatabaseManager:
    """Main database connection and session manager"""

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or settings.get_database_url()
        self.async_engine: Optional[AsyncEngine] = None
        self.async_session_factory: Optional[async_sessionmaker] = None
        self._initialized = False

    def initialize(self):
        """Create the async engine and session factory"""
        if self._initialized:
            return

        engine_kwargs: Dict[str, Any] = {'echo': settings.DB_ECHO}

        # Use StaticPool for SQLite, the default queue pool for others
        if self.database_url.startswith('sqlite'):
            engine_kwargs.update({
                'poolclass': StaticPool,
                'connect_args': {"check_same_thread": False},
            })
        else:
            engine_kwargs.update({
                'pool_size': settings.DB_POOL_SIZE,
                'max_overflow': settings.DB_POOL_OVERFLOW,
                'pool_pre_ping': True,
            })

        self.async_engine = create_async_engine(self.database_url, **engine_kwargs)
        self.async_session_factory = async_sessionmaker(
            bind=self.async_engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        self._initialized = True
        logger.info("Database manager initialized", extra={
            'driver': self.async_engine.dialect.name,
        })

    async def create_all(self):
        """Create tables for every registered model (development and tests)"""
        from hostel_ledger.models import Base

        self.initialize()
        async with self.async_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    @contextlib.asynccontextmanager
    async def get_async_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get async database session with automatic cleanup"""
        self.initialize()

        session = self.async_session_factory()
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error(f"Database session error: {type(e).__name__}")
            raise
        finally:
            await session.close()

    async def check_database_health(self) -> Dict[str, Any]:
        """Check database health and return status"""
        try:
            async with self.get_async_session() as session:
                await session.execute(text("SELECT 1"))
            return {"status": "healthy"}
        except Exception as e:
            logger.error(f"Database health check failed: {str(e)}")
            return {"status": "unhealthy", "error": type(e).__name__}

    async def close(self):
        """Close all database connections"""
        if self.async_engine:
            await self.async_engine.dispose()
            logger.info("Async database engine disposed")
        self._initialized = False


# Global database manager instance
database_manager = DatabaseManager()


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request"""
    async with database_manager.get_async_session() as session:
        yield session


async def init_db():
    """Create the schema outside production (use migrations in production)"""
    try:
        await database_manager.create_all()
    except Exception as e:
        logger.error(f"Failed to initialize database schema: {str(e)}")
        raise DatabaseError("Database initialization failed") from e


__all__ = [
    "DatabaseManager",
    "database_manager",
    "get_db_session",
    "init_db",
]
