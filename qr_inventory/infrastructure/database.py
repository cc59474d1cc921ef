"""Database Session Manager — async connection pool with automatic rollback, timeouts and health checks.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - Every unit of work is bounded by the store timeout (asyncio.timeout)
    - Connection pool uses pool_pre_ping for stale connection detection
    - All SQLAlchemy exceptions and timeouts mapped to StoreError (core/errors.py)
    - Domain errors raised inside a session pass through untouched

Design Decisions:
    - One manager per process, handed to every service constructor; no module singleton
    - expire_on_commit=False: prevents lazy-load issues in async context
    - Services that expect an IntegrityError (lend races, duplicate keys) catch it
      inside the session block and raise their own conflict error first
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)

from qr_inventory.core.errors import StoreError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        engine = create_async_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
        self._bind(engine, timeout)

    @classmethod
    def from_engine(
        cls, engine: AsyncEngine, timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> "DatabaseSessionManager":
        """Wrap an engine built elsewhere (tests, scripts)."""
        manager = cls.__new__(cls)
        manager._bind(engine, timeout)
        return manager

    def _bind(self, engine: AsyncEngine, timeout: float) -> None:
        self.engine = engine
        self.timeout = timeout
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            async with asyncio.timeout(self.timeout):
                yield session
        except IntegrityError as e:
            await session.rollback()
            logger.error(f"DB integrity error: {e}")
            raise StoreError("Integrity constraint violated", "commit")
        except OperationalError as e:
            await session.rollback()
            logger.error(f"DB operational error: {e}")
            raise StoreError("Connection or operational error", "execute")
        except DBAPIError as e:
            await session.rollback()
            logger.error(f"DB driver error: {e}")
            raise StoreError("Database driver error", "query")
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"SQLAlchemy error: {e}")
            raise StoreError("Database operation failed", "unknown")
        except TimeoutError:
            await session.rollback()
            logger.error(f"DB call exceeded {self.timeout}s")
            raise StoreError(f"No response within {self.timeout}s", "timeout")
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness checks)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except StoreError as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()
