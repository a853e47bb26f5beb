"""Database Session Manager — one async engine per process, one session per request.

Invariants:
    - A session that raises is rolled back before the error leaves the context manager
    - Raw SQLAlchemy errors never reach routes: a uniqueness/foreign-key violation is a
      ConflictError, anything else a DatabaseError (core/errors.py)
    - GatherwiseError subclasses raised inside a session propagate unchanged
    - Sessions keep attribute values after commit (expire_on_commit=False)

Design Decisions:
    - Module-level db_manager set by the FastAPI lifespan; tests swap it for an in-memory engine
    - Pool sizing is only passed for server databases; SQLite keeps its dialect default pool
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from app.config import Settings
from app.core.errors import ConflictError, DatabaseError, GatherwiseError

logger = logging.getLogger(__name__)


def _translate(error: SQLAlchemyError) -> GatherwiseError:
    """Map a SQLAlchemy failure onto the domain error the API reports."""
    if isinstance(error, IntegrityError):
        logger.warning(f"Constraint violation: {error.orig}")
        return ConflictError("Record conflicts with existing data")
    if isinstance(error, OperationalError):
        logger.error(f"Database unreachable or operation aborted: {error}")
        return DatabaseError("Connection or operational error", "execute")
    if isinstance(error, DBAPIError):
        logger.error(f"Driver rejected statement: {error}")
        return DatabaseError("Database driver error", "query")
    logger.error(f"Unexpected SQLAlchemy failure: {error}")
    return DatabaseError("Database operation failed", "unknown")


class DatabaseSessionManager:
    """Owns the engine and hands out request-scoped sessions."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        options: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            options.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **options)
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "DatabaseSessionManager":
        return cls(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self._session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                raise _translate(e) from e
            except GatherwiseError:
                await session.rollback()
                raise

    async def health_check(self) -> bool:
        """True when a trivial query round-trips (readiness check)."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Database readiness check failed: {e}")
            return False
        return True

    async def close(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(settings: Settings) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager.from_settings(settings)
    return db_manager


async def close_db() -> None:
    global db_manager
    if db_manager is not None:
        await db_manager.close()
        db_manager = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    if db_manager is None:
        raise DatabaseError("Database not initialized", "connect")
    async with db_manager.session() as session:
        yield session
