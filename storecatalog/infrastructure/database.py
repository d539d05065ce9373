"""Database configuration and session management.

Provides the async SQLAlchemy engine, session factory and the
translation of store faults into domain errors.
"""

import functools
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime, timezone
from typing import Any, ParamSpec, TypeVar

import structlog
from sqlalchemy import DateTime, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool
from sqlalchemy.types import TypeDecorator

from storecatalog.domain.exceptions import StoreFailureError
from storecatalog.infrastructure.config import settings

logger = structlog.get_logger()

P = ParamSpec("P")
R = TypeVar("R")

# Base class for models
Base = declarative_base()


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime stored as UTC.

    Backends without timezone support (SQLite) return naive values;
    those are read back as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class Database:
    """Engine and session factory for one database URL.

    Example usage:
        database = Database("sqlite+aiosqlite://")
        await database.create_all()
        async with database.session_factory() as session:
            ...
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        """Create the engine for a database URL.

        Args:
            url: SQLAlchemy async database URL.
            echo: Whether to log emitted SQL.
        """
        engine_options: dict[str, Any] = {"echo": echo}
        if url.startswith("sqlite"):
            # A single shared connection keeps in-memory databases alive
            engine_options.update(
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        else:
            engine_options["pool_pre_ping"] = True

        self.url = url
        self.engine = create_async_engine(url, **engine_options)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_all(self) -> None:
        """Create all tables that do not exist yet."""
        # Models register themselves on Base when imported
        import storecatalog.catalog.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> None:
        """Run a trivial query to check connectivity."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()


_database: Database | None = None


def get_database() -> Database:
    """Get the process-wide database singleton."""
    global _database
    if _database is None:
        _database = Database(settings.database_url, echo=settings.debug)
    return _database


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session.

    Services commit their own writes; anything left uncommitted is
    rolled back when the session closes.

    Yields:
        AsyncSession for database operations.
    """
    async with get_database().session_factory() as session:
        yield session


def store_operation(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
    """Translate SQLAlchemy faults raised by a store call into StoreFailureError.

    Faults are reported, never retried.
    """

    @functools.wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return await func(*args, **kwargs)
        except SQLAlchemyError as exc:
            logger.error(
                "Store operation failed",
                operation=func.__qualname__,
                error=str(exc),
            )
            raise StoreFailureError(func.__qualname__, str(exc)) from exc

    return wrapper
