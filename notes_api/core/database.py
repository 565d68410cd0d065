"""
Database Configuration.

SQLAlchemy async engine and session management.
Uses lazy initialization to prevent import-time failures when .env is not configured.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from tenacity import AsyncRetrying, stop_after_attempt, wait_incrementing

from notes_api.core.logging import get_logger

logger = get_logger(__name__)

# Module-level state for lazy initialization
_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def engine_options(url: str, app_config: Any) -> dict[str, Any]:
    """
    Keyword arguments for create_async_engine.

    timeouts.database is handed to the driver as its `timeout` connect
    argument: the connect timeout for asyncpg, the lock wait for aiosqlite.
    Pool sizing only applies to server databases.
    """
    db_config = app_config.database
    options: dict[str, Any] = {
        "echo": db_config.echo,
        "echo_pool": db_config.echo_pool,
        "connect_args": {"timeout": app_config.application.timeouts.database},
    }
    if not url.startswith("sqlite"):
        options.update(
            pool_size=db_config.pool_size,
            max_overflow=db_config.max_overflow,
            pool_timeout=db_config.pool_timeout,
            pool_recycle=db_config.pool_recycle,
            pool_pre_ping=True,
        )
    return options


def _create_engine() -> AsyncEngine:
    """Create async SQLAlchemy engine."""
    from notes_api.core.config import get_app_config, get_database_url

    url = get_database_url()
    engine = create_async_engine(url, **engine_options(url, get_app_config()))
    logger.debug("Database engine created", extra={"driver": engine.url.drivername})
    return engine


def get_engine() -> AsyncEngine:
    """
    Get the database engine, creating it on first use.

    Returns:
        SQLAlchemy async engine instance
    """
    global _engine
    if _engine is None:
        _engine = _create_engine()
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Get the session factory, creating it on first use.

    Returns:
        SQLAlchemy async session factory
    """
    global _async_session_factory
    if _async_session_factory is None:
        _async_session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _async_session_factory


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    Commits when the request handler returns, rolls back if it raises.

    Usage in endpoints:
        @router.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    session_factory = get_session_factory()
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def ping_database(engine: AsyncEngine | None = None) -> None:
    """Run SELECT 1, raising if the database is unreachable."""
    engine = engine or get_engine()
    async with engine.connect() as connection:
        await connection.execute(text("SELECT 1"))


async def connect_with_retry(attempts: int, delay_seconds: float) -> None:
    """
    Verify connectivity at startup.

    Retries with a linearly growing delay (delay, 2 * delay, ...) and
    re-raises the last error once attempts are exhausted.
    """
    from notes_api.core.resilience import log_retry

    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_incrementing(start=delay_seconds, increment=delay_seconds),
        before_sleep=log_retry,
        reraise=True,
    ):
        with attempt:
            await ping_database()
    logger.info("Database connection established")


async def dispose_engine() -> None:
    """Close all pooled connections and forget the engine."""
    global _engine, _async_session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("Database engine disposed")
    _engine = None
    _async_session_factory = None
