# src/xpforge/db/session.py

"""Engine and session factory for the rank database."""

import logging
from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from xpforge import config

logger = logging.getLogger(__name__)


def engine_options(url: str) -> dict[str, Any]:
    """Keyword arguments for ``create_async_engine`` on the given backend.

    SQLite has a single writer per file: award transactions for different
    users are not serialized by the per-user lock, so a writer waits up to
    DB_SQLITE_BUSY_TIMEOUT seconds for the file lock instead of failing with
    "database is locked". Server databases get a pre-pinged, recycled pool.
    """
    options: dict[str, Any] = {"echo": config.DB_ECHO}
    if url.startswith("sqlite"):
        options["connect_args"] = {"timeout": config.DB_SQLITE_BUSY_TIMEOUT}
        return options

    options.update(
        pool_size=config.DB_POOL_SIZE,
        max_overflow=config.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        pool_recycle=config.DB_POOL_RECYCLE,
    )
    return options


engine = create_async_engine(
    config.DATABASE_URL, **engine_options(config.DATABASE_URL)
)

# Awards flush explicitly and read their results after commit
AsyncSessionLocal = async_sessionmaker(
    bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request.

    Anything left uncommitted when the request fails is rolled back.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            logger.warning("Request failed, rolling back open transaction")
            await session.rollback()
            raise
