# tests/conftest.py

"""Pytest configuration and fixtures."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from pytest_asyncio import is_async_test
from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool
from xpforge.db.models import Base, User
from xpforge.db.session import get_db
from xpforge.main import app

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# One shared in-memory database for the whole run
engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)


@event.listens_for(engine.sync_engine, "connect")
def _disable_driver_transactions(dbapi_connection, connection_record):
    # The driver's implicit BEGIN breaks SAVEPOINT handling; SQLAlchemy
    # emits BEGIN itself below.
    dbapi_connection.isolation_level = None


@event.listens_for(engine.sync_engine, "begin")
def _emit_begin(conn):
    conn.exec_driver_sql("BEGIN")


# Each test session joins the connection-level transaction through SAVEPOINTs,
# so service-level commit/rollback calls never end the outer transaction.
AsyncTestingSessionLocal = async_sessionmaker(
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
    join_transaction_mode="create_savepoint",
)


def pytest_collection_modifyitems(items):
    """Run every async test in the session event loop the engine lives on."""
    session_scope_marker = pytest.mark.asyncio(loop_scope="session")
    for item in items:
        if is_async_test(item):
            item.add_marker(session_scope_marker, append=False)


@pytest_asyncio.fixture(scope="session", loop_scope="session", autouse=True)
async def setup_database():
    """Fixture to create and tear down the test database."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(loop_scope="session")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Fixture to provide a transactional database session to a test.
    The transaction is rolled back after the test, ensuring isolation.
    """
    connection = await engine.connect()
    transaction = await connection.begin()
    session = AsyncTestingSessionLocal(bind=connection)

    yield session

    await session.close()
    if transaction.is_active:
        await transaction.rollback()
    await connection.close()


@pytest_asyncio.fixture(loop_scope="session")
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Fixture to provide an async test client for the API."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    del app.dependency_overrides[get_db]


# =============================================================================
# Shared helpers
# =============================================================================


async def create_user(
    db: AsyncSession, user_id: str, total_xp: int = 0, username: str | None = None
) -> User:
    """Insert a rank account directly, bypassing the API."""
    user = User(id=user_id, username=username or f"name-{user_id}", total_xp=total_xp)
    db.add(user)
    await db.commit()
    return user


async def total_xp_of(db: AsyncSession, user_id: str) -> int:
    """Read a user's stored total straight from the database."""
    result = await db.execute(select(User.total_xp).where(User.id == user_id))
    return result.scalar_one()
