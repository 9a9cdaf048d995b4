"""Integration test fixtures for database and HTTP client operations.

Each test gets its own in-memory SQLite database; the schema is created
with init_db. Uses polyfactory for type-safe test data generation.
"""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from src.portal.api.dependencies import get_db_session
from src.portal.core import db
from src.portal.core.db import get_session, init_db
from src.portal.main import create_app
from src.portal.services import ReviewLocks
from tests.factories import ProfileFactory
from tests.helpers import create_account


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine]:
    """In-memory database shared by every session in the test."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Provide an async session for database operations.

    The session does not auto-commit; tests call `await session.commit()`.
    """
    async with get_session(engine) as session:
        yield session


@pytest.fixture
async def admin(engine: AsyncEngine) -> dict:
    """An active, verified administrator with a bearer token."""
    return await create_account(engine, ProfileFactory.admin(email="admin@example.com"))


@pytest.fixture
async def staff(engine: AsyncEngine) -> dict:
    return await create_account(engine, ProfileFactory.staff(email="staff@example.com"))


@pytest.fixture
async def client(engine: AsyncEngine) -> AsyncGenerator[AsyncClient]:
    """HTTP client whose requests use the test database."""
    app = create_app()

    async def _test_db_session() -> AsyncGenerator[AsyncSession]:
        async with get_session(engine) as session:
            yield session

    app.dependency_overrides[get_db_session] = _test_db_session
    app.state.review_locks = ReviewLocks()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
    await db.dispose_engine()
