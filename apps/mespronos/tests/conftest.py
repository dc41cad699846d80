"""
Shared pytest configuration for the mespronos tests.

Each test gets its own SQLite database file (through aiosqlite) so tests
never touch a development or production PostgreSQL database.
"""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from mespronos.database.db import Base
from mespronos.services import settings_service


@pytest.fixture(autouse=True)
def no_redis(monkeypatch):
    """Settings caching goes through Redis; tests run without it."""

    async def _no_client():
        return None

    monkeypatch.setattr(settings_service, "get_redis_client", _no_client)


@pytest.fixture(autouse=True)
def clean_reminder_env(monkeypatch):
    """Keep the developer's environment from leaking into settings lookups."""
    for var in (
        "REMINDER_ENABLED",
        "REMINDER_HOURS",
        "ENABLE_EMAIL",
        "SITE_NAME",
        "SITE_URL",
        "DISPLAY_TIMEZONE",
        "ADMIN_API_TOKEN",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """Create a test database engine backed by a temporary SQLite file."""
    # NullPool: each session gets its own connection, like separate workers would
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'mespronos_test.db'}",
        echo=False,
        poolclass=NullPool,
    )

    async with engine.begin() as conn:
        # Ensure models are imported so Base.metadata includes all tables
        from mespronos.database import models  # noqa: F401

        await conn.run_sync(Base.metadata.create_all)

    # Monkey-patch AsyncSessionLocal to use the test engine
    # This ensures that code using db.AsyncSessionLocal() (like the reminder worker)
    # uses the same database as the test fixtures
    from mespronos.database import db

    test_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    original_async_session_local = db.AsyncSessionLocal
    db.AsyncSessionLocal = test_session_maker

    yield engine

    db.AsyncSessionLocal = original_async_session_local
    await engine.dispose()


@pytest.fixture
def session_maker(test_engine):
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db_session(session_maker):
    """Create a test database session."""
    async with session_maker() as session:
        try:
            yield session
        finally:
            try:
                await session.rollback()
            except Exception:
                pass
            await session.close()
