"""Fixtures for concurrency tests.

Concurrent sessions each need their own connection, so these tests run
against a file-backed SQLite database instead of the shared in-memory one.
"""

import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from aerodemo.core.database import Base, _engine_options


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """File-backed test database with a regular connection pool."""
    database_url = f"sqlite+aiosqlite:///{tmp_path / 'concurrency.db'}"
    engine = create_async_engine(database_url, echo=False, **_engine_options(database_url))

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()
