"""Shared test fixtures: a throwaway database per test."""

import os

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

import studio.db.models  # noqa: F401
from studio.db.base import Base, build_engine, build_session_factory, create_tables


@pytest.fixture
def test_db_url(tmp_path) -> str:
    """TEST_DATABASE_URL if set, otherwise a fresh SQLite file under tmp_path."""
    return os.getenv("TEST_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'studio_test.db'}")


@pytest.fixture
async def engine(test_db_url: str) -> AsyncEngine:
    """Async engine with all tables created, dropped again afterwards."""
    engine = build_engine(test_db_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await create_tables(engine)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest.fixture
async def session(session_factory) -> AsyncSession:
    async with session_factory() as session:
        yield session
