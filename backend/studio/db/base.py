"""Declarative base plus the process-wide async engine.

init_db() runs once from the app lifespan (or a script's main) and close_db()
on the way out. Request handlers and services only ever see sessions from
get_session_factory().
"""

import structlog
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from studio.core.config import get_settings

logger = structlog.get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base for the projects, tasks and returns tables."""


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Async engine for `url`. Server databases get connection pre-ping, SQLite files do not."""
    if make_url(url).get_backend_name() == "sqlite":
        return create_async_engine(url, echo=echo)
    return create_async_engine(url, echo=echo, pool_pre_ping=True)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Services return ORM rows after commit, so attributes must stay loaded
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    """Create any missing studio tables."""
    import studio.db.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_db(url: str | None = None) -> None:
    """Open the shared engine, create missing tables and publish the session factory.

    No-op when already initialized. The engine is disposed again if table
    creation fails.
    """
    global _engine, _session_factory

    if _engine is not None:
        return

    settings = get_settings()
    engine = build_engine(url or settings.database_url, echo=settings.debug)
    try:
        await create_tables(engine)
    except Exception:
        await engine.dispose()
        raise

    _engine = engine
    _session_factory = build_session_factory(engine)
    logger.info("db_ready", backend=engine.dialect.name, tables=sorted(Base.metadata.tables))


async def close_db() -> None:
    """Dispose of the shared engine. Safe to call when nothing is open."""
    global _engine, _session_factory

    engine, _engine, _session_factory = _engine, None, None
    if engine is not None:
        await engine.dispose()
        logger.info("db_closed", backend=engine.dialect.name)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory of the shared engine.

    Raises:
        RuntimeError: init_db() has not run in this process
    """
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _session_factory
