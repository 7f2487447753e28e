"""
KVPad Backend — Database Engine & Session Management
=====================================================

What:  Async SQLAlchemy engine, session factory, and declarative base.
Why:   Centralizes all database connection logic in one place.
How:   The engine is built lazily on first use from `settings.database_url`,
       so importing this module (e.g. from tests that only use the in-memory
       store, or from Alembic) never opens a connection.
Who:   Used by SqlKeyValueStore and by Alembic's env.py.

Connection Pooling Strategy:
    PostgreSQL: QueuePool with pool_size / max_overflow / pre_ping from settings,
    recycled hourly.
    SQLite: driver defaults (pool sizing arguments are rejected by its pools).
"""

from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from kvpad.config import settings


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models (shared metadata for Alembic)."""
    pass


_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def get_engine() -> AsyncEngine:
    """Return the process-wide async engine, creating it on first call."""
    global _engine
    if _engine is None:
        kwargs = {"echo": settings.log_level == "DEBUG"}
        if not settings.database_url.startswith("sqlite"):
            kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=settings.db_pool_pre_ping,
                pool_recycle=3600,
            )
        _engine = create_async_engine(settings.database_url, **kwargs)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Return the session factory bound to the process-wide engine.

    expire_on_commit=False: values read inside a store call stay usable after
    the session commits and closes.
    """
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


async def create_tables() -> None:
    """Create all mapped tables (used when DB_AUTO_CREATE is enabled)."""
    from kvpad.models.kv_entry import KVEntry  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
