"""
KVPad Backend — SQL Key-Value Store
====================================

What:  KeyValueStore backed by the `kv_entries` table via async SQLAlchemy.
Why:   Durable storage for documents and password records (PostgreSQL in
       production, SQLite for single-host installs).
How:   One short-lived session per operation, committed immediately. Writes
       are a single INSERT .. ON CONFLICT DO UPDATE on PostgreSQL and SQLite,
       so concurrent first saves of a key all succeed (last write wins).
       No retries: a failed call is wrapped in StoreError and propagates.

Query plan:
    Every operation is a primary-key lookup on kv_entries.key.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, select, text, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kvpad.exceptions import StoreError
from kvpad.models.kv_entry import KVEntry
from kvpad.storage.base import KeyValueStore

logger = logging.getLogger(__name__)

# Dialects with INSERT .. ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _upsert_statement(dialect_name: str, key: str, value: str):
    insert = _UPSERT_INSERTS[dialect_name]
    stmt = insert(KVEntry).values(key=key, value=value)
    # onupdate defaults are not applied to ON CONFLICT, so set updated_at here
    return stmt.on_conflict_do_update(
        index_elements=[KVEntry.key],
        set_={"value": stmt.excluded.value, "updated_at": datetime.now(timezone.utc)},
    )


class SqlKeyValueStore(KeyValueStore):
    """
    Key-value store over a SQLAlchemy session factory.

    Args:
        session_factory: async_sessionmaker producing AsyncSession objects.
            Injected so tests can point the store at a throwaway SQLite file.
    """

    backend_name = "sql"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, key: str) -> Optional[str]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(KVEntry.value).where(KVEntry.key == key)
                )
                return result.scalar_one_or_none()
        except (SQLAlchemyError, OSError) as e:
            logger.error("Store read failed for key %r: %s", key, str(e))
            raise StoreError(context={"operation": "get", "key": key})

    async def put(self, key: str, value: str) -> None:
        try:
            async with self._session_factory() as session:
                dialect_name = session.get_bind().dialect.name
                if dialect_name in _UPSERT_INSERTS:
                    await session.execute(_upsert_statement(dialect_name, key, value))
                    await session.commit()
                else:
                    await self._update_or_insert(session, key, value)
        except (SQLAlchemyError, OSError) as e:
            logger.error("Store write failed for key %r: %s", key, str(e))
            raise StoreError(context={"operation": "put", "key": key})

    async def _update_or_insert(self, session: AsyncSession, key: str, value: str) -> None:
        """Portable write for dialects without ON CONFLICT: a racing INSERT falls back to UPDATE."""
        stmt = (
            update(KVEntry)
            .where(KVEntry.key == key)
            .values(value=value, updated_at=datetime.now(timezone.utc))
        )
        result = await session.execute(stmt)
        if result.rowcount:
            await session.commit()
            return
        try:
            session.add(KVEntry(key=key, value=value))
            await session.commit()
        except IntegrityError:
            await session.rollback()
            await session.execute(stmt)
            await session.commit()

    async def delete(self, key: str) -> None:
        try:
            async with self._session_factory() as session:
                await session.execute(delete(KVEntry).where(KVEntry.key == key))
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            logger.error("Store delete failed for key %r: %s", key, str(e))
            raise StoreError(context={"operation": "delete", "key": key})

    async def health_check(self) -> bool:
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Health check: store unreachable: %s", str(e))
            return False
