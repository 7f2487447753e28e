"""
KVPad Backend — Storage Package
================================

What:  Key-value store interface and its implementations.

Inventory:
    - base.py:    KeyValueStore (abstract get/put/delete)
    - memory.py:  InMemoryStore (dict-backed)
    - sql.py:     SqlKeyValueStore (async SQLAlchemy, kv_entries table)
"""

from kvpad.config import Settings
from kvpad.storage.base import KeyValueStore
from kvpad.storage.memory import InMemoryStore


def build_store(config: Settings) -> KeyValueStore:
    """Construct the store selected by STORE_BACKEND."""
    if config.store_backend == "memory":
        return InMemoryStore()

    from kvpad.database import get_session_factory
    from kvpad.storage.sql import SqlKeyValueStore

    return SqlKeyValueStore(get_session_factory())


__all__ = ["KeyValueStore", "InMemoryStore", "build_store"]
