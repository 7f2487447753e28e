"""
KVPad Backend — In-Memory Key-Value Store
==========================================

What:  Dict-backed KeyValueStore.
Why:   Test double for the SQL store and a zero-setup backend for local demos
       (STORE_BACKEND=memory).

Caveat:
    State lives in the worker process. With several uvicorn workers each one
    has its own notebook; use the SQL store for anything shared.
"""

from typing import Dict, Optional

from kvpad.storage.base import KeyValueStore


class InMemoryStore(KeyValueStore):
    """Process-local store. Safe within one event loop since no call awaits mid-update."""

    backend_name = "memory"

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def put(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)
