"""
KVPad Backend — Abstract Key-Value Store Interface
===================================================

What:  Abstract base class defining the contract for document storage.
Why:   The access handler receives a store explicitly instead of reaching for
       global state, so the SQL backend can be swapped for an in-memory one in
       tests or single-process demos.
How:   Concrete implementations inherit from KeyValueStore and implement
       get/put/delete over string keys.

Consistency contract:
    Per-key last-write-wins. No transactions across keys, no compare-and-set.
    A document and its password record are two unrelated keys.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Abstract string → string store.

    Implementations:
        - InMemoryStore: dict-backed, process-local
        - SqlKeyValueStore: async SQLAlchemy over the kv_entries table

    All implementation-specific failures are wrapped in StoreError.
    """

    backend_name = "unknown"

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Return the value stored under `key`, or None when the key is absent.

        An empty string is a real value and is distinct from None.
        """
        ...

    @abstractmethod
    async def put(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any previous value."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove `key`. Deleting an absent key is a no-op."""
        ...

    async def health_check(self) -> bool:
        """
        Lightweight reachability probe used by GET /health.

        Returns: True if the store can serve requests, False otherwise.
        """
        return True

    async def close(self) -> None:
        """Release any resources held by the store (called on shutdown)."""
        return None
