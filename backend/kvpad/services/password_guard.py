"""
KVPad Backend — Password Guard
===============================

What:  Decides whether a document requires a secret and checks supplied secrets.
How:   The digest (lowercase hex SHA-256 of the UTF-8 secret) is stored under
       `<name><suffix>` in the same key-value store as the document. The record's
       presence is the only "protected" signal.

Security Note:
    Digest comparison is plain string equality, not constant time, and the
    digest is unsalted. One shared secret per document is all this guards.
"""

import hashlib
import logging
from typing import Optional

from kvpad.config import settings
from kvpad.storage.base import KeyValueStore

logger = logging.getLogger(__name__)


def hash_secret(secret: str) -> str:
    """Lowercase hex SHA-256 of `secret`."""
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


class PasswordGuard:
    """
    Per-document secret management over an injected store.

    Args:
        store: The key-value store shared with the documents.
        suffix: Appended to a document name to form its password-record key.
    """

    def __init__(self, store: KeyValueStore, suffix: Optional[str] = None):
        self.store = store
        self.suffix = suffix or settings.password_key_suffix

    def record_key(self, name: str) -> str:
        return f"{name}{self.suffix}"

    async def is_protected(self, name: str) -> bool:
        return await self.store.get(self.record_key(name)) is not None

    async def set_secret(self, name: str, secret: str) -> None:
        """Store the digest of `secret`, replacing any existing record."""
        await self.store.put(self.record_key(name), hash_secret(secret))
        logger.info("Password set for document %r", name)

    async def clear_secret(self, name: str) -> None:
        """Remove the password record. No-op if the document is unprotected."""
        await self.store.delete(self.record_key(name))
        logger.info("Password cleared for document %r", name)

    async def verify(self, name: str, candidate: str) -> bool:
        """False when no record exists; otherwise digest equality."""
        stored = await self.store.get(self.record_key(name))
        if not stored:
            return False
        return hash_secret(candidate) == stored
