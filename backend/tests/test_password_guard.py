"""
KVPad Backend — Password Guard Unit Tests
==========================================

What we test:
    ✅ set_secret → protected, correct secret verifies, wrong one does not
    ✅ Only the SHA-256 hex digest is stored, under <name>_password
    ✅ clear_secret → unprotected; clearing twice is a no-op
    ✅ verify on an unprotected document is False
    ✅ Password records and documents are independent keys
"""

import hashlib

import pytest

from kvpad.services.password_guard import PasswordGuard, hash_secret


class TestHashSecret:

    def test_lowercase_hex_sha256(self):
        assert hash_secret("abc123") == hashlib.sha256(b"abc123").hexdigest()
        assert hash_secret("abc123") == hash_secret("abc123").lower()
        assert len(hash_secret("")) == 64


class TestPasswordGuard:

    @pytest.mark.asyncio
    async def test_unprotected_by_default(self, guard):
        assert await guard.is_protected("notes") is False
        assert await guard.verify("notes", "anything") is False

    @pytest.mark.asyncio
    async def test_set_secret_protects_and_verifies(self, guard):
        await guard.set_secret("n", "p")

        assert await guard.is_protected("n") is True
        assert await guard.verify("n", "p") is True
        assert await guard.verify("n", "px") is False

    @pytest.mark.asyncio
    async def test_stores_digest_not_secret(self, guard, memory_store):
        await guard.set_secret("foo", "abc123")

        stored = await memory_store.get("foo_password")
        assert stored == hashlib.sha256(b"abc123").hexdigest()
        assert "abc123" not in stored

    @pytest.mark.asyncio
    async def test_set_secret_overwrites(self, guard):
        await guard.set_secret("foo", "old")
        await guard.set_secret("foo", "new")

        assert await guard.verify("foo", "new") is True
        assert await guard.verify("foo", "old") is False

    @pytest.mark.asyncio
    async def test_clear_secret(self, guard):
        await guard.set_secret("foo", "abc123")
        await guard.clear_secret("foo")

        assert await guard.is_protected("foo") is False
        assert await guard.verify("foo", "abc123") is False

    @pytest.mark.asyncio
    async def test_clear_secret_absent_is_noop(self, guard, memory_store):
        await guard.clear_secret("never-protected")
        assert len(memory_store) == 0

    @pytest.mark.asyncio
    async def test_record_independent_of_document(self, guard, memory_store):
        """A password record can exist without its document, and vice versa."""
        await guard.set_secret("ghost", "s3cret")
        assert "ghost" not in memory_store

        await memory_store.put("plain", "text")
        assert await guard.is_protected("plain") is False

    @pytest.mark.asyncio
    async def test_custom_suffix(self, memory_store):
        guard = PasswordGuard(memory_store, suffix=".pw")
        await guard.set_secret("doc", "x")

        assert "doc.pw" in memory_store
        assert "doc_password" not in memory_store
