"""
KVPad Backend — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── memory_store: Fresh InMemoryStore
    ├── guard: PasswordGuard over memory_store
    ├── access_handler: DocumentAccessHandler over memory_store
    ├── test_client: HTTPX AsyncClient talking to create_app(store=memory_store)
    └── sql_engine: Async engine over a throwaway SQLite file (aiosqlite)
"""

import os

# Must happen before any kvpad import: settings and the module-level app read these
os.environ["STORE_BACKEND"] = "memory"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./kvpad_test.db"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine

from kvpad.models.kv_entry import KVEntry  # noqa: F401
from kvpad.services.access_handler import DocumentAccessHandler
from kvpad.services.password_guard import PasswordGuard
from kvpad.storage.memory import InMemoryStore


@pytest.fixture
def memory_store():
    """A fresh, empty in-memory store per test."""
    return InMemoryStore()


@pytest.fixture
def guard(memory_store):
    return PasswordGuard(memory_store)


@pytest.fixture
def access_handler(memory_store):
    return DocumentAccessHandler(memory_store)


@pytest_asyncio.fixture
async def test_client(memory_store):
    """
    Async HTTP client wired to an app that serves `memory_store`.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from kvpad.main import create_app

    app = create_app(store=memory_store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def sql_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'kv.db'}")
    yield engine
    await engine.dispose()

