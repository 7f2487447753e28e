"""
KVPad Backend — Application Package Initializer
================================================

What: Marks the `kvpad` directory as a Python package.
Why:  Enables module imports like `from kvpad.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    KVPad is a minimal web notebook: one text document per URL path, stored in a
    key-value store, optionally gated by a single shared password per document.

    ┌─────────────────────────────────────┐
    │      Routes + Templates (HTTP)      │  ← status codes, headers, HTML views
    ├─────────────────────────────────────┤
    │     Access Handler (decision table) │  ← method × protection × credential
    ├─────────────────────────────────────┤
    │  Password Guard · Escaping · Creds  │  ← single-purpose helpers
    ├─────────────────────────────────────┤
    │       Key-Value Store (storage)     │  ← in-memory or SQL-backed
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
