# Services package init
"""
KVPad Backend — Services Layer
===============================

What:  Document logic sitting between routes (HTTP) and the key-value store.
Why:   Routes handle HTTP, services decide and perform the store side effects.

Service Inventory:
    - escaping.py:        escape_html / unescape_html (stored form of documents)
    - credentials.py:     padding-stripped base64 for the `q` query parameter
    - password_guard.py:  PasswordGuard (is_protected, set/clear secret, verify)
    - access_handler.py:  DocumentAccessHandler (read/write decision tables)
"""
