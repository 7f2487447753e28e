# Routes package init
"""
KVPad Backend — Routes Package
===============================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - health.py:     GET  /health          (service health check)
    - documents.py:  GET  /<name>          (editor view, password prompt, or redirect)
                     POST /<name>          (save text, set / update / clear password)
                     PUT, PATCH, DELETE    (405)

Design Principle:
    Routes are THIN. They extract the document name, credential and form,
    call DocumentAccessHandler, and map its AccessOutcome to a response.
    health.py must be included before documents.py: the document route
    matches every path.
"""
