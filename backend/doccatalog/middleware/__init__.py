"""
Document Catalog — Middleware Package
======================================

Middleware Chain:
    Request → [Request ID] → [Access log] → [GZip] → [CORS] → Route Handler

    Request ID runs first so the access log line and every log line written
    while handling the request carry the same id.
"""
