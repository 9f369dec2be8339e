"""
docdb Test Suite.

This package contains:
- unit/: Unit tests (records, store, codecs, hooks, service, config)
- integration/: Integration tests (HTTP API through FastAPI's TestClient)
"""
