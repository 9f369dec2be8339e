"""
docdb - schema-less in-memory document store.

This package implements a small document database:
- Records (id + opaque payload) grouped in named Collections inside a Store
- JSON and SQL-text codecs for collection- and store-scope export/import
- A hook pipeline running around every operation
- A FastAPI adapter exposing the operations over HTTP

Architecture:
    ┌──────────┐     ┌─────────────────┐     ┌──────────────┐
    │   HTTP   │────▶│ DocumentService │────▶│    Store     │
    │ (FastAPI)│     │  pre/post hooks │     │ (asyncio.Lock)│
    └──────────┘     └─────────────────┘     └──────┬───────┘
                                                    │
                                          ┌─────────┴─────────┐
                                          ▼                   ▼
                                     ┌─────────┐        ┌──────────┐
                                     │  JSON   │        │ SQL-text │
                                     │  codec  │        │  codec   │
                                     └─────────┘        └──────────┘

Invariants:
    - State lives in process memory only; export to keep it
    - Operations report failures through Result/ErrorKind, never by crashing
    - Hooks run in registration order, globals before route hooks

Version: see _version.py
"""

from ._version import __version__

__all__ = ["__version__"]
