"""
Store module for docdb.

This module provides the in-memory data model:
- Record: id plus opaque payload
- Collection: named map of records
- Store: registry of collections, lock-guarded

Invariants:
    - A collection belongs to exactly one Store
    - Missing collections/records are reported through Result, never raised
"""

from .record import Record, generate_id
from .collection import Collection
from .store import Store

__all__ = [
    "Record",
    "generate_id",
    "Collection",
    "Store",
]
