"""
Collection - a named, mutable set of records keyed by id.

Collections are plain containers. They do no locking of their own; the
owning Store serializes access to them.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Dict, List, Optional

from .record import Record


class Collection:
    """Named map of record id -> Record.

    Iteration follows insertion order, but export order is not part of any
    contract and callers must not depend on it.

    Attributes:
        name: Collection name, also used verbatim as the SQL table name
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._records: Dict[str, Record] = {}

    @classmethod
    def from_records(cls, name: str, records: Iterable[Record]) -> Collection:
        """Build a fresh collection; later duplicates of an id win."""
        collection = cls(name)
        for record in records:
            collection.add(record)
        return collection

    def get_name(self) -> str:
        return self.name

    def add(self, record: Record) -> None:
        """Insert or overwrite by id."""
        self._records[record.id] = record

    def update(self, record: Record) -> None:
        """Same as add; existence checks belong to the caller."""
        self._records[record.id] = record

    def get(self, record_id: str) -> Optional[Record]:
        return self._records.get(record_id)

    def delete(self, record_id: str) -> bool:
        """Remove a record.

        Returns:
            True if the record existed
        """
        return self._records.pop(record_id, None) is not None

    def list(self) -> List[Record]:
        """Snapshot of all records in insertion order."""
        return list(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def __repr__(self) -> str:
        return f"Collection(name={self.name!r}, records={len(self._records)})"
