"""
Record - the atomic unit stored by a Collection.

A record is an identifier plus an opaque payload. No schema is imposed on
the payload; it is any JSON-compatible tree of dicts, lists and scalars.

Invariants:
    - id is assigned once at construction and never changes
    - data is replaced wholesale, never merged
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any


def generate_id() -> str:
    """Return a fresh random (UUID4) record identifier."""
    return str(uuid.uuid4())


class Record:
    """An id plus an opaque payload.

    Example:
        >>> r = Record(data={"title": "hello"})
        >>> r.set_data({"title": "bye"})
        >>> r.to_dict()["data"]
        {'title': 'bye'}
    """

    __slots__ = ("_id", "_data")

    def __init__(self, id: Any = None, data: Any = None) -> None:
        """Create a record.

        Args:
            id: Caller supplied identifier; a UUID is generated when absent or empty
            data: Payload; defaults to an empty dict when None
        """
        self._id = str(id) if id not in (None, "") else generate_id()
        self._data = data if data is not None else {}

    @property
    def id(self) -> str:
        return self._id

    @property
    def data(self) -> Any:
        return self._data

    def get_id(self) -> str:
        return self._id

    def get_data(self) -> Any:
        return self._data

    def set_data(self, data: Any) -> None:
        """Replace the payload wholesale."""
        self._data = data if data is not None else {}

    def to_dict(self) -> dict[str, Any]:
        """Export element shape shared by both codecs."""
        return {"id": self._id, "data": self._data}

    @classmethod
    def from_dict(cls, element: Mapping[str, Any]) -> Record:
        """Build a record from an exported `{id, data}` element."""
        return cls(id=element.get("id"), data=element.get("data"))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self._id == other._id and self._data == other._data

    def __repr__(self) -> str:
        return f"Record(id={self._id!r}, data={self._data!r})"
