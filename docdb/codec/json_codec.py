"""
JSON codec.

Collection export is a JSON array of {"id", "data"} objects; store export
is a JSON object mapping collection name to such an array. Output is
compact UTF-8 with non-ASCII characters kept as is.

Invariants:
    - Ids are preserved exactly across export -> import
    - Collection import is all-or-nothing: the whole array is decoded before
      anything is handed to the Store
    - Store import is decoded one collection at a time (see decode_store)
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Iterator
from typing import Any, List

from ..errors import MalformedInputError
from ..store.collection import Collection
from ..store.record import Record
from .base import BatchMode, CollectionBatch, ExportFormat, decode_text

logger = logging.getLogger(__name__)

_LONE_SURROGATE = re.compile(r"[\ud800-\udfff]")


def escape_surrogates(text: str) -> str:
    """Replace lone surrogates with \\uXXXX escapes so the text encodes as UTF-8."""
    return _LONE_SURROGATE.sub(lambda m: f"\\u{ord(m.group()):04x}", text)


def dumps(value: Any) -> str:
    """Serialize to compact single-line JSON.

    Lone surrogates (valid in JSON input, not encodable as UTF-8) are kept
    as \\uXXXX escapes and decode back to the same string.
    """
    return escape_surrogates(json.dumps(value, ensure_ascii=False, separators=(",", ":")))


def _parse(data: bytes) -> Any:
    text = decode_text(data, ExportFormat.JSON)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedInputError(
            f"Invalid JSON: {e.msg}",
            fmt=ExportFormat.JSON.value,
            position=f"line {e.lineno} column {e.colno}",
        ) from e
    except RecursionError as e:
        raise MalformedInputError(
            "Invalid JSON: nested too deeply", fmt=ExportFormat.JSON.value
        ) from e


def records_from_array(name: str, value: Any) -> List[Record]:
    """Build records from a decoded JSON array of {id, data} objects.

    Raises:
        MalformedInputError: If value is not an array or an element is not an object
    """
    if not isinstance(value, list):
        raise MalformedInputError(
            f"Expected a JSON array of records for collection '{name}', "
            f"got {type(value).__name__}",
            fmt=ExportFormat.JSON.value,
            position=name,
        )

    records = []
    for index, element in enumerate(value):
        if not isinstance(element, dict):
            raise MalformedInputError(
                f"Record {index} of collection '{name}' is not a JSON object",
                fmt=ExportFormat.JSON.value,
                position=f"{name}[{index}]",
            )
        records.append(Record.from_dict(element))
    return records


class JsonCodec:
    """Codec for the JSON export format.

    Example:
        >>> codec = JsonCodec()
        >>> codec.encode_collection(collection)
        b'[{"id":"a1","data":{"x":1}}]'
    """

    format = ExportFormat.JSON
    extension = "json"
    content_type = "application/json"
    requires_existing_collection = True

    def encode_collection(self, collection: Collection) -> bytes:
        return dumps([r.to_dict() for r in collection.list()]).encode("utf-8")

    def encode_store(self, collections: Iterable[Collection]) -> bytes:
        document = {c.name: [r.to_dict() for r in c.list()] for c in collections}
        return dumps(document).encode("utf-8")

    def decode_collection(self, name: str, data: bytes) -> CollectionBatch:
        records = records_from_array(name, _parse(data))
        return CollectionBatch(name=name, records=records, mode=BatchMode.REPLACE)

    def decode_store(self, data: bytes) -> Iterator[CollectionBatch]:
        """Decode a {name: [records]} document.

        The top-level shape is checked eagerly, before the first batch is
        produced. Each collection's array is only checked when its batch
        is produced, so a malformed later collection raises after earlier
        batches were already applied by the caller.

        Raises:
            MalformedInputError: If the top level is not an object, or lazily
                when a collection's value is malformed
        """
        document = _parse(data)
        if not isinstance(document, dict):
            raise MalformedInputError(
                f"Expected a JSON object of collections, got {type(document).__name__}",
                fmt=ExportFormat.JSON.value,
            )
        return self._iter_batches(document)

    def _iter_batches(self, document: dict[str, Any]) -> Iterator[CollectionBatch]:
        for name, value in document.items():
            yield CollectionBatch(
                name=name,
                records=records_from_array(name, value),
                mode=BatchMode.REPLACE,
            )
