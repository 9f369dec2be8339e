"""
Base protocol and types for export/import codecs.

This module defines the Codec protocol that the JSON and SQL-text codecs
implement, along with the value types passed between codecs and the Store.

Codecs are pure: they turn collections into bytes and bytes into batches of
records. Deciding what a batch does to the Store (replace a collection,
merge into an existing one) is the Store's job, driven by the batch mode.

Invariants:
    - encode_* never mutates the collections it is given
    - decode_* raises MalformedInputError, never a bare ValueError
    - A CollectionBatch with mode REPLACE carries the full new record set

How to change safely:
    - Byte formats are a persisted contract; keep exports readable by older imports
    - New codecs must implement every Codec method
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol, runtime_checkable

from ..errors import MalformedInputError

if TYPE_CHECKING:
    from ..store.collection import Collection
    from ..store.record import Record

DATABASE_BASENAME = "database"


class ExportFormat(str, Enum):
    """Supported byte formats."""

    JSON = "json"
    SQL = "sql"


class BatchMode(Enum):
    """How a decoded batch is applied to the Store."""

    # Build a fresh collection and swap it in (creating it if needed)
    REPLACE = "replace"
    # Upsert into an already existing collection; dropped if it doesn't exist
    MERGE = "merge"


@dataclass(frozen=True)
class ExportPayload:
    """Bytes produced by an export, ready to be sent as an attachment.

    Attributes:
        filename: Suggested file name (<collection>.<ext> or database.<ext>)
        data: Encoded bytes (UTF-8 text)
        content_type: MIME type of data
    """

    filename: str
    data: bytes
    content_type: str


@dataclass
class CollectionBatch:
    """Records decoded for one collection.

    Attributes:
        name: Target collection name; None for a batch that only reports
            statements skipped before any collection could be identified
        records: Decoded records in input order
        mode: How the Store applies the batch
        skipped: Number of input statements/elements dropped while decoding
    """

    name: Optional[str]
    records: List[Record] = field(default_factory=list)
    mode: BatchMode = BatchMode.REPLACE
    skipped: int = 0


@dataclass
class ImportSummary:
    """What an import did to the Store.

    Attributes:
        collections: Names of collections replaced or merged into
        imported: Number of records written
        skipped: Number of statements/elements not imported
    """

    collections: List[str] = field(default_factory=list)
    imported: int = 0
    skipped: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "collections": list(self.collections),
            "imported": self.imported,
            "skipped": self.skipped,
        }


@runtime_checkable
class Codec(Protocol):
    """Protocol implemented by every export/import format.

    Attributes:
        format: Format identifier
        extension: File extension used for export filenames
        content_type: MIME type of exported bytes
        requires_existing_collection: Whether collection-scope import fails
            with NOT_FOUND when the target collection does not exist
    """

    format: ExportFormat
    extension: str
    content_type: str
    requires_existing_collection: bool

    def encode_collection(self, collection: Collection) -> bytes:
        """Encode one collection."""
        ...

    def encode_store(self, collections: Iterable[Collection]) -> bytes:
        """Encode every collection of a store."""
        ...

    def decode_collection(self, name: str, data: bytes) -> CollectionBatch:
        """Decode bytes into a REPLACE batch for the named collection.

        Raises:
            MalformedInputError: If the payload cannot be decoded
        """
        ...

    def decode_store(self, data: bytes) -> Iterator[CollectionBatch]:
        """Decode a whole-store payload, one batch per collection.

        Batches are produced lazily; an error raised for a later batch
        surfaces after earlier batches have been handed out.

        Raises:
            MalformedInputError: If the payload cannot be decoded
        """
        ...


def collection_filename(name: str, codec: Codec) -> str:
    return f"{name}.{codec.extension}"


def store_filename(codec: Codec) -> str:
    return f"{DATABASE_BASENAME}.{codec.extension}"


def decode_text(data: bytes, fmt: ExportFormat) -> str:
    """Decode UTF-8 import bytes.

    Raises:
        MalformedInputError: If data is not valid UTF-8
    """
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedInputError(
            f"Payload is not valid UTF-8: {e.reason}",
            fmt=fmt.value,
            position=str(e.start),
        ) from e
