"""
In-memory document store.

The Store is a registry of named Collections. It is the only owner of its
collections and the only place they are mutated from.

Invariants:
    - All data is lost on process exit unless exported
    - Every record reachable from a collection has record.id == its key
    - Operations never raise for missing collections/records; they return a
      failed Result with ErrorKind.NOT_FOUND
    - Store-scope imports are NOT transactional: batches are applied one
      collection at a time, so a malformed later collection leaves earlier
      ones already replaced

Thread safety:
    One asyncio lock per Store serializes mutations, imports and exports.
    Collections themselves are unsynchronized and must only be touched
    through the Store.

How to change safely:
    - Keep failure signalling through Result; callers branch on ErrorKind
    - Import policy (replace vs merge) belongs to CollectionBatch.mode
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List

from ..codec.base import (
    BatchMode,
    Codec,
    CollectionBatch,
    ExportPayload,
    ImportSummary,
    collection_filename,
    store_filename,
)
from ..errors import ErrorKind, MalformedInputError
from ..result import Result
from .collection import Collection
from .record import Record

logger = logging.getLogger(__name__)


def _collection_not_found(name: str) -> Result:
    return Result.failure(ErrorKind.NOT_FOUND, f"Collection '{name}' not found")


def _record_not_found(name: str, record_id: str) -> Result:
    return Result.failure(
        ErrorKind.NOT_FOUND, f"Record '{record_id}' not found in collection '{name}'"
    )


class Store:
    """Registry of collections with lock-guarded operations.

    Example:
        >>> store = Store()
        >>> await store.create_collection("tasks")
        >>> result = await store.add_record("tasks", Record(data={"title": "x"}))
        >>> result.value
        '6f1c...'
    """

    def __init__(self) -> None:
        self._collections: Dict[str, Collection] = {}
        self._lock = asyncio.Lock()

    # Collections

    async def create_collection(self, name: str) -> Result[bool]:
        """Create a collection if it doesn't exist.

        Returns:
            Result whose value is True if a new collection was created,
            False if it already existed (its records are kept)
        """
        async with self._lock:
            if name in self._collections:
                return Result.success(False, f"Collection '{name}' already exists")
            self._collections[name] = Collection(name)

        logger.info("Collection created", extra={"collection": name})
        return Result.success(True, f"Collection '{name}' created")

    def list_collections(self) -> List[str]:
        return list(self._collections)

    def has_collection(self, name: str) -> bool:
        return name in self._collections

    # Records

    async def add_record(self, name: str, record: Record) -> Result[str]:
        """Upsert a record.

        Returns:
            Result whose value is the record id
        """
        async with self._lock:
            collection = self._collections.get(name)
            if collection is None:
                return _collection_not_found(name)
            collection.add(record)
        return Result.success(record.id)

    async def get_records(self, name: str) -> Result[List[Record]]:
        async with self._lock:
            collection = self._collections.get(name)
            if collection is None:
                return _collection_not_found(name)
            return Result.success(collection.list())

    async def get_record_by_id(self, name: str, record_id: str) -> Result[Record]:
        async with self._lock:
            collection = self._collections.get(name)
            if collection is None:
                return _collection_not_found(name)
            record = collection.get(record_id)
        if record is None:
            return _record_not_found(name, record_id)
        return Result.success(record)

    async def update_record(self, name: str, record: Record) -> Result[str]:
        """Upsert a record; same as add_record at this layer."""
        async with self._lock:
            collection = self._collections.get(name)
            if collection is None:
                return _collection_not_found(name)
            collection.update(record)
        return Result.success(record.id)

    async def delete_record(self, name: str, record_id: str) -> Result[str]:
        async with self._lock:
            collection = self._collections.get(name)
            if collection is None:
                return _collection_not_found(name)
            existed = collection.delete(record_id)
        if not existed:
            return _record_not_found(name, record_id)
        return Result.success(record_id)

    # Export

    async def export_collection(self, name: str, codec: Codec) -> Result[ExportPayload]:
        async with self._lock:
            collection = self._collections.get(name)
            if collection is None:
                return _collection_not_found(name)
            data = codec.encode_collection(collection)

        logger.info(
            "Collection exported",
            extra={"collection": name, "format": codec.format.value, "bytes": len(data)},
        )
        return Result.success(
            ExportPayload(
                filename=collection_filename(name, codec),
                data=data,
                content_type=codec.content_type,
            )
        )

    async def export_store(self, codec: Codec) -> Result[ExportPayload]:
        async with self._lock:
            data = codec.encode_store(list(self._collections.values()))

        logger.info("Store exported", extra={"format": codec.format.value, "bytes": len(data)})
        return Result.success(
            ExportPayload(
                filename=store_filename(codec),
                data=data,
                content_type=codec.content_type,
            )
        )

    # Import

    async def import_collection(
        self, name: str, data: bytes, codec: Codec
    ) -> Result[ImportSummary]:
        """Replace one collection with the decoded records.

        The payload is decoded completely before the collection is swapped,
        so a malformed payload leaves the existing collection untouched.
        """
        async with self._lock:
            if codec.requires_existing_collection and name not in self._collections:
                return _collection_not_found(name)
            try:
                batch = codec.decode_collection(name, data)
            except MalformedInputError as e:
                logger.info(
                    "Collection import rejected",
                    extra={"collection": name, "format": codec.format.value, "error": e.message},
                )
                return Result.from_error(e)

            summary = ImportSummary()
            self._apply_batch(batch, summary)

        logger.info(
            "Collection imported",
            extra={"collection": name, "format": codec.format.value, **summary.to_dict()},
        )
        return Result.success(summary)

    async def import_store(self, data: bytes, codec: Codec) -> Result[ImportSummary]:
        """Apply a whole-store payload collection by collection.

        A top-level decode failure leaves the store unchanged. A failure
        while decoding a later collection is reported as MALFORMED_INPUT
        but does not roll back collections already applied.
        """
        summary = ImportSummary()
        async with self._lock:
            try:
                for batch in codec.decode_store(data):
                    self._apply_batch(batch, summary)
            except MalformedInputError as e:
                if summary.collections:
                    logger.warning(
                        "Store import failed partway; earlier collections were applied",
                        extra={"applied": list(summary.collections), "error": e.message},
                    )
                else:
                    logger.info("Store import rejected", extra={"error": e.message})
                return Result.from_error(e)

        logger.info("Store imported", extra={"format": codec.format.value, **summary.to_dict()})
        return Result.success(summary)

    def _apply_batch(self, batch: CollectionBatch, summary: ImportSummary) -> None:
        # Caller holds self._lock
        summary.skipped += batch.skipped
        if batch.name is None:
            return

        if batch.mode is BatchMode.REPLACE:
            self._collections[batch.name] = Collection.from_records(batch.name, batch.records)
        else:
            collection = self._collections.get(batch.name)
            if collection is None:
                logger.debug(
                    "Dropping records for unknown collection",
                    extra={"collection": batch.name, "records": len(batch.records)},
                )
                summary.skipped += len(batch.records)
                return
            for record in batch.records:
                collection.add(record)

        summary.collections.append(batch.name)
        summary.imported += len(batch.records)
