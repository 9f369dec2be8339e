"""
Document service - the operation table exposed to the HTTP layer.

The service is the composition root of the core: it owns one Store and one
HookPipeline, and implements each operation as

    pre hooks -> store call -> post hooks

returning a Result so the transport can map failures to status codes.

Invariants:
    - Every operation is keyed by a Route; route hooks use the same keys
    - Pre hooks see the request payload and may mutate it before the
      record is built from it
    - Post hooks run for successful and failed store calls alike, with
      ctx.result set
    - Hook exceptions propagate to the caller

How to change safely:
    - Add new operations with a new Route member; never rename existing keys,
      registered hooks depend on them
    - Keep the store call between the two hook phases
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .codec import ExportFormat, ExportPayload, ImportSummary, get_codec
from .errors import ErrorKind, NoPayloadError
from .hooks import HookContext, HookPipeline
from .result import Result
from .store import Record, Store

logger = logging.getLogger(__name__)


class Route(str, Enum):
    """Logical route keys, one per operation."""

    LIST_COLLECTIONS = "listCollections"
    CREATE_COLLECTION = "createCollection"
    ADD_RECORD = "addRecord"
    LIST_RECORDS = "listRecords"
    GET_RECORD = "getRecord"
    UPDATE_RECORD = "updateRecord"
    DELETE_RECORD = "deleteRecord"
    EXPORT_COLLECTION_JSON = "exportCollectionJSON"
    EXPORT_COLLECTION_SQL = "exportCollectionSQL"
    IMPORT_COLLECTION_JSON = "importCollectionJSON"
    IMPORT_COLLECTION_SQL = "importCollectionSQL"
    EXPORT_STORE_JSON = "exportStoreJSON"
    EXPORT_STORE_SQL = "exportStoreSQL"
    IMPORT_STORE_JSON = "importStoreJSON"
    IMPORT_STORE_SQL = "importStoreSQL"


_BULK_ROUTES: Dict[Tuple[str, str, ExportFormat], Route] = {
    ("export", "collection", ExportFormat.JSON): Route.EXPORT_COLLECTION_JSON,
    ("export", "collection", ExportFormat.SQL): Route.EXPORT_COLLECTION_SQL,
    ("import", "collection", ExportFormat.JSON): Route.IMPORT_COLLECTION_JSON,
    ("import", "collection", ExportFormat.SQL): Route.IMPORT_COLLECTION_SQL,
    ("export", "store", ExportFormat.JSON): Route.EXPORT_STORE_JSON,
    ("export", "store", ExportFormat.SQL): Route.EXPORT_STORE_SQL,
    ("import", "store", ExportFormat.JSON): Route.IMPORT_STORE_JSON,
    ("import", "store", ExportFormat.SQL): Route.IMPORT_STORE_SQL,
}


def bulk_route(action: str, scope: str, fmt: ExportFormat | str) -> Route:
    """Route key for an export/import operation."""
    return _BULK_ROUTES[(action, scope, ExportFormat(fmt))]


class DocumentService:
    """Store operations wrapped in the hook pipeline.

    Attributes:
        store: The document store
        hooks: Hook pipeline owned by this service

    Example:
        >>> service = DocumentService()
        >>> service.hooks.register_global_pre(audit)
        >>> await service.create_collection("tasks")
        >>> result = await service.add_record("tasks", {"data": {"title": "x"}})
        >>> result.value  # generated record id
    """

    def __init__(
        self,
        store: Optional[Store] = None,
        hooks: Optional[HookPipeline] = None,
    ) -> None:
        self.store = store or Store()
        self.hooks = hooks or HookPipeline()

    async def _run(
        self,
        ctx: HookContext,
        operation: Callable[[], Awaitable[Result]],
    ) -> Result:
        await self.hooks.run_pre(ctx)
        result = await operation()
        ctx.result = result
        await self.hooks.run_post(ctx)
        if not result.ok:
            logger.debug(
                "Operation failed",
                extra={"route": ctx.route, "error_code": result.error, "reason": result.message},
            )
        return result

    # Collections

    async def list_collections(self) -> Result[List[str]]:
        async def operation() -> Result:
            return Result.success(self.store.list_collections())

        return await self._run(HookContext(route=Route.LIST_COLLECTIONS), operation)

    async def create_collection(self, name: str) -> Result[bool]:
        ctx = HookContext(route=Route.CREATE_COLLECTION, collection_name=name, payload={"name": name})

        async def operation() -> Result:
            ctx.collection_name = ctx.payload["name"]
            return await self.store.create_collection(ctx.collection_name)

        return await self._run(ctx, operation)

    # Records

    async def add_record(self, collection_name: str, payload: Any = None) -> Result[str]:
        """Add a record built from a {"id"?, "data"?} payload.

        Returns:
            Result whose value is the record id (generated when absent)
        """
        ctx = HookContext(
            route=Route.ADD_RECORD,
            collection_name=collection_name,
            payload=payload if payload is not None else {},
        )

        async def operation() -> Result:
            if not isinstance(ctx.payload, Mapping):
                return Result.failure(
                    ErrorKind.MALFORMED_INPUT,
                    "Record payload must be an object with optional 'id' and 'data'",
                )
            record = Record.from_dict(ctx.payload)
            ctx.record_id = record.id
            return await self.store.add_record(collection_name, record)

        return await self._run(ctx, operation)

    async def list_records(self, collection_name: str) -> Result[List[Record]]:
        ctx = HookContext(route=Route.LIST_RECORDS, collection_name=collection_name)
        return await self._run(ctx, lambda: self.store.get_records(collection_name))

    async def get_record(self, collection_name: str, record_id: str) -> Result[Record]:
        ctx = HookContext(
            route=Route.GET_RECORD, collection_name=collection_name, record_id=record_id
        )
        return await self._run(ctx, lambda: self.store.get_record_by_id(collection_name, record_id))

    async def update_record(self, collection_name: str, record_id: str, data: Any) -> Result[str]:
        """Replace the data of an existing record.

        Unlike Store.update_record this is not an upsert: a missing record
        reports NOT_FOUND.
        """
        ctx = HookContext(
            route=Route.UPDATE_RECORD,
            collection_name=collection_name,
            record_id=record_id,
            payload=data,
        )

        async def operation() -> Result:
            existing = await self.store.get_record_by_id(collection_name, record_id)
            if not existing.ok:
                return existing
            return await self.store.update_record(
                collection_name, Record(id=record_id, data=ctx.payload)
            )

        return await self._run(ctx, operation)

    async def delete_record(self, collection_name: str, record_id: str) -> Result[str]:
        ctx = HookContext(
            route=Route.DELETE_RECORD, collection_name=collection_name, record_id=record_id
        )
        return await self._run(ctx, lambda: self.store.delete_record(collection_name, record_id))

    # Export / import

    async def export_collection(
        self, collection_name: str, fmt: ExportFormat | str
    ) -> Result[ExportPayload]:
        codec = get_codec(fmt)
        ctx = HookContext(
            route=bulk_route("export", "collection", codec.format),
            collection_name=collection_name,
        )
        return await self._run(ctx, lambda: self.store.export_collection(collection_name, codec))

    async def import_collection(
        self, collection_name: str, fmt: ExportFormat | str, data: Optional[bytes]
    ) -> Result[ImportSummary]:
        """Replace a collection from an uploaded payload.

        An empty payload is rejected with NO_PAYLOAD before any hook runs.
        """
        if not data:
            return Result.from_error(NoPayloadError())

        codec = get_codec(fmt)
        ctx = HookContext(
            route=bulk_route("import", "collection", codec.format),
            collection_name=collection_name,
            payload=data,
        )
        return await self._run(
            ctx, lambda: self.store.import_collection(collection_name, ctx.payload, codec)
        )

    async def export_store(self, fmt: ExportFormat | str) -> Result[ExportPayload]:
        codec = get_codec(fmt)
        ctx = HookContext(route=bulk_route("export", "store", codec.format))
        return await self._run(ctx, lambda: self.store.export_store(codec))

    async def import_store(
        self, fmt: ExportFormat | str, data: Optional[bytes]
    ) -> Result[ImportSummary]:
        """Import a whole-store payload.

        An empty payload is rejected with NO_PAYLOAD before any hook runs.
        """
        if not data:
            return Result.from_error(NoPayloadError())

        codec = get_codec(fmt)
        ctx = HookContext(route=bulk_route("import", "store", codec.format), payload=data)
        return await self._run(ctx, lambda: self.store.import_store(ctx.payload, codec))

    async def health(self) -> Dict[str, Any]:
        """Health check."""
        return {
            "healthy": True,
            "collections": len(self.store.list_collections()),
        }
