"""
HTTP routes for docdb.

Thin adapter over DocumentService: path/body parsing in, Result -> HTTP
status out. No store logic lives here.

Status mapping:
    NOT_FOUND        -> 404
    MALFORMED_INPUT  -> 400
    NO_PAYLOAD       -> 400
    upload too large -> 413
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, File, Request, UploadFile
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from ..codec import ExportFormat, ExportPayload
from ..config import Settings
from ..errors import ErrorKind
from ..result import Result
from ..service import DocumentService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["docdb"])

STATUS_BY_ERROR = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.MALFORMED_INPUT: 400,
    ErrorKind.NO_PAYLOAD: 400,
}


# --- Request/Response Models ---


class CollectionCreateRequest(BaseModel):
    """Request to create a collection."""

    name: str = Field(..., min_length=1, description="Collection name")


class RecordCreateRequest(BaseModel):
    """Request to add a record."""

    id: str | int | None = Field(None, description="Record id; generated when omitted")
    data: Any = Field(None, description="Opaque record payload")


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    ok: bool = True
    message: str


# --- Dependencies ---


def get_service(request: Request) -> DocumentService:
    """Get the document service from app state."""
    return request.app.state.service


def get_settings(request: Request) -> Settings:
    """Get settings from app state."""
    return request.app.state.settings


# --- Helpers ---


def failure_response(result: Result) -> JSONResponse:
    status = STATUS_BY_ERROR.get(result.error, 400)
    return JSONResponse(result.to_dict(), status_code=status)


def attachment(payload: ExportPayload) -> Response:
    return Response(
        content=payload.data,
        media_type=payload.content_type,
        headers={"Content-Disposition": f'attachment; filename="{payload.filename}"'},
    )


async def read_upload(file: UploadFile | None, settings: Settings) -> bytes | JSONResponse:
    """Read an uploaded file, enforcing the configured size limit."""
    if file is None:
        return b""
    data = await file.read(settings.max_import_bytes + 1)
    if len(data) > settings.max_import_bytes:
        return JSONResponse(
            {
                "ok": False,
                "message": f"Upload exceeds {settings.max_import_bytes} bytes",
                "error_code": "PAYLOAD_TOO_LARGE",
            },
            status_code=413,
        )
    return data


# --- Collections ---


@router.get("/collections")
async def list_collections(service: DocumentService = Depends(get_service)):
    """List collection names."""
    result = await service.list_collections()
    return result.value


@router.post("/collections", response_model=MessageResponse)
async def create_collection(
    request: CollectionCreateRequest,
    service: DocumentService = Depends(get_service),
):
    """Create a collection (no-op if it already exists)."""
    result = await service.create_collection(request.name)
    return MessageResponse(message=result.message)


# --- Records ---


@router.post("/collections/{collection_name}/records")
async def add_record(
    collection_name: str,
    request: RecordCreateRequest,
    service: DocumentService = Depends(get_service),
):
    """Add (or overwrite) a record."""
    result = await service.add_record(collection_name, request.model_dump())
    if not result.ok:
        return failure_response(result)
    return {"ok": True, "message": "Record added successfully", "id": result.value}


@router.get("/collections/{collection_name}/records")
async def list_records(
    collection_name: str,
    service: DocumentService = Depends(get_service),
):
    """List all records of a collection."""
    result = await service.list_records(collection_name)
    if not result.ok:
        return failure_response(result)
    return [record.to_dict() for record in result.value]


@router.get("/collections/{collection_name}/records/{record_id}")
async def get_record(
    collection_name: str,
    record_id: str,
    service: DocumentService = Depends(get_service),
):
    """Get one record."""
    result = await service.get_record(collection_name, record_id)
    if not result.ok:
        return failure_response(result)
    return result.value.to_dict()


@router.put("/collections/{collection_name}/records/{record_id}")
async def update_record(
    collection_name: str,
    record_id: str,
    data: Any = Body(None),
    service: DocumentService = Depends(get_service),
):
    """Replace the data of an existing record. The body is the new data."""
    result = await service.update_record(collection_name, record_id, data)
    if not result.ok:
        return failure_response(result)
    return {"ok": True, "message": "Record updated successfully", "id": result.value}


@router.delete("/collections/{collection_name}/records/{record_id}")
async def delete_record(
    collection_name: str,
    record_id: str,
    service: DocumentService = Depends(get_service),
):
    """Delete a record."""
    result = await service.delete_record(collection_name, record_id)
    if not result.ok:
        return failure_response(result)
    return {"ok": True, "message": "Record deleted successfully", "id": result.value}


# --- Export / import ---


@router.get("/collections/{collection_name}/export-{fmt}")
async def export_collection(
    collection_name: str,
    fmt: ExportFormat,
    service: DocumentService = Depends(get_service),
):
    """Download one collection as <collection>.json or <collection>.sql."""
    result = await service.export_collection(collection_name, fmt)
    if not result.ok:
        return failure_response(result)
    return attachment(result.value)


@router.post("/collections/{collection_name}/import-{fmt}")
async def import_collection(
    collection_name: str,
    fmt: ExportFormat,
    file: UploadFile | None = File(None),
    service: DocumentService = Depends(get_service),
    settings: Settings = Depends(get_settings),
):
    """Replace one collection from an uploaded file."""
    data = await read_upload(file, settings)
    if isinstance(data, JSONResponse):
        return data
    result = await service.import_collection(collection_name, fmt, data)
    if not result.ok:
        return failure_response(result)
    return {"ok": True, "message": "Data imported successfully", **result.value.to_dict()}


@router.get("/export-{fmt}")
async def export_store(
    fmt: ExportFormat,
    service: DocumentService = Depends(get_service),
):
    """Download the whole store as database.json or database.sql."""
    result = await service.export_store(fmt)
    return attachment(result.value)


@router.post("/import-{fmt}")
async def import_store(
    fmt: ExportFormat,
    file: UploadFile | None = File(None),
    service: DocumentService = Depends(get_service),
    settings: Settings = Depends(get_settings),
):
    """Import a whole-store file."""
    data = await read_upload(file, settings)
    if isinstance(data, JSONResponse):
        return data
    result = await service.import_store(fmt, data)
    if not result.ok:
        return failure_response(result)
    return {"ok": True, "message": "Database imported successfully", **result.value.to_dict()}
