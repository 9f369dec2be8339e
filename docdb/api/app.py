"""
FastAPI application factory for docdb.

This module creates the FastAPI app with:
- CORS configuration for browser front ends
- One DocumentService per app (its own Store and HookPipeline)
- API routes
- JSON error handler for unhandled exceptions (e.g. failing hooks)
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .._version import __version__
from ..config import Settings
from ..service import DocumentService
from .routes import router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the configured initial collections."""
    service: DocumentService = app.state.service
    for name in app.state.settings.initial_collections:
        await service.create_collection(name)

    logger.info(
        "docdb ready",
        extra={"collections": service.store.list_collections()},
    )
    yield


def create_app(
    settings: Settings | None = None,
    service: DocumentService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Configuration (loaded from environment if not provided)
        service: Document service; pass one to register hooks before serving

    Returns:
        FastAPI application
    """
    settings = settings or Settings()
    service = service or DocumentService()

    app = FastAPI(
        title="docdb",
        description="Schema-less in-memory document store with JSON and SQL-text export/import.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix=settings.api_prefix)

    @app.exception_handler(Exception)
    async def internal_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"HTTP handler error: {exc}", exc_info=exc)
        return JSONResponse(
            {"error": str(exc), "error_code": "INTERNAL"},
            status_code=500,
        )

    @app.get("/health")
    async def health():
        result = await service.health()
        return {"status": "healthy", "service": "docdb", **result}

    return app
