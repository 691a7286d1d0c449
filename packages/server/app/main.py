"""
LoRa Inventory API Server

Entry point for the FastAPI application.
"""

import asyncio
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from app.api.v1 import router as api_v1_router
from app.core.config import Settings, get_settings
from app.core.database import create_session_factory, create_store_engine, ping
from app.core.errors import InvalidArgument, InventoryError, QueryCancelled, StoreUnavailable
from app.core.logging import configure_logging
from app.core.middleware import RequestContextMiddleware, SecurityHeadersMiddleware
from app.services.listing import ListingEngine
from app.services.search import SearchEngine
from lora_inventory_shared.schemas.common import ErrorKind, ErrorResponse

log = structlog.get_logger()

# 499: client closed request (nginx convention)
STATUS_CLIENT_CLOSED_REQUEST = 499

_ERROR_STATUS: list[tuple[type[InventoryError], int, ErrorKind]] = [
    (InvalidArgument, 400, ErrorKind.INVALID_ARGUMENT),
    (StoreUnavailable, 503, ErrorKind.STORE_UNAVAILABLE),
    (QueryCancelled, STATUS_CLIENT_CLOSED_REQUEST, ErrorKind.CANCELLED),
]


def _error_response(status: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status, content=body.model_dump(mode="json"))


async def inventory_error_handler(request: Request, exc: InventoryError) -> JSONResponse:
    for cls, status, kind in _ERROR_STATUS:
        if isinstance(exc, cls):
            break
    else:
        log.error("request.unmapped_error", error=type(exc).__name__, detail=exc.message)
        return _error_response(
            500, ErrorResponse(error=ErrorKind.INTERNAL, detail="internal error")
        )
    log.info("request.failed", error=kind.value, detail=exc.message)
    return _error_response(
        status,
        ErrorResponse(
            error=kind, detail=exc.message, retryable=exc.retryable, operation=exc.operation
        ),
    )


async def deadline_handler(request: Request, exc: asyncio.TimeoutError) -> JSONResponse:
    log.warning("request.deadline_exceeded")
    return _error_response(
        504,
        ErrorResponse(
            error=ErrorKind.DEADLINE_EXCEEDED, detail="request deadline exceeded", retryable=True
        ),
    )


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[AsyncEngine] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``engine`` lets callers supply their own store (tests use SQLite);
    otherwise one is created from ``settings.database_url``.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_format)
    engine = engine or create_store_engine(settings.database_url, echo=settings.debug)
    session_factory = create_session_factory(engine)

    app = FastAPI(
        title="LoRa Inventory",
        description="Organization-scoped search and listing of applications, devices and gateways.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.search_engine = SearchEngine(session_factory)
    app.state.listing_engine = ListingEngine(
        session_factory, snapshot_reads=settings.snapshot_reads
    )

    # Middleware (order matters — outermost first)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["Authorization", "X-Request-ID"],
    )

    app.add_exception_handler(InventoryError, inventory_error_handler)
    app.add_exception_handler(asyncio.TimeoutError, deadline_handler)

    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check():
        """Readiness check: the store must answer SELECT 1."""
        await ping(app.state.engine)
        return {"status": "ready"}

    @app.on_event("startup")
    async def on_startup():
        log.info("Inventory starting", dialect=app.state.engine.dialect.name)

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("Inventory shutting down")
        await app.state.engine.dispose()

    return app


def run() -> None:
    """CLI entry point: serve the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    run()
