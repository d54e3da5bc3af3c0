"""
Document Catalog — FastAPI Application Factory
===============================================

What:  Builds the FastAPI application: settings, database, middleware,
       exception handlers and routers.
Who:   uvicorn (`uvicorn doccatalog.main:app`) and the test suite
       (`create_app(Settings(...))`).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │  app.state.settings   app.state.database            │
    │                                                     │
    │  Middleware:  Request ID → Access log → GZip → CORS │
    │                                                     │
    │  Routes:  /documents  /categories  /technologies    │
    │           /health                                   │
    │                                                     │
    │  Exception Handlers:                                │
    │  Validation→400 │ NotFound→404 │ Conflict→409 │     │
    │  Storage→500    │ Exception→500                     │
    └─────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from doccatalog import __version__
from doccatalog.config import Settings
from doccatalog.database import Database
from doccatalog.exceptions import (
    ConflictError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from doccatalog.middleware.logging import RequestLoggingMiddleware
from doccatalog.middleware.request_id import (
    RequestIDLogFilter,
    RequestIDMiddleware,
    request_id_var,
)
from doccatalog.routes import categories, documents, health, technologies

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure the root logger once at startup.

    Format: %(asctime)s [%(levelname)s] %(name)s [%(request_id)s] %(message)s
    The request id comes from RequestIDLogFilter, attached to the handler so
    records from every library get the attribute.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDLogFilter())

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: configure logging. Shutdown: dispose the database engine."""
    settings: Settings = app.state.settings
    setup_logging(settings)
    logger.info("Document Catalog %s starting up", __version__)
    logger.info("Database: %s", settings.database_name if not settings.is_sqlite else "sqlite")
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Document Catalog shutting down...")
    await app.state.database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    # request.state outlives the ContextVar reset in RequestIDMiddleware
    return getattr(request.state, "request_id", None) or request_id_var.get("")


def _error_body(request: Request, message: str, **extra) -> dict:
    body = {"error": message}
    body.update(extra)
    body["requestId"] = _request_id(request)
    return body


def _field_name(loc) -> str:
    # ("body", "title") → "title"; ("body",) → "body"
    parts = [str(p) for p in loc]
    if len(parts) > 1 and parts[0] in {"body", "query", "path", "header"}:
        parts = parts[1:]
    return ".".join(parts)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map catalog exceptions to status codes and JSON bodies.

    Handler hierarchy:
        RequestValidationError  → 400 {"errors": [...]}
        ValidationError         → 400 {"error": ...} or {"errors": [...]}
        NotFoundError           → 404
        ConflictError           → 409
        StorageError            → 500 (generic message; details logged)
        Exception (fallback)    → 500
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = [
            {"field": _field_name(err.get("loc", ())), "message": err.get("msg", "Invalid value")}
            for err in exc.errors()
        ]
        logger.warning("Request validation failed: %s", [e["field"] for e in errors])
        return JSONResponse(
            status_code=400,
            content={"errors": errors, "requestId": _request_id(request)},
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("Validation error: %s", exc.message)
        if exc.errors:
            return JSONResponse(
                status_code=400,
                content={"errors": exc.errors, "requestId": _request_id(request)},
            )
        return JSONResponse(status_code=400, content=_error_body(request, exc.message, **exc.context))

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=_error_body(request, exc.message))

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        logger.warning("Conflict: %s | Context: %s", exc.message, exc.context)
        return JSONResponse(status_code=409, content=_error_body(request, exc.message))

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        logger.error("Storage error: %s | Context: %s", exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body(request, f"Internal server error: {exc.message}"),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        # Served outside the middleware stack, so the header is set here
        rid = _request_id(request)
        return JSONResponse(
            status_code=500,
            content=_error_body(request, "Internal server error: an unexpected error occurred"),
            headers={"X-Request-ID": rid} if rid else None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Explicit configuration; a fresh `Settings()` read from the
                  environment when omitted.
    """
    settings = settings or Settings()

    app = FastAPI(
        title="Document Catalog API",
        description=(
            "Catalogue of technical documentation links organized by "
            "category/subcategory and publication status."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = Database(settings)

    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(documents.router)
    app.include_router(categories.router)
    app.include_router(technologies.router)
    app.include_router(health.router)

    return app


app = create_app()
