"""
EventHub Backend — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   `create_app()` wires settings, the Database handle, the service
       container, middleware, exception handlers and routers, and returns
       the app. uvicorn serves the module-level `app` (uvicorn eventhub.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────┐ ┌──────┐ ┌─────────┐  │
    │  │  Req ID  │→│  Logging    │→│ GZip │→│  CORS   │  │
    │  └──────────┘ └─────────────┘ └──────┘ └─────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  /api/users   /api/events   /api/categories /health │
    │                                                     │
    │  Exception Handlers:                                │
    │  Validation→400 │ NotFound→404 │ Conflict→409 │ 500 │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging → connect database → (optional) create tables
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from eventhub import __version__
from eventhub.config import Settings, get_settings
from eventhub.database import Database
from eventhub.exceptions import (
    ConflictError,
    EventHubError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from eventhub.middleware.logging import RequestLoggingMiddleware
from eventhub.middleware.request_id import RequestIDMiddleware, request_id_var
from eventhub.routes import categories, events, health, users
from eventhub.services import build_services

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    Called once during startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the Database on startup and dispose it on shutdown."""
    settings: Settings = app.state.settings
    database: Database = app.state.database

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings)
    logger.info("EventHub Backend starting up...")

    await database.connect()
    if settings.db_create_all:
        await database.create_all()
        logger.info("Database tables created from model metadata")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("EventHub Backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(exc: EventHubError, include_details: bool = True) -> dict:
    return {
        "error": exc.code,
        "tag": exc.tag,
        "message": exc.message,
        "details": exc.context if include_details else {},
        "request_id": request_id_var.get(""),
    }


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception kinds to HTTP status codes and one JSON error shape.

    Handler hierarchy:
        ValidationError / RequestValidationError → 400
        NotFoundError                            → 404
        ConflictError                            → 409
        PersistenceError                         → 500 (generic message)
        EventHubError (base)                     → 500
        Exception (fallback)                     → 500

    500 responses never carry internal details; those are logged server-side.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=400, content=error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Malformed body, path or query values reported as a 400 validation error."""
        rid = request_id_var.get("")
        logger.warning("[%s] Request validation failed: %d error(s)", rid, len(exc.errors()))
        return JSONResponse(
            status_code=400,
            content={
                "error": ValidationError.code,
                "tag": "invalid request",
                "message": "Request validation failed",
                "details": {"errors": jsonable_encoder(exc.errors())},
                "request_id": rid,
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=error_body(exc))

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        logger.warning("[%s] Conflict: %s", request_id_var.get(""), exc.tag)
        return JSONResponse(status_code=409, content=error_body(exc))

    @app.exception_handler(PersistenceError)
    async def handle_persistence_error(request: Request, exc: PersistenceError):
        logger.error("[%s] Persistence error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(status_code=500, content=error_body(exc, include_details=False))

    @app.exception_handler(EventHubError)
    async def handle_app_error(request: Request, exc: EventHubError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc, include_details=False))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "tag": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "details": {},
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: configuration; defaults to environment-derived settings
        database: persistence handle; defaults to `Database(settings)`.
                  Tests pass their own handle bound to a temporary database.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="EventHub API",
        description="Users, events and categories with filtered, paginated listing.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database or Database(settings)
    app.state.services = build_services(settings)

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in reverse order of addition: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(users.router)
    app.include_router(events.router)
    app.include_router(categories.router)
    app.include_router(health.router)

    return app


app = create_app()
