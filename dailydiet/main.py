"""
Daily Diet Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires settings, the Database client, middleware,
       exception handlers and routers; uvicorn serves `dailydiet.main:app`.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────────┐ ┌─────────────────┐  │
    │  │  Req ID  │→│  Rate Limit  │→│  Logging        │  │
    │  └──────────┘ └──────────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌───────────────┐ ┌────────────┐  │
    │  │ /api/meals   │ │ /api/meals/   │ │ /health    │  │
    │  │ CRUD         │ │ summary       │ │            │  │
    │  └──────────────┘ └───────────────┘ └────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ Unauth→401 │ NotFound→404 │ │   │
    │  │ DB→500                                       │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  setup logging → Database.init() (engine + tables)
    Shutdown: Database.teardown() (close pooled connections)
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

from dailydiet import __version__
from dailydiet.config import settings
from dailydiet.database import Database
from dailydiet.exceptions import (
    DailyDietError,
    DatabaseError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from dailydiet.middleware.logging import RequestLoggingMiddleware
from dailydiet.middleware.rate_limit import RateLimitMiddleware
from dailydiet.middleware.request_id import RequestIDMiddleware, request_id_var
from dailydiet.routes import health, meals
from dailydiet.services.validation import format_reasons

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] dailydiet.access: GET /api/meals 200 ...
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialize the Database on startup, tear it down on shutdown."""
    setup_logging()
    logger.info("Daily Diet Backend %s starting up...", __version__)

    database: Database = app.state.database
    await database.init()

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Daily Diet Backend shutting down...")
    await database.teardown()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    # The catch-all handler runs outside the middleware stack, where the
    # ContextVar is already reset; request.state still carries the id.
    return getattr(request.state, "request_id", "") or request_id_var.get("")


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the ErrorResponse body.

    Handler hierarchy:
        ValidationError    → 400 Bad Request
        RequestValidationError → 400 Bad Request (bad JSON, path or query)
        UnauthorizedError  → 401 Unauthorized
        NotFoundError      → 404 Not Found
        DatabaseError      → 500 Internal Server Error
        DailyDietError     → 500 Internal Server Error (catch-all for custom)
        Exception          → 500 Internal Server Error (unexpected errors)

    Responses never contain stack traces or SQL; those are logged.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = _request_id(request)
        logger.warning("[%s] Validation error: %s %s", rid, exc.message, exc.reasons)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        # FastAPI rejects malformed JSON, ids and query values before the
        # handler runs; answer with the same body as ValidationError
        rid = _request_id(request)
        reasons = format_reasons(exc.errors())
        logger.warning("[%s] Malformed request: %s", rid, reasons)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": "Malformed request",
                "details": {"reasons": reasons},
                "request_id": rid,
            },
        )

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        return JSONResponse(
            status_code=401,
            content={
                "error": "unauthorized",
                "message": exc.message,
                "request_id": _request_id(request),
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        # The resource id stays in the logs; the body is identical for
        # "missing" and "someone else's"
        rid = _request_id(request)
        logger.info("[%s] Not found: %s", rid, exc.context)
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = _request_id(request)
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    @app.exception_handler(DailyDietError)
    async def handle_app_error(request: Request, exc: DailyDietError):
        rid = _request_id(request)
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = _request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        database: storage client to use. Defaults to one built from
                  settings.database_url. Tests pass their own.

    Constructing the app performs no I/O; the database is initialized by
    the lifespan (or by the caller, when running without one).
    """
    app = FastAPI(
        title="Daily Diet API",
        description=(
            "Record meals, mark whether they were on your diet, and track "
            "your best on-diet streak."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.database = database or Database(settings.database_url)

    # Middleware executes in REVERSE order of addition:
    # RequestID → RateLimit → Logging → GZip → CORS → routes
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,  # the session cookie
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count", "Retry-After", "Location"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(meals.router)
    app.include_router(health.router)

    return app


app = create_app()
