"""
BookClub Backend — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn app.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐       │
    │  │  Req ID      │→│Rate Limit│→│  Logging        │       │
    │  └──────────────┘ └──────────┘ └─────────────────┘       │
    │                                                          │
    │  Routes:                                                 │
    │  /members  /members/{u}/follow  /books  /reviews  /health│
    │                                                          │
    │  Exception Handlers (→ error envelope):                  │
    │  DomainError→its status │ Validation→400 │ DB→500        │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check, optional table creation
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.database import create_tables, dispose_engine
from app.exceptions import BookClubError, DatabaseError, DomainError
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var
from app.routes import books, follows, health, members, reviews

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Called once during app startup, before any other initialization.
    Format: 2025-01-27T12:00:00 [INFO] app.services.auth_service: Member kim logged in
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Quiet libraries that log every operation at INFO/DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("BookClub Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving so local development works; the warning stays visible.
        logger.warning("%s", str(e))

    if settings.auto_create_tables:
        await create_tables()
        logger.info("Database tables ensured (AUTO_CREATE_TABLES=true)")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("BookClub Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_envelope(
    status_code: int,
    message: str,
    code: str,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """
    The `{data, message, code, request_id}` body every error response uses.

    The X-Request-ID header is set here as well: the 500 handler runs in
    ServerErrorMiddleware, outside RequestIDMiddleware.
    """
    rid = request_id_var.get("")
    response_headers = dict(headers or {})
    if rid:
        response_headers[REQUEST_ID_HEADER] = rid
    return JSONResponse(
        status_code=status_code,
        content={
            "data": None,
            "message": message,
            "code": code,
            "request_id": rid,
        },
        headers=response_headers,
    )


def _validation_summary(errors: Any) -> str:
    """First few pydantic errors as 'field: message' for the envelope message."""
    parts = []
    for error in list(errors)[:3]:
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{location}: {error.get('msg', 'invalid')}" if location else error.get("msg", "invalid"))
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to error envelopes.

    Handler hierarchy:
        DomainError (Member/Follow/Book/Review) → status and code of its ErrorCode
        RequestValidationError                  → 400 VALIDATION_ERROR
        DatabaseError                           → 500, generic message
        BookClubError (base)                    → 500
        Exception (fallback)                    → 500

    Internal details (SQL, stack traces) are logged, never returned.
    """

    @app.exception_handler(DomainError)
    async def handle_domain_error(request: Request, exc: DomainError):
        logger.info(
            "[%s] %s %s rejected: %s (%s)",
            request_id_var.get(""),
            request.method,
            request.url.path,
            exc.error_code.name,
            exc.code,
        )
        return error_envelope(exc.status_code, exc.message, exc.code)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        message = _validation_summary(exc.errors())
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), message)
        return error_envelope(400, message, "VALIDATION_ERROR")

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context
        )
        return error_envelope(
            500, "An internal error occurred. Please try again later.", exc.code
        )

    @app.exception_handler(BookClubError)
    async def handle_app_error(request: Request, exc: BookClubError):
        logger.error(
            "[%s] Application error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context
        )
        return error_envelope(exc.status_code, exc.message, exc.code)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True
        )
        return error_envelope(
            500,
            "An unexpected error occurred. Please try again or contact support.",
            "INTERNAL_SERVER_ERROR",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="BookClub API",
        description=(
            "Book community backend: members, books, favorites, follows and reviews. "
            "Authenticate with `Authorization: Bearer <token>` from POST /members/login."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → RateLimit → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(members.router)
    app.include_router(follows.router)
    app.include_router(books.router)
    app.include_router(reviews.router)
    app.include_router(health.router)

    return app


app = create_app()
