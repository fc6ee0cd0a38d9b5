"""
FaceReader Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers, and routers;
       `app` at module level is what uvicorn serves
       (uvicorn facereader.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware:  Req ID → Logging → GZip → CORS             │
    │                                                          │
    │  Routes:                                                 │
    │   /api/<analysis>   /api/compatibility-share             │
    │   /api/admin/dummy-settings   /api/files/*   /health     │
    │                                                          │
    │  Exception Handlers:                                     │
    │   Validation→400  NotFound→404  Conflict→409             │
    │   ImageConversion→422  AnalysisParse→500  LLM→503        │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → configuration check → storage directory
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from facereader import __version__
from facereader.config import settings
from facereader.database import dispose_engine
from facereader.exceptions import (
    AnalysisParseError,
    CircuitBreakerOpenError,
    ConflictError,
    DatabaseError,
    FaceReaderError,
    FileStorageError,
    ImageConversionError,
    LLMServiceError,
    NotFoundError,
    ValidationError,
)
from facereader.middleware.logging import RequestLoggingMiddleware
from facereader.middleware.request_id import RequestIDMiddleware, request_id_var
from facereader.routes import admin, analysis, files, health, shares

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once at startup.

    Format: 2024-01-15T12:00:00 [INFO] facereader.services.gemini_service: ...
    Output goes to stdout (collected by Docker).
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries that log every operation
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("FaceReader Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: health checks, shares and dummy mode work without Gemini
        logger.error("Configuration error: %s", str(e))
        logger.error("Analysis endpoints will fail until the configuration is fixed.")

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Storage directory: %s", storage.resolve())
    logger.info("Prompt templates: %s", Path(settings.prompts_dir).resolve())

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("FaceReader Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details=None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and the common error body.

    Handler hierarchy:
        ValidationError / RequestValidationError → 400
        NotFoundError                            → 404
        ConflictError                            → 409 (error = conflict code)
        ImageConversionError                     → 422
        AnalysisParseError                       → 500 (raw completion in details)
        FileStorageError / DatabaseError         → 500 (details logged only)
        LLMServiceError / CircuitBreakerOpenError→ 503 (+ Retry-After)
        FaceReaderError / Exception              → 500
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Malformed body/form/query: same 400 shape as service-level validation."""
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
                "message": str(err.get("msg", "")).removeprefix("Value error, "),
            }
            for err in exc.errors()
        ]
        message = errors[0]["message"] if errors else "Validation failed"
        logger.warning("[%s] Request validation error: %s", request_id_var.get(""), errors)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", message, {"errors": errors}),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=_error_body("not_found", exc.message))

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        # The apps switch on the code, e.g. "DUPLICATE_SHARE"
        return JSONResponse(status_code=409, content=_error_body(exc.code, exc.message))

    @app.exception_handler(ImageConversionError)
    async def handle_image_conversion(request: Request, exc: ImageConversionError):
        logger.warning(
            "[%s] Image conversion failed: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=422,
            content=_error_body("image_conversion_error", exc.message),
        )

    @app.exception_handler(AnalysisParseError)
    async def handle_analysis_parse_error(request: Request, exc: AnalysisParseError):
        """The completion is returned so a bad model answer can be diagnosed from the app."""
        logger.error("[%s] Analysis parse error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "analysis_parse_error",
                exc.message,
                {"raw_text": exc.raw_text, **exc.context},
            ),
        )

    @app.exception_handler(CircuitBreakerOpenError)
    async def handle_circuit_breaker(request: Request, exc: CircuitBreakerOpenError):
        logger.warning("[%s] Circuit breaker open: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=503,
            content=_error_body(
                "service_unavailable", exc.message, {"recovery_time": exc.recovery_time}
            ),
            headers={"Retry-After": str(exc.recovery_time)},
        )

    @app.exception_handler(LLMServiceError)
    async def handle_llm_error(request: Request, exc: LLMServiceError):
        logger.error("[%s] LLM service error: %s", request_id_var.get(""), exc.message)
        headers = {}
        if exc.retry_after:
            headers["Retry-After"] = str(exc.retry_after)
        return JSONResponse(
            status_code=503,
            content=_error_body("llm_service_error", exc.message, exc.context),
            headers=headers,
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return JSONResponse(status_code=500, content=_error_body("server_error", exc.message))

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error(
            "[%s] File storage error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return JSONResponse(status_code=500, content=_error_body("server_error", exc.message))

    @app.exception_handler(FaceReaderError)
    async def handle_application_error(request: Request, exc: FaceReaderError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=500, content=_error_body("server_error", exc.message))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Stack trace goes to the log, never to the client."""
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="FaceReader API",
        description=(
            "Face and outfit analysis backend for the FaceReader apps. Portrait photos are "
            "analyzed by Google Gemini and returned as validated JSON objects."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Executed in reverse order of addition: RequestID runs first
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
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(analysis.router)
    app.include_router(shares.router)
    app.include_router(admin.router)
    app.include_router(files.router)
    app.include_router(health.router)

    return app


app = create_app()
