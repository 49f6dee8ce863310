"""
Teacher Dashboard Backend — FastAPI Application Factory
========================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() wires settings, the persistence gateway,
       the token service and credential provider onto app.state, then adds
       middleware, exception handlers and routers.
Who:   Called by uvicorn (uvicorn dashboard.main:app) and by the test suite
       with its own Settings.

Application Architecture:
    ┌─────────────────────────────────────────────────────────────┐
    │                       FastAPI App                           │
    │                                                             │
    │  Middleware: SecurityHeaders → RequestID → Logging → GZip → CORS
    │                                                             │
    │  Routes:                                                    │
    │    POST /auth/login      GET/POST /students                 │
    │    PUT/DELETE /students/{id}   GET /analytics  GET /health  │
    │                                                             │
    │  Exception Handlers:                                        │
    │    DashboardError → status_code/error_code of the subclass  │
    │    RequestValidationError → 400 with field errors           │
    │    Exception → 500 (details logged, never returned)         │
    └─────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration warnings, schema + seed data
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any, AsyncGenerator, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from dashboard import __version__
from dashboard.config import Settings, settings
from dashboard.database import Database
from dashboard.exceptions import DashboardError, ServiceUnavailableError, ValidationError
from dashboard.middleware.logging import RequestLoggingMiddleware
from dashboard.middleware.request_id import RequestIDMiddleware, request_id_var
from dashboard.middleware.security_headers import SecurityHeadersMiddleware
from dashboard.routes import analytics, auth, health, students
from dashboard.schemas.common import ErrorResponse
from dashboard.services.auth_service import StaticCredentialProvider, TokenService

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = "An internal error occurred. Please try again later."


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(app_settings: Settings) -> None:
    """
    Configure the root logger once for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, app_settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app_settings: Settings = app.state.settings
    db: Database = app.state.db

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings)
    logger.info("=" * 60)
    logger.info("Teacher Dashboard Backend starting up...")

    try:
        app_settings.validate_required_for_production()
    except ValueError as e:
        # Development defaults still work; they are just loud about it.
        logger.error("Configuration error: %s", str(e))

    await db.initialize(seed=app_settings.seed_sample_data)

    logger.info(
        "Server ready at http://%s:%d", app_settings.backend_host, app_settings.backend_port
    )
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Teacher Dashboard Backend shutting down...")
    await db.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(
    error: str,
    message: str,
    errors: Optional[List[Dict[str, str]]] = None,
) -> Dict[str, Any]:
    """Error envelope, serialized exactly like the ApiResponse success envelope."""
    return ErrorResponse(
        error=error, message=message, errors=errors or None
    ).model_dump(mode="json", exclude_none=True)


def _field_name(loc: tuple) -> str:
    # ("body", "email") -> "email"; ("query", "page") -> "page"
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts)


def _field_message(msg: str) -> str:
    prefix = "Value error, "
    return msg[len(prefix):] if msg.startswith(prefix) else msg


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to envelopes. Internal details (SQL, stack traces) stay
    in the server log; 500 responses always carry the generic message.
    """

    @app.exception_handler(DashboardError)
    async def handle_dashboard_error(request: Request, exc: DashboardError):
        rid = request_id_var.get("")
        headers: Dict[str, str] = {}
        errors = None

        if isinstance(exc, ValidationError):
            errors = exc.errors
        if isinstance(exc, ServiceUnavailableError):
            headers["Retry-After"] = str(exc.retry_after)

        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s",
                         rid, type(exc).__name__, exc.message, exc.context)
            message = GENERIC_SERVER_ERROR
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
            message = exc.message

        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.error_code, message, errors),
            headers=headers or None,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        errors = [
            {"field": _field_name(tuple(err.get("loc", ()))),
             "message": _field_message(str(err.get("msg", "Invalid value")))}
            for err in exc.errors()
        ]
        logger.warning("[%s] Validation failed: %s", rid, errors)
        return JSONResponse(
            status_code=400,
            content=error_body(ValidationError.error_code, "Validation failed", errors),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_body("internal_error", GENERIC_SERVER_ERROR),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(app_settings: Settings = settings) -> FastAPI:
    """
    Assemble the application from `app_settings`.

    Tests pass their own Settings (temporary database, short secrets);
    uvicorn uses the module-level instance below.
    """
    app = FastAPI(
        title="Teacher Dashboard API",
        description="Student records, login and analytics for the teacher dashboard.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Shared services ───────────────────────────────────────────────────
    app.state.settings = app_settings
    app.state.db = Database(app_settings.database_url, pool_timeout=app_settings.db_pool_timeout)
    app.state.token_service = TokenService(
        secret=app_settings.jwt_secret,
        algorithm=app_settings.jwt_algorithm,
        ttl=timedelta(hours=app_settings.token_ttl_hours),
    )
    app.state.identity_provider = StaticCredentialProvider(
        app_settings.login_username, app_settings.login_password
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: SecurityHeaders → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(students.router)
    app.include_router(analytics.router)
    app.include_router(health.router)

    return app


# uvicorn dashboard.main:app
app = create_app()
