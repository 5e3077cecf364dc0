"""
Armory API — FastAPI Application Factory
==========================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the engine (the only long-lived resource), one
       ResourceGateway per registered resource, and mounts a CRUD router for
       each. Middleware, exception handlers and the lifespan hook are
       registered here.
Who:   uvicorn imports `armory.main:app`; `python -m armory` does the same.

Exception Handlers:
    MalformedRequestError    → 400 {"error": "<message>"}
    NotFoundError            → 404 {"error": "not found"}
    ValidationError          → 422 {"error": "<message>"}
    RequestValidationError   → 422 {"error": "<message>"}
    StorageUnavailableError  → 500 {"error": "internal server error"}
    Exception (fallback)     → 500 {"error": "internal server error"}

Lifecycle:
    Startup:  configure logging, create tables if DB_CREATE_SCHEMA is set
    Shutdown: dispose the engine (close all pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Mapping, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine
from starlette.exceptions import HTTPException as StarletteHTTPException

from armory import __version__
from armory.config import Settings, settings as default_settings
from armory.database import (
    build_engine,
    build_session_factory,
    create_schema,
    dispose_engine,
)
from armory.exceptions import ArmoryError
from armory.middleware.logging import RequestLoggingMiddleware
from armory.middleware.request_id import RequestIDMiddleware, request_id_var
from armory.resources import RESOURCES
from armory.routes import health
from armory.routes.resources import build_resource_router
from armory.services.gateway import ResourceGateway

logger = logging.getLogger(__name__)

INTERNAL_ERROR_BODY = {"error": "internal server error"}


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to status codes and `{"error": ...}` bodies.

    Client errors echo the exception message. Server errors always return
    the same generic body; the detail goes to the log with the request id.
    """

    @app.exception_handler(ArmoryError)
    async def handle_armory_error(request: Request, exc: ArmoryError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error(
                "[%s] %s: %s | Context: %s",
                rid,
                type(exc).__name__,
                exc.message,
                exc.context,
            )
            return JSONResponse(status_code=exc.status_code, content=INTERNAL_ERROR_BODY)

        logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Query or path parameters FastAPI itself could not validate."""
        message = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        return JSONResponse(status_code=422, content={"error": message or "invalid request"})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        """Unknown routes and disallowed methods keep the same body shape."""
        detail = exc.detail if isinstance(exc.detail, str) else "request failed"
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": detail.lower()},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all. The stack trace is logged server-side only."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(status_code=500, content=INTERNAL_ERROR_BODY)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    app_settings: Optional[Settings] = None,
    engine: Optional[AsyncEngine] = None,
    gateways: Optional[Mapping[str, ResourceGateway]] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use; defaults to the environment singleton
        engine:       Pre-built engine; built from settings when omitted
        gateways:     Gateways keyed by resource name; any resource missing
                      from the mapping gets a real gateway on the engine.
                      Tests pass fakes here.
    """
    cfg = app_settings or default_settings
    engine = engine or build_engine(cfg)
    session_factory = build_session_factory(engine)
    overrides = dict(gateways or {})

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        setup_logging(cfg.log_level)
        logger.info("Armory API %s starting (environment=%s)", __version__, cfg.environment)

        if cfg.db_create_schema:
            await create_schema(engine)

        logger.info(
            "Serving %s at http://%s:%d",
            ", ".join(r.prefix for r in RESOURCES),
            cfg.host,
            cfg.port,
        )

        yield

        logger.info("Armory API shutting down...")
        await dispose_engine(engine)
        logger.info("Shutdown complete.")

    app = FastAPI(
        title="Armory API",
        description="CRUD API for the armory's swords and potions.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.engine = engine

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in reverse order of addition: RequestID runs first.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins_list,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.state.gateways = {}
    for resource in RESOURCES:
        gateway = overrides.get(resource.name) or ResourceGateway(
            resource,
            session_factory,
            timeout=cfg.db_operation_timeout,
        )
        app.state.gateways[resource.name] = gateway
        app.include_router(build_resource_router(gateway))

    app.include_router(health.router)

    return app


# uvicorn expects `armory.main:app` to be importable
app = create_app()
