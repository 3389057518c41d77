"""
Menu API Backend: FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers and
       returns the app; the lifespan configures logging and storage on
       startup and disposes the engine on shutdown.
Who:   Served by uvicorn (uvicorn menu_api.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Request ID → Logging → GZip → CORS         │
    │                                                          │
    │  Routes:                                                 │
    │   /api/productos   /api/restaurantes   /api/categorias   │
    │   /storage/{path}  /health                               │
    │                                                          │
    │  Exception Handlers:                                     │
    │   ValidationError→422  NotFound→404  Conflict→409        │
    │   Database/FileStorage/unexpected→500                    │
    └──────────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from menu_api import __version__
from menu_api.config import settings
from menu_api.database import dispose_engine
from menu_api.exceptions import (
    ConflictError,
    MenuAPIError,
    NotFoundError,
    ValidationError,
)
from menu_api.middleware.logging import RequestLoggingMiddleware
from menu_api.middleware.request_id import RequestIDMiddleware, request_id_var
from menu_api.routes import categories, files, health, products, restaurants

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Error interno del servidor"
HIDDEN_ERROR_DETAIL = "Contacte al administrador"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s on stdout,
    level from LOG_LEVEL. Called once from the lifespan.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-request noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Menu API starting up (version %s)...", __version__)

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Storage directory: %s", storage.resolve())
    if settings.debug:
        logger.warning("DEBUG is on: 500 responses include exception messages")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Menu API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def internal_error_body(exc: Exception, debug: bool) -> Dict[str, Any]:
    """
    Body of every 500 response.

    The exception text is only exposed when `debug` is true; otherwise the
    client gets a fixed hint and the details stay in the server log. For a
    wrapped driver or OS failure the underlying error text is exposed.
    """
    if isinstance(exc, MenuAPIError):
        detail = exc.context.get("error") or exc.context.get("os_error") or exc.message
    else:
        detail = str(exc) or type(exc).__name__
    return {
        "success": False,
        "message": INTERNAL_ERROR_MESSAGE,
        "error": detail if debug else HIDDEN_ERROR_DETAIL,
    }


def request_errors(exc: RequestValidationError) -> Dict[str, List[str]]:
    """Folds FastAPI's parameter errors into the field → [messages] map."""
    errors: Dict[str, List[str]] = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "path", "query")]
        field = loc[-1] if loc else "general"
        errors.setdefault(field, []).append(err.get("msg", "Valor no válido"))
    return errors


def register_exception_handlers(app: FastAPI, debug: bool = False) -> None:
    """
    Map the exception hierarchy to the JSON envelopes the clients expect.

        ValidationError          → 422 {success, message, errors}
        RequestValidationError   → 422 {success, message, errors}
        NotFoundError            → 404 {success, message}
        ConflictError            → 409 {success, message}
        MenuAPIError (others)    → 500 {success, message, error}
        Exception (fallback)     → 500 {success, message, error}

    `debug` decides whether 500 bodies carry the exception message.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.info("[%s] Validation error on %s: %s", rid, request.url.path, sorted(exc.errors))
        return JSONResponse(
            status_code=422,
            content={"success": False, "message": exc.message, "errors": exc.errors},
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content={
                "success": False,
                "message": ValidationError().message,
                "errors": request_errors(exc),
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content={"success": False, "message": exc.message},
        )

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        rid = request_id_var.get("")
        logger.warning("[%s] Conflict: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=409,
            content={"success": False, "message": exc.message},
        )

    @app.exception_handler(MenuAPIError)
    async def handle_app_error(request: Request, exc: MenuAPIError):
        """DatabaseError, FileStorageError and any other application error."""
        rid = request_id_var.get("")
        logger.error(
            "[%s] %s: %s | Context: %s",
            rid, type(exc).__name__, exc.message, exc.context,
        )
        return JSONResponse(status_code=500, content=internal_error_body(exc, debug))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(status_code=500, content=internal_error_body(exc, debug))


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(debug: Optional[bool] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        debug: Expose exception messages in 500 bodies. Defaults to
               settings.debug.
    """
    if debug is None:
        debug = settings.debug

    app = FastAPI(
        title="Menu API",
        description="Restaurants, menu categories and products with image upload.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app, debug=debug)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(restaurants.router)
    app.include_router(categories.router)
    app.include_router(products.router)
    app.include_router(files.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
