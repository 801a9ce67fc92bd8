"""
Careers Site Backend: FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() builds the service graph from Settings,
       registers middleware, exception handlers, routes and the static mount.
Who:   Called by uvicorn (uvicorn app.main:app) or the `careers-site` script.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────────────┐       │
    │  │ Req ID   │→│  Logging        │→│ Upload limit │       │
    │  └──────────┘ └─────────────────┘ └──────────────┘       │
    │                                                          │
    │  Routes:                                                 │
    │  ┌───────┐ ┌─────────────────────────┐ ┌──────────────┐  │
    │  │ GET / │ │ POST /enviar-candidatura│ │ GET /health  │  │
    │  └───────┘ └─────────────────────────┘ └──────────────┘  │
    │  Static: /assets → public/assets                         │
    │                                                          │
    │  Exception Handlers ({success: false, message}):         │
    │  ┌────────────────────────────────────────────────────┐  │
    │  │ CareersError→own status │ HTTP 404/405 │ other→500 │  │
    │  └────────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────────┘

Service Graph (built once per app):
    Settings ──▶ UploadService(upload_dir, max_upload_size)
             └─▶ MailService(settings.smtp)
                    └──▶ ApplicationService(upload, mail) → app.state
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import __version__
from app.config import Settings, settings
from app.exceptions import CareersError, NotFoundError, ValidationError
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.middleware.upload_limit import UploadLimitMiddleware
from app.routes import applications, health, site
from app.services.application_service import ApplicationService
from app.services.mail_service import MailService
from app.services.upload_service import UploadService

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Erro interno do servidor"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once from the lifespan, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that log every operation at INFO/DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("aiosmtplib").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Setup logging
        2. Validate SMTP configuration (logged, not fatal: the landing
           page and health check keep working without mail)
        3. Purge uploads left by a previous process
    """
    app_settings: Settings = app.state.settings
    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("Careers site starting up (environment: %s)...", app_settings.environment)

    try:
        app_settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    app.state.application_service.upload_service.purge_stale_uploads()

    logger.info("Server ready at http://%s:%d", app_settings.host, app_settings.port)
    logger.info("=" * 60)

    yield

    logger.info("Careers site shutting down.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _envelope(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map every error to the {success: false, message} envelope.

    Handler hierarchy:
        CareersError            → its own status_code and message
        RequestValidationError  → 400 (malformed form, e.g. text in the file field)
        HTTPException           → 404 "Rota não encontrada", others keep their status
        Exception (fallback)    → 500, stack trace logged server-side only.
                                  Request errors are answered by RequestIDMiddleware
                                  first; this covers failures in the middleware itself.
    """

    @app.exception_handler(CareersError)
    async def handle_careers_error(request: Request, exc: CareersError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return _envelope(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Malformed request: %s", rid, exc.errors())
        return _envelope(400, ValidationError.default_message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return _envelope(404, NotFoundError.default_message)
        return _envelope(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return _envelope(500, INTERNAL_ERROR_MESSAGE)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to build the app from. Defaults to the
                      environment-loaded singleton; tests pass their own.
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title="Careers Site API",
        description="Landing page and job-application intake that emails resumes to HR.",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Service Graph ─────────────────────────────────────────────────────
    upload_service = UploadService(
        upload_dir=app_settings.upload_dir,
        max_size=app_settings.max_upload_size,
    )
    mail_service = MailService(app_settings.smtp)
    app.state.settings = app_settings
    app.state.public_dir = str(Path(app_settings.public_dir).resolve())
    app.state.application_service = ApplicationService(upload_service, mail_service)

    # ── Middleware (last added = first to execute) ────────────────────────
    app.add_middleware(UploadLimitMiddleware, upload_service=upload_service)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    app.include_router(site.router)
    app.include_router(applications.router)
    app.include_router(health.router)

    assets_dir = Path(app_settings.public_dir) / "assets"
    if assets_dir.is_dir():
        app.mount("/assets", StaticFiles(directory=assets_dir), name="assets")
    else:
        logger.warning("Static assets directory not found: %s", assets_dir)

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn on HOST:PORT."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


# uvicorn expects `app.main:app` to be importable
app = create_app()
