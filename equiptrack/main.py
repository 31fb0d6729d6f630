"""
Main FastAPI application entry point.
"""

import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware

from equiptrack import __version__
from equiptrack.config import Settings, get_settings
from equiptrack.database import close_db, get_session_factory, init_db
from equiptrack.exceptions import AppError
from equiptrack.services.backend import SqlBackend
from equiptrack.services.inventory import InventoryState
from equiptrack.services.storage import PhotoStore

logger = logging.getLogger(__name__)

SLOW_REQUEST_MS = 100


def configure_logging(settings: Settings) -> None:
    """Configure root logging from settings."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_inventory(settings: Settings) -> InventoryState:
    """Create the inventory state backed by the configured database."""
    return InventoryState(
        backend=SqlBackend(get_session_factory()),
        photo_store=PhotoStore(settings.upload_dir, settings.upload_url_prefix),
        load_timeout=settings.data_load_timeout,
        max_age=settings.snapshot_max_age,
        default_threshold_days=settings.default_tag_threshold_days,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.
    Connects to the database and loads the inventory on startup,
    releases both on shutdown.
    """
    settings = get_settings()
    logger.info("Starting %s v%s (debug=%s)", settings.app_name, __version__, settings.debug)

    await init_db()

    inventory = build_inventory(settings)
    await inventory.init()
    app.state.inventory = inventory

    yield

    await inventory.teardown()
    app.state.inventory = None
    await close_db()

    logger.info("%s shutdown complete", settings.app_name)


class TimingMiddleware(BaseHTTPMiddleware):
    """Log requests slower than SLOW_REQUEST_MS."""

    async def dispatch(self, request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration = (time.perf_counter() - start) * 1000
        if duration > SLOW_REQUEST_MS:
            logger.warning(
                "Slow request: %s %s took %.0fms", request.method, request.url.path, duration
            )
        return response


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        description="Equipment register, check-out/return tracking and test-and-tag compliance",
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
        openapi_url="/api/openapi.json" if settings.debug else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1|192\.168\.\d+\.\d+)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(TimingMiddleware)

    # Include routers
    from equiptrack.routers import equipment, health, movements, uploads

    app.include_router(health.router, tags=["Health"])
    app.include_router(equipment.router, prefix="/api", tags=["Equipment"])
    app.include_router(movements.router, prefix="/api", tags=["Movements"])
    app.include_router(uploads.router, prefix="/api", tags=["Uploads"])

    # Uploaded photos are served back from the upload directory
    app.mount(
        settings.upload_url_prefix,
        StaticFiles(directory=Path(settings.upload_dir), check_dir=False),
        name="uploads",
    )

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        """Convert application errors to {"error", "detail", "fields"} responses."""
        content = {"error": exc.message}
        if exc.extra_detail:
            content["detail"] = exc.extra_detail
        fields = getattr(exc, "fields", None)
        if fields:
            content["fields"] = fields
        return JSONResponse(status_code=exc.status_code, content=content)

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
        )

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "equiptrack.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug,
    )
