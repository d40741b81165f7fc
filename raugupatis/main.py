"""
Raugupatis Log - fermentation tracking

FastAPI application: JSON API under /api, server-rendered pages, /health.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from sqlalchemy.exc import SQLAlchemyError

from . import __version__
from .api.router import api_router
from .api.routes import health
from .config import Settings, get_settings
from .exceptions import (
    RaugupatisError,
    raugupatis_exception_handler,
    request_validation_exception_handler,
    storage_exception_handler,
    unhandled_exception_handler,
)
from .infra.db.migrate import apply_migrations
from .infra.db.session import Database
from .middleware.request_logging import RequestLoggingMiddleware
from .utils.logging_utils import configure_logging
from .web import pages

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Apply pending migrations before serving; any failure aborts startup."""
    settings: Settings = app.state.settings
    db: Database = app.state.db
    logger.info(f"Starting {settings.app_name} ({settings.environment})...")

    applied = await apply_migrations(db.engine)
    logger.info(f"Database ready ({len(applied)} migration(s) applied at startup)")

    yield

    await db.close()
    logger.info(f"Shutting down {settings.app_name}...")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    settings.ensure_dirs()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        description="Fermentation tracking: batches, temperatures, tasting notes and photos",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url=None,
    )

    app.state.settings = settings
    app.state.db = Database(settings.database_url, echo=settings.debug)
    app.state.templates = pages.build_templates(str(settings.templates_dir))

    # Error mapping
    app.add_exception_handler(RaugupatisError, raugupatis_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, storage_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Middleware (last added runs first)
    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    # Routes
    app.include_router(health.router)
    app.include_router(api_router)
    app.include_router(pages.router)

    return app
