"""FastAPI application for wellness insights."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import Settings, get_settings
from ..log_sanitizer import install_log_sanitizer
from . import routes
from .deps import get_polling_scheduler
from .exception_handlers import register_exception_handlers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    logger.info(f"Starting wellness insights v{__version__}")
    logger.info(f"Records DB: {settings.db_path}")

    scheduler = None
    if settings.change_polling_enabled:
        try:
            scheduler = get_polling_scheduler()
            scheduler.start()
        except Exception as e:
            logger.warning(f"Failed to start change polling scheduler: {e}")
            scheduler = None
    else:
        logger.info("Change polling is disabled")

    yield

    logger.info("Shutting down wellness insights")
    if scheduler is not None:
        scheduler.stop()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application."""
    install_log_sanitizer()
    settings = settings or get_settings()

    app = FastAPI(
        title="Wellness Insights API",
        description="Mood, journal, wellness and exercise analytics",
        version=__version__,
        lifespan=lifespan,
        redirect_slashes=False,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(routes.router, prefix="/api/v1/users/{user_id}", tags=["insights"])

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": "Wellness Insights API",
            "version": __version__,
            "status": "healthy",
        }

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app
