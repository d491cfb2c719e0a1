"""
FastAPI application factory + lifespan.

Control and inspection surface for pivot report acquisition sessions:
- Sessions are kept per entity by ``session_registry``.
- Loads run as background tasks; progress is polled.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from pivot_report import __version__
from pivot_report.api.v1 import api_router
from pivot_report.core.config import settings
from pivot_report.core.logging import setup_logging
from pivot_report.services.orchestrator import session_registry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: configure logging.
    Shutdown: invalidate live sessions and cancel their tasks.
    """
    setup_logging()
    logger.info(f"[App] Starting {settings.APP_NAME} API ({settings.APP_ENV})")

    yield

    logger.info("[App] Shutting down …")
    await session_registry.close_all()


def create_fastapi_app() -> FastAPI:
    """Application factory for FastAPI."""
    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="Paginated pivot report data acquisition",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url="/api/redoc" if settings.DEBUG else None,
    )

    app.include_router(api_router)

    @app.get("/")
    async def root():
        return {
            "app": settings.APP_NAME,
            "version": __version__,
            "status": "running",
            "docs": "/api/docs" if settings.DEBUG else "disabled",
        }

    return app


# Module-level instance for ``uvicorn pivot_report.main:app``
app = create_fastapi_app()
