"""FastAPI application factory for the lead lifecycle API."""

import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI

from .. import __version__
from ..config import Settings, configure_logging
from ..services.container import ServiceContainer
from ..services.registry import build_container, initialize_services
from .routes.health import router as health_router
from .routes.leads import router as leads_router
from .routes.engagement import router as engagement_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting lead lifecycle API")
    initialize_services(app.state.container)

    yield

    app.state.container.dispose()
    logger.info("Lead lifecycle API shutting down")


def create_app(
    container: Optional[ServiceContainer] = None,
    config: Optional[Settings] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Lead Lifecycle API",
        description="Engagement tracking, lead scoring and lifecycle predictions",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = container or build_container(config)

    app.include_router(health_router)
    app.include_router(leads_router)
    app.include_router(engagement_router)

    return app


def create_default_app() -> FastAPI:
    """Factory for uvicorn: logging plus environment-configured services."""
    configure_logging()
    return create_app()
