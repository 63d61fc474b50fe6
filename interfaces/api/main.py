"""Main FastAPI application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from application.ports.object_store import ObjectStore
from infrastructure.config import Settings, settings
from infrastructure.logging import setup_logging
from infrastructure.object_stores.local_object_store import LocalStorageConfig
from interfaces.api.routes.object_routes import router as object_router
from interfaces.api.routes.object_routes import storage_router
from interfaces.dependencies import get_container

# Configure structured logging
setup_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:  # noqa: ARG001
    """Handle application startup and shutdown."""
    logger.info("app_starting", env=settings.app_env)

    container = get_container()
    container[ObjectStore].ensure_directories()

    logger.info("app_ready")

    yield

    logger.info("app_shutting_down")
    logger.info("app_stopped")


def create_app(app_settings: Settings = settings) -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=app_settings.app_name,
        description="Local Object Store API",
        version="1.0.0",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure properly for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(object_router)
    # Same base URL the store builds object URLs from; only a path-shaped one is servable here
    base_url = LocalStorageConfig.from_settings(app_settings).base_url
    if base_url.startswith("/"):
        app.include_router(storage_router, prefix=base_url)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


# Create app instance
app = create_app()
