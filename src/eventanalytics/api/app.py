"""FastAPI application factory for the event analytics service."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from eventanalytics import __version__
from eventanalytics.api.deps import init_context, reset_context
from eventanalytics.api.middleware import RequestTimingMiddleware
from eventanalytics.api.routers import dialects, orgunits, tables
from eventanalytics.api.schemas import HealthResponse
from eventanalytics.context import build_context
from eventanalytics.settings import Settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Build the AnalyticsContext alongside the application."""
    settings: Settings = app.state.settings
    context = build_context(settings)
    init_context(context)
    try:
        yield
    finally:
        reset_context()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="Event Analytics",
        description="Plans and populates event analytics tables and answers org unit reports.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Middleware
    app.add_middleware(RequestTimingMiddleware)

    app.include_router(orgunits.router, prefix="/analytics", tags=["analytics"])
    app.include_router(tables.router, prefix="/analytics", tags=["tables"])
    app.include_router(dialects.router, prefix="/dialects", tags=["dialects"])

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    return app


def main() -> None:
    """Run the REST API server using settings from environment / .env file."""
    settings = Settings()

    logging.basicConfig(level=settings.log_level.upper())
    logger = logging.getLogger("eventanalytics.api")
    logger.info(
        "Event Analytics API Server v%s starting (host=%s, port=%d)",
        __version__, settings.api_server_host, settings.effective_port,
    )

    uvicorn.run(
        "eventanalytics.api.app:create_app",
        factory=True,
        host=settings.api_server_host,
        port=settings.effective_port,
        log_level=settings.log_level.lower(),
    )
