"""
FastAPI application entrypoint for the PreFlight analytics engine.
"""

from __future__ import annotations

from fastapi import FastAPI

from preflight.api.routes import router as api_router
from preflight.core.config import get_settings
from preflight.core.logging import configure_logging


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="PreFlight Executive Analytics",
        version="0.1.0",
        description="Cached executive analytics over the construction portal data.",
    )
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
