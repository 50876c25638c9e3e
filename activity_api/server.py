"""
Activity Engine API Server - read-only REST API for calendar, kanban and
dashboard consumers.

Run:
    uvicorn activity_api.server:app
    python -m activity_api.server
"""
# ruff: noqa: S104
# S104: Development server binding (guarded by __name__ check)

import logging
import os

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from activity_engine.config import EngineSettings, get_settings
from activity_engine.observability import CorrelationIdMiddleware, configure_from_settings

from .activity_router import router as activity_router

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def create_app(settings: EngineSettings | None = None) -> FastAPI:
    """Build the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Activity Engine API",
        description="Unified tasks, shootings and meetings with derived status",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_origins != ["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    app.include_router(activity_router, prefix=API_PREFIX)
    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    configure_from_settings(settings)
    uvicorn.run(
        app,
        host=os.getenv("ACTIVITY_API_HOST", "0.0.0.0"),
        port=int(os.getenv("ACTIVITY_API_PORT", "8420")),
    )
