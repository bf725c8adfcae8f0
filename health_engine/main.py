"""
Health Engine API.

A stateless JSON front for the engine services. Callers post records they
have already filtered by owner and window; nothing is stored.

    /health                              liveness
    /api/v1/medications/...              dose generation, regeneration check, frequency table
    /api/v1/analytics/...                streak, data quality, reminders, insights

Request flow:
    LoggingMiddleware (request id) → router → Depends(get_*) → service
                                                   ↑
                         Settings + EngineConfig + LocalCalendar + Clock

Run with ``health-engine`` (see pyproject) or ``python -m health_engine.main``.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from health_engine import __version__
from health_engine.api.routers import analytics_router, health_router, medications_router
from health_engine.core.config import get_settings
from health_engine.core.engine_config import load_engine_config
from health_engine.core.exceptions import setup_exception_handlers
from health_engine.core.logging_config import setup_logging
from health_engine.core.middleware import LoggingMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Validate settings, configure logging and load the engine tables before
    serving. Any of these failing stops startup.
    """
    settings = get_settings()
    setup_logging(level=settings.log_level, fmt=settings.log_format)

    config = load_engine_config(settings.tables_path)
    logger.info(
        "Health Engine API started",
        extra={
            "version": __version__,
            "timezone": settings.health_engine_timezone,
            "window_days": settings.health_engine_window_days,
            "tables": str(settings.tables_path),
            "frequencies": len(config.frequencies),
        }
    )
    yield
    logger.info("Health Engine API stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Health Engine API",
        description="Medication dose scheduling, logging streaks, data quality scoring, "
                    "smart reminders and BP correlation insights.",
        version=__version__,
        lifespan=lifespan,
    )

    setup_exception_handlers(app)

    # Added last, so it wraps CORS and sees every request first
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(LoggingMiddleware)

    for router in (health_router, medications_router, analytics_router):
        app.include_router(router)

    return app


app = create_app()


def run() -> None:
    """Console entry point."""
    settings = get_settings()
    uvicorn.run(
        "health_engine.main:app",
        host=settings.health_engine_host,
        port=settings.health_engine_port,
        reload=settings.health_engine_reload,
    )


if __name__ == "__main__":
    run()
