"""
Liveness endpoint for operational visibility.

No authentication required (internal/infrastructure use).
"""
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from health_engine import __version__
from health_engine.core.config import Settings, get_settings
from health_engine.core.datetime_utils import format_iso, utc_now

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health & Observability"])


class HealthResponse(BaseModel):
    """Response model for /health endpoint."""
    status: str  # "healthy"
    version: str
    timezone: str
    timestamp: str  # ISO 8601 UTC


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Check if the application is running. Returns immediately without doing any work."
)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """
    Liveness probe - is the application process alive?

    Also reports the timezone that defines local midnight, since every
    day-level result depends on it.
    """
    return HealthResponse(
        status="healthy",
        version=__version__,
        timezone=settings.health_engine_timezone,
        timestamp=format_iso(utc_now()),
    )
