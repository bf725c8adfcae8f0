"""
Medications router - dose generation and schedule lookups.

Stateless: the caller persists generated doses and skips ones it already
has. Bad "HH:MM" strings surface as InvalidScheduleError (422), handled by
the exception handlers registered in main.py.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends

from health_engine.core.dependencies import get_engine_config, get_recurrence_scheduler
from health_engine.core.engine_config import EngineConfig
from health_engine.schemas.requests import (
    DoseGenerationRequest,
    DoseGenerationResponse,
    FrequencyInfo,
    RegenerationCheckRequest,
    RegenerationCheckResponse,
)
from health_engine.services import RecurrenceScheduler

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/medications",
    tags=["Medications"],
)


@router.post(
    "/doses",
    response_model=DoseGenerationResponse,
    summary="Generate scheduled doses",
    description="Expand a medication's frequency and times of day into dose instances "
                "from the start date up to the horizon (or the end date, if earlier)."
)
async def generate_doses(
    request: DoseGenerationRequest,
    scheduler: RecurrenceScheduler = Depends(get_recurrence_scheduler),
) -> DoseGenerationResponse:
    """
    Generate doses for one medication.

    - **frequency**: once_daily, twice_daily, three_times_daily, weekly, as_needed or other
    - **times_of_day**: one to four "HH:MM" strings
    - **horizon_days**: optional, defaults to the configured horizon

    As-needed medications always yield an empty list.
    """
    doses = scheduler.generate_doses(
        medication_id=request.medication_id,
        user_id=request.user_id,
        frequency=request.frequency,
        times_of_day=request.times_of_day,
        start_date=request.start_date,
        end_date=request.end_date,
        horizon_days=request.horizon_days,
    )
    logger.info(
        "Doses generated",
        extra={"medication_id": request.medication_id, "count": len(doses)}
    )
    return DoseGenerationResponse(
        medication_id=request.medication_id,
        frequency_label=scheduler.frequency_label(request.frequency),
        count=len(doses),
        doses=doses,
    )


@router.post(
    "/regeneration-check",
    response_model=RegenerationCheckResponse,
    summary="Check whether doses need regenerating",
    description="True when fewer than buffer_days of future doses remain, or when there are none."
)
async def regeneration_check(
    request: RegenerationCheckRequest,
    scheduler: RecurrenceScheduler = Depends(get_recurrence_scheduler),
) -> RegenerationCheckResponse:
    return RegenerationCheckResponse(
        should_regenerate=scheduler.should_regenerate(
            request.existing_doses,
            buffer_days=request.buffer_days,
            now=request.now,
        ),
        latest_scheduled_time=scheduler.latest_scheduled_time(request.existing_doses),
    )


@router.get(
    "/frequencies",
    response_model=List[FrequencyInfo],
    summary="List medication frequencies",
    description="Display label and expected dose rate for every supported frequency."
)
async def list_frequencies(
    config: EngineConfig = Depends(get_engine_config),
) -> List[FrequencyInfo]:
    return [
        FrequencyInfo(
            frequency=key,
            label=definition.label,
            doses=definition.doses,
            every_days=definition.every_days,
            doses_per_day=definition.doses_per_day,
        )
        for key, definition in config.frequencies.items()
    ]
