"""
FastAPI dependency injection for the Health Engine.

Routers never build services themselves. They ask for one via Depends(),
and the functions below wire settings, engine tables, the calendar and the
clock into it.

Architecture Flow:
    API Layer (Routers)
         ↓ Depends()
    Service Layer (RecurrenceScheduler, StreakTracker, ...)
         ↓ Injected
    EngineConfig + LocalCalendar + Clock

Testing:
    # Pin "now" for every service
    app.dependency_overrides[get_clock] = lambda: fixed_clock(now)
"""
import logging

from fastapi import Depends

from health_engine.core.config import Settings, get_settings
from health_engine.core.datetime_utils import Clock, LocalCalendar, utc_now
from health_engine.core.engine_config import EngineConfig, load_engine_config
from health_engine.services import (
    CorrelationService,
    QualityScorer,
    RecurrenceScheduler,
    ReminderPrioritizer,
    StreakTracker,
)

logger = logging.getLogger(__name__)


# =============================================================================
# SHARED DEPENDENCIES
# =============================================================================

def get_engine_config(settings: Settings = Depends(get_settings)) -> EngineConfig:
    """Engine tables from the configured (or bundled) YAML file. Cached per path."""
    return load_engine_config(settings.tables_path)


def get_calendar(settings: Settings = Depends(get_settings)) -> LocalCalendar:
    return LocalCalendar(settings.timezone)


def get_clock() -> Clock:
    """The wall clock. Override in tests to pin "now"."""
    return utc_now


# =============================================================================
# SERVICE DEPENDENCIES
# =============================================================================

def get_recurrence_scheduler(
    settings: Settings = Depends(get_settings),
    config: EngineConfig = Depends(get_engine_config),
    calendar: LocalCalendar = Depends(get_calendar),
    clock: Clock = Depends(get_clock),
) -> RecurrenceScheduler:
    return RecurrenceScheduler(
        config=config,
        calendar=calendar,
        clock=clock,
        horizon_days=settings.health_engine_dose_horizon_days,
        buffer_days=settings.health_engine_regeneration_buffer_days,
    )


def get_streak_tracker(
    config: EngineConfig = Depends(get_engine_config),
    calendar: LocalCalendar = Depends(get_calendar),
    clock: Clock = Depends(get_clock),
) -> StreakTracker:
    return StreakTracker(config=config, calendar=calendar, clock=clock)


def get_quality_scorer(
    settings: Settings = Depends(get_settings),
    config: EngineConfig = Depends(get_engine_config),
    calendar: LocalCalendar = Depends(get_calendar),
    clock: Clock = Depends(get_clock),
) -> QualityScorer:
    return QualityScorer(
        config=config,
        calendar=calendar,
        clock=clock,
        window_days=settings.health_engine_window_days,
    )


def get_reminder_prioritizer(
    config: EngineConfig = Depends(get_engine_config),
    calendar: LocalCalendar = Depends(get_calendar),
    clock: Clock = Depends(get_clock),
) -> ReminderPrioritizer:
    return ReminderPrioritizer(config=config, calendar=calendar, clock=clock)


def get_correlation_service(
    calendar: LocalCalendar = Depends(get_calendar),
) -> CorrelationService:
    return CorrelationService(calendar=calendar)
