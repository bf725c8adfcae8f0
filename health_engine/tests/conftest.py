"""
Shared pytest fixtures for engine and API tests.

Key patterns:

1. Fixed Clock: Every service and endpoint sees the same "now"
2. DI Override: Use app.dependency_overrides to inject test settings and clock
3. Record Builders: Factory fixtures create valid records relative to "now"

Fixture Hierarchy:
    now → calendar/engine_config → services
    now → test_settings → test_app → client
"""
import itertools
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from health_engine.core import dependencies as deps
from health_engine.core.config import Settings, get_settings
from health_engine.core.datetime_utils import LocalCalendar, fixed_clock
from health_engine.core.engine_config import load_engine_config
from health_engine.core.exceptions import setup_exception_handlers
from health_engine.schemas.health_data import (
    BloodPressureReading,
    DietLog,
    ExerciseLog,
    MedicationConfig,
    MedicationDose,
)
from health_engine.services import (
    CorrelationService,
    QualityScorer,
    RecurrenceScheduler,
    ReminderPrioritizer,
    StreakTracker,
)

# Monday, mid-day, so "today" and "yesterday" are unambiguous in UTC
NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
USER_ID = "user-1"


# =============================================================================
# TIME & TABLES
# =============================================================================

@pytest.fixture
def now():
    return NOW


@pytest.fixture
def calendar():
    return LocalCalendar(timezone.utc)


@pytest.fixture
def engine_config():
    """Bundled engine tables."""
    return load_engine_config()


@pytest.fixture
def at(now):
    """Build an instant ``days_ago`` days before now, at the given UTC hour."""
    def _at(days_ago: int, hour: int = 9, minute: int = 0) -> datetime:
        return now.replace(hour=hour, minute=minute) - timedelta(days=days_ago)
    return _at


# =============================================================================
# RECORD BUILDERS
# =============================================================================

@pytest.fixture
def make_bp():
    ids = itertools.count(1)

    def _make(measured_at: datetime, systolic: int = 120, diastolic: int = 78,
              notes: Optional[str] = None) -> BloodPressureReading:
        return BloodPressureReading(
            id=f"bp-{next(ids)}",
            user_id=USER_ID,
            systolic=systolic,
            diastolic=diastolic,
            measured_at=measured_at,
            notes=notes,
        )
    return _make


@pytest.fixture
def make_diet():
    ids = itertools.count(1)

    def _make(logged_at: datetime, meal_type: str = "lunch") -> DietLog:
        return DietLog(
            id=f"diet-{next(ids)}",
            user_id=USER_ID,
            meal_type=meal_type,
            description="Grilled chicken salad",
            logged_at=logged_at,
        )
    return _make


@pytest.fixture
def make_exercise():
    ids = itertools.count(1)

    def _make(logged_at: datetime, duration_minutes: int = 30) -> ExerciseLog:
        return ExerciseLog(
            id=f"exercise-{next(ids)}",
            user_id=USER_ID,
            activity_type="walking",
            duration_minutes=duration_minutes,
            logged_at=logged_at,
        )
    return _make


@pytest.fixture
def make_dose():
    ids = itertools.count(1)

    def _make(scheduled_time: datetime, was_taken: bool = False,
              medication_id: str = "med-1") -> MedicationDose:
        return MedicationDose(
            id=f"dose-{next(ids)}",
            user_id=USER_ID,
            medication_log_id=medication_id,
            scheduled_time=scheduled_time,
            taken_at=scheduled_time if was_taken else None,
            was_taken=was_taken,
        )
    return _make


@pytest.fixture
def make_medication(now):
    def _make(medication_id: str = "med-1", frequency: str = "once_daily",
              is_active: bool = True, **overrides) -> MedicationConfig:
        fields = dict(
            id=medication_id,
            user_id=USER_ID,
            medication_name="Lisinopril",
            dosage="10mg",
            frequency=frequency,
            time_of_day=["08:00"],
            start_date=now - timedelta(days=30),
            is_active=is_active,
        )
        fields.update(overrides)
        return MedicationConfig(**fields)
    return _make


# =============================================================================
# SERVICES
# =============================================================================

@pytest.fixture
def scheduler(engine_config, calendar, now):
    return RecurrenceScheduler(config=engine_config, calendar=calendar, clock=fixed_clock(now))


@pytest.fixture
def tracker(engine_config, calendar, now):
    return StreakTracker(config=engine_config, calendar=calendar, clock=fixed_clock(now))


@pytest.fixture
def scorer(engine_config, calendar, now):
    return QualityScorer(config=engine_config, calendar=calendar, clock=fixed_clock(now))


@pytest.fixture
def prioritizer(engine_config, calendar, now):
    return ReminderPrioritizer(config=engine_config, calendar=calendar, clock=fixed_clock(now))


@pytest.fixture
def correlation(calendar):
    return CorrelationService(calendar=calendar)


# =============================================================================
# API
# =============================================================================

@pytest.fixture
def test_settings():
    """Settings pinned to defaults, ignoring the developer's environment."""
    return Settings(
        health_engine_timezone="UTC",
        health_engine_window_days=21,
        health_engine_dose_horizon_days=30,
        health_engine_regeneration_buffer_days=7,
        health_engine_tables_path=None,
        _env_file=None,
    )


@pytest.fixture
def test_app(test_settings, now):
    """
    Create a FastAPI test app with dependency overrides.

    Uses the real routers; only settings and the clock are replaced.
    """
    from health_engine.api.routers import analytics_router, health_router, medications_router

    app = FastAPI(title="Health Engine API Test")
    setup_exception_handlers(app)

    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[deps.get_clock] = lambda: fixed_clock(now)

    app.include_router(health_router)
    app.include_router(medications_router)
    app.include_router(analytics_router)

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
def client(test_app):
    """Test client for the test app."""
    return TestClient(test_app)
