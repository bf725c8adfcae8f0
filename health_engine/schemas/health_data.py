"""
Pydantic schemas for the health records the engine reads and writes.

Records arrive from the storage layer already filtered by owner and time
window. They are frozen: the engine never mutates its input.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from health_engine.core.datetime_utils import is_valid_time_of_day


class MedicationFrequency(str, Enum):
    """How often a medication's doses repeat."""
    ONCE_DAILY = "once_daily"
    TWICE_DAILY = "twice_daily"
    THREE_TIMES_DAILY = "three_times_daily"
    WEEKLY = "weekly"
    AS_NEEDED = "as_needed"
    OTHER = "other"


class BPClassification(str, Enum):
    NORMAL = "normal"
    ELEVATED = "elevated"
    HIGH_STAGE_1 = "high_stage_1"
    HIGH_STAGE_2 = "high_stage_2"
    HYPERTENSIVE_CRISIS = "hypertensive_crisis"


def classify_blood_pressure(systolic: int, diastolic: int) -> BPClassification:
    """Classify a reading into the standard blood pressure categories."""
    if systolic >= 180 or diastolic >= 120:
        return BPClassification.HYPERTENSIVE_CRISIS
    if systolic >= 140 or diastolic >= 90:
        return BPClassification.HIGH_STAGE_2
    if systolic >= 130 or diastolic >= 80:
        return BPClassification.HIGH_STAGE_1
    if systolic >= 120 and diastolic < 80:
        return BPClassification.ELEVATED
    return BPClassification.NORMAL


def validate_times_of_day(values: List[str]) -> List[str]:
    """Shared "HH:MM" validation for schedule fields."""
    for value in values:
        if not is_valid_time_of_day(value):
            raise ValueError(f"Invalid time of day '{value}', expected 24-hour HH:MM")
    return values


# =============================================================================
# LOG EVENTS
# =============================================================================

class LogEvent(BaseModel):
    """Common shape of every user-submitted log."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique record id")
    user_id: str = Field(..., min_length=1, description="Owner of the record")
    notes: Optional[str] = Field(None, description="Optional free-text note")


class BloodPressureReading(LogEvent):
    """A single blood pressure measurement."""

    systolic: int = Field(..., gt=0, description="Systolic pressure in mmHg", examples=[120])
    diastolic: int = Field(..., gt=0, description="Diastolic pressure in mmHg", examples=[80])
    pulse: Optional[int] = Field(None, gt=0, description="Heart rate in bpm")
    measured_at: datetime = Field(..., description="When the reading was taken")

    @property
    def timestamp(self) -> datetime:
        return self.measured_at

    @property
    def classification(self) -> BPClassification:
        return classify_blood_pressure(self.systolic, self.diastolic)


class DietLog(LogEvent):
    """A meal entry."""

    meal_type: str = Field("other", description="breakfast, lunch, dinner, snack or other")
    description: str = Field("", description="What was eaten")
    sodium_mg: Optional[int] = Field(None, ge=0, description="Estimated sodium in mg")
    logged_at: datetime = Field(..., description="When the meal was eaten")

    @property
    def timestamp(self) -> datetime:
        return self.logged_at


class ExerciseLog(LogEvent):
    """An exercise session."""

    activity_type: str = Field("other", description="Kind of activity, e.g. walking")
    duration_minutes: int = Field(0, ge=0, description="Session length in minutes")
    intensity: Optional[str] = Field(None, description="low, moderate or high")
    logged_at: datetime = Field(..., description="When the session happened")

    @property
    def timestamp(self) -> datetime:
        return self.logged_at


# =============================================================================
# MEDICATIONS
# =============================================================================

class MedicationConfig(BaseModel):
    """
    A prescribed medication and its recurrence rule.

    Name and dosage are opaque strings. ``time_of_day`` holds one to four
    "HH:MM" entries in the order the doses should be taken.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    medication_name: str = Field("", description="Display name")
    dosage: str = Field("", description="Dosage as entered by the user")
    frequency: MedicationFrequency
    time_of_day: List[str] = Field(..., min_length=1, max_length=4, examples=[["08:00", "20:00"]])
    start_date: datetime
    end_date: Optional[datetime] = None
    is_active: bool = True

    @field_validator("time_of_day")
    @classmethod
    def _check_time_of_day(cls, value: List[str]) -> List[str]:
        return validate_times_of_day(value)


class MedicationDose(BaseModel):
    """
    One scheduled (or manually logged) dose.

    Generated with ``was_taken=False`` and no ``taken_at``. The storage layer
    owns every later update.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    user_id: str = Field(..., min_length=1)
    medication_log_id: str = Field(..., min_length=1, description="Medication this dose belongs to")
    scheduled_time: datetime
    taken_at: Optional[datetime] = None
    was_taken: bool = False
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _taken_at_implies_taken(self) -> "MedicationDose":
        if self.taken_at is not None and not self.was_taken:
            raise ValueError("taken_at is set but was_taken is false")
        return self


# =============================================================================
# SNAPSHOT
# =============================================================================

class UnifiedHealthSnapshot(BaseModel):
    """
    Everything the engine knows about one owner over one lookback window.

    Collections may be empty but are never None.
    """

    model_config = ConfigDict(frozen=True)

    blood_pressure: List[BloodPressureReading] = Field(default_factory=list)
    diet: List[DietLog] = Field(default_factory=list)
    exercise: List[ExerciseLog] = Field(default_factory=list)
    medications: List[MedicationConfig] = Field(default_factory=list)
    medication_doses: List[MedicationDose] = Field(default_factory=list)
