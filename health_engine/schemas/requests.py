"""
Request and response bodies for the HTTP calling layer.

The caller sends records already filtered by owner and time window. Any
request may carry ``now``; without it the server clock is used.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from health_engine.schemas.analytics import (
    CorrelationInsight,
    CorrelationResult,
    DataCompleteness,
    MedicationAdherence,
    MilestoneBadge,
    QualityScore,
    Reminder,
    StreakResult,
)
from health_engine.schemas.health_data import (
    BloodPressureReading,
    MedicationDose,
    UnifiedHealthSnapshot,
)


# =============================================================================
# MEDICATIONS
# =============================================================================

class DoseGenerationRequest(BaseModel):
    """Recurrence rule to expand into dose instances."""
    medication_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    frequency: str = Field(..., description="Frequency key; unknown values are scheduled daily",
                           examples=["twice_daily"])
    times_of_day: List[str] = Field(..., min_length=1, max_length=4, examples=[["08:00", "20:00"]])
    start_date: datetime
    end_date: Optional[datetime] = None
    horizon_days: Optional[int] = Field(None, ge=0, description="Defaults to the configured horizon")


class DoseGenerationResponse(BaseModel):
    medication_id: str
    frequency_label: str
    count: int
    doses: List[MedicationDose]


class RegenerationCheckRequest(BaseModel):
    existing_doses: List[MedicationDose] = Field(default_factory=list)
    buffer_days: Optional[int] = Field(None, ge=0, description="Defaults to the configured buffer")
    now: Optional[datetime] = None


class RegenerationCheckResponse(BaseModel):
    should_regenerate: bool
    latest_scheduled_time: Optional[datetime] = None


class FrequencyInfo(BaseModel):
    """One row of the frequency table."""
    frequency: str
    label: str
    doses: int
    every_days: int
    doses_per_day: float


# =============================================================================
# ANALYTICS
# =============================================================================

class StreakRequest(BaseModel):
    blood_pressure: List[BloodPressureReading] = Field(default_factory=list)
    now: Optional[datetime] = None


class StreakResponse(BaseModel):
    streak: StreakResult
    badge: MilestoneBadge
    message: str


class QualityReportRequest(BaseModel):
    snapshot: UnifiedHealthSnapshot = Field(default_factory=UnifiedHealthSnapshot)
    window_days: Optional[int] = Field(None, ge=0, description="Defaults to the configured window")
    now: Optional[datetime] = None


class QualityReportResponse(BaseModel):
    """Everything the data-quality screen shows."""
    score: QualityScore
    completeness: DataCompleteness
    suggestions: List[str]
    high_bp_without_notes: List[BloodPressureReading]
    days_without_context: List[datetime]
    adherence: List[MedicationAdherence]


class RemindersRequest(BaseModel):
    snapshot: UnifiedHealthSnapshot = Field(default_factory=UnifiedHealthSnapshot)
    now: Optional[datetime] = None
    limit: Optional[int] = Field(None, ge=1, description="Keep only the top N reminders")


class RemindersResponse(BaseModel):
    reminders: List[Reminder]
    total: int = Field(..., description="Number of reminders before the limit was applied")


class InsightsRequest(BaseModel):
    snapshot: UnifiedHealthSnapshot = Field(default_factory=UnifiedHealthSnapshot)


class InsightsResponse(BaseModel):
    exercise: CorrelationResult
    diet: CorrelationResult
    medication: CorrelationResult
    insights: List[CorrelationInsight]
