"""
Pydantic schemas for everything the engine derives.

These are plain data for the presentation layer. Icons are opaque tags;
mapping a tag to an asset is the presentation layer's job.
"""
from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# STREAKS
# =============================================================================

class StreakResult(BaseModel):
    """Consecutive-day logging streak with milestone progress."""

    model_config = ConfigDict(frozen=True)

    current_streak: int = Field(0, ge=0)
    longest_streak: int = Field(0, ge=0)
    last_log_date: Optional[datetime] = None
    next_milestone: int
    days_until_milestone: int
    milestone_progress: int = Field(0, ge=0, le=100, description="Percent of the way to the next milestone")


class MilestoneBadge(BaseModel):
    model_config = ConfigDict(frozen=True)

    emoji: str
    title: str
    description: str
    color: str


# =============================================================================
# DATA QUALITY
# =============================================================================

class QualityScore(BaseModel):
    """
    Composite data quality score.

    ``breakdown`` maps each dimension (bpLogging, exerciseLogging,
    dietLogging, medicationAdherence, bpContextNotes) to its 0-100 value.
    """

    model_config = ConfigDict(frozen=True)

    overall: int = Field(..., ge=0, le=100)
    breakdown: Dict[str, int]


class DataCompleteness(BaseModel):
    """Distinct logged days per category over a window."""

    model_config = ConfigDict(frozen=True)

    bp_days: int
    exercise_days: int
    diet_days: int
    total_days: int
    bp_percentage: int
    exercise_percentage: int
    diet_percentage: int


class MedicationAdherence(BaseModel):
    """Taken vs. scheduled doses for one medication."""

    model_config = ConfigDict(frozen=True)

    medication_id: str
    medication_name: str
    taken: int
    total: int
    adherence_rate: int = Field(..., ge=0, le=100)
    next_dose_time: Optional[datetime] = None


# =============================================================================
# REMINDERS
# =============================================================================

class ReminderType(str, Enum):
    MEDICATION = "medication"
    BP = "bp"
    EXERCISE = "exercise"
    DIET = "diet"


class ReminderPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ReminderIcon(str, Enum):
    """Opaque icon tags. The UI decides what each one looks like."""
    PILL = "pill"
    HEART = "heart"
    ACTIVITY = "activity"
    UTENSILS = "utensils"


class ReminderAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    href: str


class Reminder(BaseModel):
    """A single user-facing nudge."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: ReminderType
    priority: ReminderPriority
    title: str
    message: str
    action: ReminderAction
    icon: ReminderIcon


# =============================================================================
# CORRELATION INSIGHTS
# =============================================================================

class InsightType(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class InsightConfidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CorrelationInsight(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: InsightType
    title: str
    description: str
    confidence: InsightConfidence
    metric: Optional[float] = None


class CorrelationResult(BaseModel):
    """Pearson coefficient for one factor, plus the insight it produced (if any)."""

    model_config = ConfigDict(frozen=True)

    correlation: float = 0.0
    insight: Optional[CorrelationInsight] = None
