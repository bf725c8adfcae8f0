"""
Pydantic schemas for engine input, engine output and the API boundary.
"""
from health_engine.schemas.health_data import (
    MedicationFrequency,
    BPClassification,
    classify_blood_pressure,
    LogEvent,
    BloodPressureReading,
    DietLog,
    ExerciseLog,
    MedicationConfig,
    MedicationDose,
    UnifiedHealthSnapshot,
)
from health_engine.schemas.analytics import (
    StreakResult,
    MilestoneBadge,
    QualityScore,
    DataCompleteness,
    MedicationAdherence,
    ReminderType,
    ReminderPriority,
    ReminderIcon,
    ReminderAction,
    Reminder,
    InsightType,
    InsightConfidence,
    CorrelationInsight,
    CorrelationResult,
)

__all__ = [
    # Health records
    "MedicationFrequency",
    "BPClassification",
    "classify_blood_pressure",
    "LogEvent",
    "BloodPressureReading",
    "DietLog",
    "ExerciseLog",
    "MedicationConfig",
    "MedicationDose",
    "UnifiedHealthSnapshot",
    # Derived values
    "StreakResult",
    "MilestoneBadge",
    "QualityScore",
    "DataCompleteness",
    "MedicationAdherence",
    "ReminderType",
    "ReminderPriority",
    "ReminderIcon",
    "ReminderAction",
    "Reminder",
    "InsightType",
    "InsightConfidence",
    "CorrelationInsight",
    "CorrelationResult",
]
