"""
Services module containing the engine's business logic.

Services receive engine tables, a calendar and a clock via their
constructors, and never touch storage.
"""
from health_engine.services.recurrence_scheduler import RecurrenceScheduler
from health_engine.services.streak_tracker import StreakTracker
from health_engine.services.quality_scorer import QualityScorer
from health_engine.services.reminder_prioritizer import ReminderPrioritizer
from health_engine.services.correlation_service import CorrelationService

__all__ = [
    "RecurrenceScheduler",
    "StreakTracker",
    "QualityScorer",
    "ReminderPrioritizer",
    "CorrelationService",
]
