"""
Smart reminders: what the user should log or take next.

Rules, each evaluated independently against "now":
    1. medication  pending past doses          high
    2. bp          no reading today            high
    3. exercise    last session >= N days ago  medium
    4. diet        reading today, no meal      low

The full ranked list is returned. Truncating to the top N, and remembering
which reminders a user dismissed, belong to the caller.
"""
import logging
from datetime import datetime
from typing import List, Optional

from health_engine.core.datetime_utils import Clock, LocalCalendar, utc_now
from health_engine.core.engine_config import EngineConfig
from health_engine.schemas.analytics import (
    Reminder,
    ReminderAction,
    ReminderIcon,
    ReminderPriority,
    ReminderType,
)
from health_engine.schemas.health_data import UnifiedHealthSnapshot
from health_engine.services.recurrence_scheduler import find_missed_doses

logger = logging.getLogger(__name__)


class ReminderPrioritizer:
    """Builds and ranks reminders from a health snapshot."""

    def __init__(
        self,
        config: EngineConfig,
        calendar: Optional[LocalCalendar] = None,
        clock: Clock = utc_now,
    ):
        self._tables = config.reminders
        self._calendar = calendar or LocalCalendar()
        self._clock = clock

    def generate_smart_reminders(
        self,
        snapshot: UnifiedHealthSnapshot,
        now: Optional[datetime] = None,
    ) -> List[Reminder]:
        """
        Evaluate every reminder rule and return the matches ranked.

        Args:
            snapshot: Raw logs for one owner (not derived scores).
            now: Reference instant. Defaults to the injected clock.

        Returns:
            Reminders sorted by priority, then by type.
        """
        now = self._calendar.localize(now if now is not None else self._clock())
        reminders: List[Reminder] = []

        pending = find_missed_doses(snapshot.medication_doses, now, self._calendar)
        if pending:
            count = len(pending)
            reminders.append(Reminder(
                id="medication-pending",
                type=ReminderType.MEDICATION,
                priority=ReminderPriority.HIGH,
                title=f"{count} Medication{'s' if count > 1 else ''} Due",
                message="Take your medications to maintain consistent BP control.",
                action=ReminderAction(label="View Medications", href="/medications"),
                icon=ReminderIcon.PILL,
            ))

        has_bp_today = any(self._calendar.same_day(r.measured_at, now) for r in snapshot.blood_pressure)
        if not has_bp_today:
            reminders.append(Reminder(
                id="bp-today",
                type=ReminderType.BP,
                priority=ReminderPriority.HIGH,
                title="Log Your Blood Pressure",
                message="Daily readings help track your progress and identify patterns.",
                action=ReminderAction(label="Log BP", href="/log-bp"),
                icon=ReminderIcon.HEART,
            ))

        gap_days = self._tables.exercise_gap_days
        last_exercise = max((e.logged_at for e in snapshot.exercise), default=None,
                            key=self._calendar.localize)
        if last_exercise is None or self._calendar.difference_in_days(now, last_exercise) >= gap_days:
            reminders.append(Reminder(
                id="exercise-gap",
                type=ReminderType.EXERCISE,
                priority=ReminderPriority.MEDIUM,
                title="Time to Move!",
                message=f"You haven't logged exercise in {gap_days} days. Even light activity helps!",
                action=ReminderAction(label="Log Exercise", href="/log-diet-exercise?tab=exercise"),
                icon=ReminderIcon.ACTIVITY,
            ))

        if has_bp_today:
            has_diet_today = any(self._calendar.same_day(d.logged_at, now) for d in snapshot.diet)
            if not has_diet_today:
                reminders.append(Reminder(
                    id="diet-context",
                    type=ReminderType.DIET,
                    priority=ReminderPriority.LOW,
                    title="Add Meal Context",
                    message="Your BP readings need context. Log your meals to improve insights.",
                    action=ReminderAction(label="Log Meals", href="/log-diet-exercise?tab=diet"),
                    icon=ReminderIcon.UTENSILS,
                ))

        logger.debug("Reminders generated", extra={"count": len(reminders)})
        return self.sort_reminders(reminders)

    def sort_reminders(self, reminders: List[Reminder]) -> List[Reminder]:
        """Stable sort: priority weight descending, then type weight descending."""
        priority_weights = self._tables.priority_weights
        type_weights = self._tables.type_weights
        return sorted(
            reminders,
            key=lambda r: (priority_weights[r.priority.value], type_weights[r.type.value]),
            reverse=True,
        )
