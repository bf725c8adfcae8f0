"""
Recurrence scheduling for medication doses.

Expands a medication's frequency and times of day into concrete dose
instances over a bounded horizon, and tells the caller when the stored
buffer of future doses is running low.

Architecture:
    Calling layer → RecurrenceScheduler → List[MedicationDose] → storage layer

The scheduler never reads or writes storage. Regenerating idempotently
(skipping doses that already exist) is the caller's job.
"""
import logging
from datetime import datetime
from typing import List, Optional, Sequence, Union

from health_engine.core.datetime_utils import Clock, LocalCalendar, is_valid_time_of_day, utc_now
from health_engine.core.engine_config import EngineConfig
from health_engine.core.exceptions import InvalidScheduleError
from health_engine.schemas.health_data import MedicationConfig, MedicationDose, MedicationFrequency

logger = logging.getLogger(__name__)

DAILY_FREQUENCIES = {
    MedicationFrequency.ONCE_DAILY,
    MedicationFrequency.TWICE_DAILY,
    MedicationFrequency.THREE_TIMES_DAILY,
    MedicationFrequency.OTHER,
}


def coerce_frequency(frequency: Union[MedicationFrequency, str]) -> MedicationFrequency:
    """Map a raw frequency to the enum, treating anything unrecognised as OTHER."""
    if isinstance(frequency, MedicationFrequency):
        return frequency
    try:
        return MedicationFrequency(frequency)
    except ValueError:
        logger.debug("Unknown frequency, scheduling daily", extra={"frequency": frequency})
        return MedicationFrequency.OTHER


def find_missed_doses(
    doses: Sequence[MedicationDose],
    now: datetime,
    calendar: Optional[LocalCalendar] = None,
) -> List[MedicationDose]:
    """Doses scheduled before ``now`` that were not taken, in input order."""
    calendar = calendar or LocalCalendar()
    now = calendar.localize(now)
    return [
        dose for dose in doses
        if not dose.was_taken and calendar.localize(dose.scheduled_time) < now
    ]


def next_dose_time(
    doses: Sequence[MedicationDose],
    now: datetime,
    calendar: Optional[LocalCalendar] = None,
) -> Optional[datetime]:
    """Earliest untaken dose scheduled at or after ``now``, if any."""
    calendar = calendar or LocalCalendar()
    now = calendar.localize(now)
    upcoming = [
        calendar.localize(dose.scheduled_time) for dose in doses
        if not dose.was_taken and calendar.localize(dose.scheduled_time) >= now
    ]
    return min(upcoming) if upcoming else None


class RecurrenceScheduler:
    """
    Generates scheduled doses from a medication's recurrence rule.

    All tables come from the injected EngineConfig; "now" comes from the
    injected clock unless a call passes it explicitly.
    """

    def __init__(
        self,
        config: EngineConfig,
        calendar: Optional[LocalCalendar] = None,
        clock: Clock = utc_now,
        horizon_days: int = 30,
        buffer_days: int = 7,
    ):
        """
        Initialize the scheduler.

        Args:
            config: Engine tables (frequency labels and dose rates).
            calendar: Calendar defining local midnight. Defaults to UTC.
            clock: Source of "now" when a call does not pass one.
            horizon_days: Default generation horizon.
            buffer_days: Default regeneration buffer.
        """
        self._config = config
        self._calendar = calendar or LocalCalendar()
        self._clock = clock
        self._horizon_days = horizon_days
        self._buffer_days = buffer_days

    def _now(self, now: Optional[datetime]) -> datetime:
        return self._calendar.localize(now if now is not None else self._clock())

    # =========================================================================
    # GENERATION
    # =========================================================================

    def generate_doses(
        self,
        medication_id: str,
        user_id: str,
        frequency: Union[MedicationFrequency, str],
        times_of_day: Sequence[str],
        start_date: datetime,
        end_date: Optional[datetime] = None,
        horizon_days: Optional[int] = None,
    ) -> List[MedicationDose]:
        """
        Expand a recurrence rule into dose instances.

        Args:
            medication_id: Medication the doses belong to.
            user_id: Owner of the medication.
            frequency: Recurrence pattern. Unknown values are scheduled daily.
            times_of_day: "HH:MM" strings, applied to every scheduled day in order.
            start_date: First instant a dose may be scheduled at.
            end_date: Optional last day of the schedule.
            horizon_days: Days past the start of ``start_date`` to generate.

        Returns:
            Doses in chronological day order, then ``times_of_day`` order.

        Raises:
            InvalidScheduleError: If a time of day is not "HH:MM".
        """
        for time_of_day in times_of_day:
            if not is_valid_time_of_day(time_of_day):
                raise InvalidScheduleError(time_of_day=time_of_day, medication_id=medication_id)

        frequency = coerce_frequency(frequency)
        if frequency == MedicationFrequency.AS_NEEDED:
            # Tracked only through manually logged doses
            return []

        horizon_days = self._horizon_days if horizon_days is None else horizon_days
        start = self._calendar.localize(start_date)
        day = self._calendar.start_of_day(start)

        window_end = self._calendar.add_days(day, horizon_days)
        if end_date is not None:
            end = self._calendar.localize(end_date)
            if end < start:
                return []
            if end < window_end:
                window_end = end

        step = 7 if frequency == MedicationFrequency.WEEKLY else 1

        doses: List[MedicationDose] = []
        while day <= window_end:
            for time_of_day in times_of_day:
                scheduled_time = self._calendar.at_time_of_day(day, time_of_day)
                if scheduled_time >= start:
                    doses.append(MedicationDose(
                        user_id=user_id,
                        medication_log_id=medication_id,
                        scheduled_time=scheduled_time,
                        taken_at=None,
                        was_taken=False,
                        notes=None,
                    ))
            day = self._calendar.add_days(day, step)

        logger.debug(
            "Generated doses",
            extra={
                "medication_id": medication_id,
                "frequency": frequency.value,
                "count": len(doses),
                "window_end": window_end.isoformat(),
            }
        )
        return doses

    def generate_for_medication(
        self,
        medication: MedicationConfig,
        horizon_days: Optional[int] = None,
    ) -> List[MedicationDose]:
        """Convenience wrapper taking a stored MedicationConfig."""
        return self.generate_doses(
            medication_id=medication.id,
            user_id=medication.user_id,
            frequency=medication.frequency,
            times_of_day=medication.time_of_day,
            start_date=medication.start_date,
            end_date=medication.end_date,
            horizon_days=horizon_days,
        )

    # =========================================================================
    # REGENERATION
    # =========================================================================

    def latest_scheduled_time(self, existing_doses: Sequence[MedicationDose]) -> Optional[datetime]:
        if not existing_doses:
            return None
        return max(self._calendar.localize(dose.scheduled_time) for dose in existing_doses)

    def should_regenerate(
        self,
        existing_doses: Sequence[MedicationDose],
        buffer_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        True when fewer than ``buffer_days`` of future doses remain.

        An empty list always needs regeneration.
        """
        latest = self.latest_scheduled_time(existing_doses)
        if latest is None:
            return True

        buffer_days = self._buffer_days if buffer_days is None else buffer_days
        buffer_end = self._calendar.add_days(self._now(now), buffer_days)
        return latest < buffer_end

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    def expected_doses_per_day(self, frequency: Union[MedicationFrequency, str]) -> float:
        definition = self._config.frequencies.get(coerce_frequency(frequency).value)
        return definition.doses_per_day if definition else 1.0

    def frequency_label(self, frequency: Union[MedicationFrequency, str]) -> str:
        frequency = coerce_frequency(frequency)
        definition = self._config.frequencies.get(frequency.value)
        return definition.label if definition else frequency.value

    def find_missed_doses(
        self,
        doses: Sequence[MedicationDose],
        now: Optional[datetime] = None,
    ) -> List[MedicationDose]:
        return find_missed_doses(doses, self._now(now), self._calendar)

    def next_dose_time(
        self,
        doses: Sequence[MedicationDose],
        now: Optional[datetime] = None,
    ) -> Optional[datetime]:
        return next_dose_time(doses, self._now(now), self._calendar)
