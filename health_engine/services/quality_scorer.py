"""
Data quality scoring for a user's health logs.

Blends logging frequency, medication adherence and annotation quality into a
single 0-100 score, and turns weak dimensions into concrete suggestions.

Dimensions (weights live in engine.yaml):
    bpLogging            days with a BP reading / window days
    exerciseLogging      days with an exercise log / window days
    dietLogging          meals logged / (window days x meals per day)
    medicationAdherence  doses taken / doses in the snapshot (100 with no doses)
    bpContextNotes       high readings with notes / high readings (100 with none)
"""
import logging
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

from health_engine.core.datetime_utils import Clock, LocalCalendar, utc_now
from health_engine.core.engine_config import EngineConfig
from health_engine.schemas.analytics import DataCompleteness, MedicationAdherence, QualityScore
from health_engine.schemas.health_data import (
    BloodPressureReading,
    DietLog,
    ExerciseLog,
    UnifiedHealthSnapshot,
)
from health_engine.services.recurrence_scheduler import next_dose_time
from health_engine.services.scoring import percent, round_half_up

logger = logging.getLogger(__name__)


class QualityScorer:
    """
    Scores how complete and well-annotated a snapshot of logs is.

    Every dimension defaults to 100 when its denominator is zero, so the
    absence of a prescribed schedule (or of high readings) never lowers
    the score.
    """

    def __init__(
        self,
        config: EngineConfig,
        calendar: Optional[LocalCalendar] = None,
        clock: Clock = utc_now,
        window_days: int = 21,
    ):
        self._tables = config.quality
        self._calendar = calendar or LocalCalendar()
        self._clock = clock
        self._window_days = window_days

    def _window(self, window_days: Optional[int]) -> int:
        return self._window_days if window_days is None else window_days

    def _distinct_days(self, timestamps: Sequence[datetime]) -> int:
        return len({self._calendar.day_of(ts) for ts in timestamps})

    # =========================================================================
    # READING CHECKS
    # =========================================================================

    def is_high_bp(self, reading: BloodPressureReading) -> bool:
        thresholds = self._tables.thresholds
        return reading.systolic >= thresholds.high_systolic or reading.diastolic >= thresholds.high_diastolic

    def has_adequate_notes(self, reading: BloodPressureReading) -> bool:
        notes = (reading.notes or "").strip()
        return len(notes) >= self._tables.thresholds.min_note_length

    def find_high_bp_without_notes(
        self,
        readings: Sequence[BloodPressureReading],
    ) -> List[BloodPressureReading]:
        """High readings whose note is missing or too short, in input order."""
        return [r for r in readings if self.is_high_bp(r) and not self.has_adequate_notes(r)]

    def find_bp_without_context(
        self,
        readings: Sequence[BloodPressureReading],
        diet: Sequence[DietLog],
        exercise: Sequence[ExerciseLog],
    ) -> List[datetime]:
        """
        Calendar days with a BP reading but neither a diet nor an exercise log.

        Returns:
            Distinct local-midnight datetimes, in order of first appearance.
        """
        context_days = {self._calendar.day_of(log.timestamp) for log in diet}
        context_days.update(self._calendar.day_of(log.timestamp) for log in exercise)

        flagged: Dict[date, datetime] = {}
        for reading in readings:
            day = self._calendar.day_of(reading.measured_at)
            if day not in context_days and day not in flagged:
                flagged[day] = self._calendar.start_of_day(reading.measured_at)
        return list(flagged.values())

    # =========================================================================
    # SCORES
    # =========================================================================

    def get_data_completeness(
        self,
        snapshot: UnifiedHealthSnapshot,
        window_days: Optional[int] = None,
    ) -> DataCompleteness:
        days = self._window(window_days)
        bp_days = self._distinct_days([r.measured_at for r in snapshot.blood_pressure])
        exercise_days = self._distinct_days([e.logged_at for e in snapshot.exercise])
        diet_days = self._distinct_days([d.logged_at for d in snapshot.diet])

        return DataCompleteness(
            bp_days=bp_days,
            exercise_days=exercise_days,
            diet_days=diet_days,
            total_days=days,
            bp_percentage=round_half_up(percent(bp_days, days, cap=False)),
            exercise_percentage=round_half_up(percent(exercise_days, days, cap=False)),
            diet_percentage=round_half_up(percent(diet_days, days, cap=False)),
        )

    def _dimension_scores(self, snapshot: UnifiedHealthSnapshot, days: int) -> Dict[str, float]:
        """Raw (unrounded) 0-100 value for every dimension."""
        bp_days = self._distinct_days([r.measured_at for r in snapshot.blood_pressure])
        exercise_days = self._distinct_days([e.logged_at for e in snapshot.exercise])
        expected_meals = days * self._tables.thresholds.meals_per_day

        taken = sum(1 for dose in snapshot.medication_doses if dose.was_taken)
        high_readings = [r for r in snapshot.blood_pressure if self.is_high_bp(r)]
        annotated = sum(1 for r in high_readings if self.has_adequate_notes(r))

        return {
            "bpLogging": percent(bp_days, days),
            "exerciseLogging": percent(exercise_days, days),
            "dietLogging": percent(len(snapshot.diet), expected_meals),
            "medicationAdherence": percent(taken, len(snapshot.medication_doses)),
            "bpContextNotes": percent(annotated, len(high_readings)),
        }

    def calculate_data_quality_score(
        self,
        snapshot: UnifiedHealthSnapshot,
        window_days: Optional[int] = None,
    ) -> QualityScore:
        """
        Weighted composite of all dimensions.

        Args:
            snapshot: Logs for one owner over the lookback window.
            window_days: Window length. Defaults to the configured window.

        Returns:
            QualityScore with the rounded overall value and each rounded dimension.
        """
        days = self._window(window_days)
        scores = self._dimension_scores(snapshot, days)
        weights = self._tables.weights
        overall = round_half_up(sum(scores[key] * weights[key] / 100 for key in weights))

        logger.debug("Data quality scored", extra={"window_days": days, "overall": overall})
        return QualityScore(
            overall=min(100, max(0, overall)),
            breakdown={key: round_half_up(value) for key, value in scores.items()},
        )

    def adherence_by_medication(
        self,
        snapshot: UnifiedHealthSnapshot,
        now: Optional[datetime] = None,
    ) -> List[MedicationAdherence]:
        """Taken/total and next dose for every active medication in the snapshot."""
        now = self._calendar.localize(now if now is not None else self._clock())
        results = []
        for medication in snapshot.medications:
            if not medication.is_active:
                continue
            doses = [d for d in snapshot.medication_doses if d.medication_log_id == medication.id]
            taken = sum(1 for d in doses if d.was_taken)
            results.append(MedicationAdherence(
                medication_id=medication.id,
                medication_name=medication.medication_name,
                taken=taken,
                total=len(doses),
                adherence_rate=round_half_up(percent(taken, len(doses))),
                next_dose_time=next_dose_time(doses, now, self._calendar),
            ))
        return results

    # =========================================================================
    # SUGGESTIONS
    # =========================================================================

    def get_improvement_suggestions(
        self,
        snapshot: UnifiedHealthSnapshot,
        window_days: Optional[int] = None,
    ) -> List[str]:
        """
        Rule-based suggestions, evaluated top to bottom in a fixed order.

        Rules: BP logging, exercise logging, diet logging, medication
        adherence, notes on high readings, same-day context.
        """
        days = self._window(window_days)
        cutoffs = self._tables.suggestions
        completeness = self.get_data_completeness(snapshot, days)
        score = self.calculate_data_quality_score(snapshot, days)
        suggestions: List[str] = []

        if completeness.bp_percentage < cutoffs.bp_logging_below:
            suggestions.append(
                f"Log your blood pressure more consistently. You've logged {completeness.bp_days} "
                f"out of {days} days ({completeness.bp_percentage}%). Aim for daily readings."
            )

        if completeness.exercise_percentage < cutoffs.exercise_logging_below:
            suggestions.append(
                f"Track your exercise regularly. You've logged {completeness.exercise_days} out of "
                f"{days} days. Regular activity tracking helps identify BP patterns."
            )

        if completeness.diet_percentage < cutoffs.diet_logging_below:
            suggestions.append(
                f"Log your meals more frequently. You've logged {completeness.diet_days} days of meals. "
                "Try to log at least 2-3 meals per day."
            )

        adherence = score.breakdown["medicationAdherence"]
        if adherence < cutoffs.adherence_below:
            suggestions.append(
                f"Improve medication adherence (currently {adherence}%). "
                "Consistent medication use is crucial for BP control."
            )

        if self.find_high_bp_without_notes(snapshot.blood_pressure):
            thresholds = self._tables.thresholds
            suggestions.append(
                f"Add notes to high BP readings (≥{thresholds.high_systolic}/{thresholds.high_diastolic}) "
                "to help identify triggers and patterns."
            )

        days_without_context = self.find_bp_without_context(
            snapshot.blood_pressure, snapshot.diet, snapshot.exercise
        )
        if len(days_without_context) > days * cutoffs.context_gap_share_above:
            suggestions.append(
                "Add context to your BP readings by logging diet and exercise on the same day."
            )

        return suggestions
