"""
Correlation insights between daily blood pressure and lifestyle factors.

Each factor is reduced to one value per calendar day, paired with the same
day's BP, and correlated with Pearson's r. A rule table then turns the
coefficient into at most one human-readable insight.
"""
import logging
import math
from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from health_engine.core.datetime_utils import LocalCalendar
from health_engine.schemas.analytics import (
    CorrelationInsight,
    CorrelationResult,
    InsightConfidence,
    InsightType,
)
from health_engine.schemas.health_data import (
    BloodPressureReading,
    DietLog,
    ExerciseLog,
    MedicationDose,
    UnifiedHealthSnapshot,
)
from health_engine.services.scoring import round_half_up

logger = logging.getLogger(__name__)

MIN_BP_READINGS = 5
MIN_COMMON_DAYS = 3


def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """
    Pearson correlation coefficient of two equally long series.

    Returns 0 for empty or mismatched input and when either series has
    zero variance.
    """
    if len(x) != len(y) or not x:
        return 0.0

    n = len(x)
    sum_x = sum(x)
    sum_y = sum(y)
    sum_xy = sum(xi * yi for xi, yi in zip(x, y))
    sum_x2 = sum(xi * xi for xi in x)
    sum_y2 = sum(yi * yi for yi in y)

    numerator = n * sum_xy - sum_x * sum_y
    variance = (n * sum_x2 - sum_x * sum_x) * (n * sum_y2 - sum_y * sum_y)
    if variance <= 0:
        return 0.0
    return numerator / math.sqrt(variance)


class CorrelationService:
    """Correlates BP with exercise, diet and medication adherence."""

    def __init__(self, calendar: Optional[LocalCalendar] = None):
        self._calendar = calendar or LocalCalendar()

    def _bp_by_day(self, readings: Sequence[BloodPressureReading]) -> Dict[date, Tuple[float, float]]:
        """Mean (systolic, diastolic) per calendar day, in order of first appearance."""
        totals: Dict[date, List[float]] = {}
        for reading in readings:
            day = self._calendar.day_of(reading.measured_at)
            entry = totals.setdefault(day, [0.0, 0.0, 0])
            entry[0] += reading.systolic
            entry[1] += reading.diastolic
            entry[2] += 1
        return {day: (s / n, d / n) for day, (s, d, n) in totals.items()}

    @staticmethod
    def _pair(
        bp_values: Dict[date, float],
        factor_values: Dict[date, float],
    ) -> Tuple[List[float], List[float]]:
        common_days = [day for day in bp_values if day in factor_values]
        return [bp_values[d] for d in common_days], [factor_values[d] for d in common_days]

    # =========================================================================
    # FACTORS
    # =========================================================================

    def exercise_bp_correlation(
        self,
        readings: Sequence[BloodPressureReading],
        exercise: Sequence[ExerciseLog],
    ) -> CorrelationResult:
        """Exercise minutes per day vs. mean arterial pressure."""
        if len(readings) < MIN_BP_READINGS or len(exercise) < 3:
            return CorrelationResult()

        mean_arterial = {
            day: diastolic + (systolic - diastolic) / 3
            for day, (systolic, diastolic) in self._bp_by_day(readings).items()
        }
        minutes: Dict[date, float] = defaultdict(float)
        for log in exercise:
            minutes[self._calendar.day_of(log.logged_at)] += log.duration_minutes

        bp_values, exercise_values = self._pair(mean_arterial, minutes)
        if len(bp_values) < MIN_COMMON_DAYS:
            return CorrelationResult()

        correlation = pearson_correlation(bp_values, exercise_values)
        insight = None
        if correlation < -0.3:
            avg_minutes = round_half_up(sum(exercise_values) / len(exercise_values))
            insight = CorrelationInsight(
                type=InsightType.POSITIVE,
                title="Exercise Reduces Blood Pressure",
                description=(
                    "Your data shows exercise is associated with lower blood pressure. "
                    f"On days with {avg_minutes} minutes of exercise, your BP tends to be lower."
                ),
                confidence=InsightConfidence.HIGH if abs(correlation) > 0.6 else InsightConfidence.MEDIUM,
                metric=abs(correlation),
            )
        elif correlation > 0.3:
            insight = CorrelationInsight(
                type=InsightType.NEUTRAL,
                title="Exercise Timing May Matter",
                description=(
                    "Your BP readings after exercise show temporary elevation, which is normal. "
                    "Consider measuring BP before exercise or several hours after."
                ),
                confidence=InsightConfidence.MEDIUM,
                metric=correlation,
            )
        return CorrelationResult(correlation=correlation, insight=insight)

    def diet_bp_correlation(
        self,
        readings: Sequence[BloodPressureReading],
        diet: Sequence[DietLog],
    ) -> CorrelationResult:
        """Meals logged per day vs. mean systolic pressure."""
        if len(readings) < MIN_BP_READINGS or len(diet) < 5:
            return CorrelationResult()

        systolic = {day: s for day, (s, _) in self._bp_by_day(readings).items()}
        meals: Dict[date, float] = defaultdict(float)
        for log in diet:
            meals[self._calendar.day_of(log.logged_at)] += 1

        bp_values, meal_counts = self._pair(systolic, meals)
        if len(bp_values) < MIN_COMMON_DAYS:
            return CorrelationResult()

        correlation = pearson_correlation(bp_values, meal_counts)
        insight = None
        if correlation > 0.25:
            avg_meals = sum(meal_counts) / len(meal_counts)
            insight = CorrelationInsight(
                type=InsightType.NEUTRAL,
                title="Diet Logging Patterns Detected",
                description=(
                    f"You log an average of {avg_meals:.1f} meals per day. Consistent tracking helps "
                    "identify patterns. Consider noting sodium content in your meals."
                ),
                confidence=InsightConfidence.MEDIUM,
                metric=correlation,
            )
        return CorrelationResult(correlation=correlation, insight=insight)

    def medication_bp_correlation(
        self,
        readings: Sequence[BloodPressureReading],
        doses: Sequence[MedicationDose],
    ) -> CorrelationResult:
        """Share of doses taken per day vs. mean systolic pressure."""
        if len(readings) < MIN_BP_READINGS or len(doses) < 5:
            return CorrelationResult()

        systolic = {day: s for day, (s, _) in self._bp_by_day(readings).items()}
        counts: Dict[date, List[int]] = {}
        for dose in doses:
            entry = counts.setdefault(self._calendar.day_of(dose.scheduled_time), [0, 0])
            entry[0] += 1 if dose.was_taken else 0
            entry[1] += 1
        adherence = {day: taken / total * 100 for day, (taken, total) in counts.items()}

        bp_values, adherence_values = self._pair(systolic, adherence)
        if len(bp_values) < MIN_COMMON_DAYS:
            return CorrelationResult()

        correlation = pearson_correlation(bp_values, adherence_values)
        avg_adherence = sum(adherence_values) / len(adherence_values)
        taken_total = sum(taken for taken, _ in counts.values())
        dose_total = sum(total for _, total in counts.values())

        insight = None
        if correlation < -0.3:
            insight = CorrelationInsight(
                type=InsightType.POSITIVE,
                title="Medication Adherence Helps",
                description=(
                    f"Your data shows {avg_adherence:.0f}% medication adherence is associated with "
                    "better blood pressure control. Keep up the great work!"
                ),
                confidence=InsightConfidence.HIGH if abs(correlation) > 0.6 else InsightConfidence.MEDIUM,
                metric=avg_adherence,
            )
        elif correlation > 0.3:
            insight = CorrelationInsight(
                type=InsightType.NEUTRAL,
                title="Medication Effectiveness",
                description=(
                    f"You've taken {taken_total} of {dose_total} doses. If your BP isn't improving as "
                    "expected, consult your doctor about dosage or timing adjustments."
                ),
                confidence=InsightConfidence.MEDIUM,
                metric=avg_adherence,
            )
        elif avg_adherence < 80:
            insight = CorrelationInsight(
                type=InsightType.NEGATIVE,
                title="Improve Medication Adherence",
                description=(
                    f"Your adherence rate is {avg_adherence:.0f}%. Consistent medication use is crucial "
                    "for blood pressure control. Set reminders to help."
                ),
                confidence=InsightConfidence.HIGH,
                metric=avg_adherence,
            )
        return CorrelationResult(correlation=correlation, insight=insight)

    def generate_insights(self, snapshot: UnifiedHealthSnapshot) -> Dict[str, CorrelationResult]:
        """All three correlations keyed by factor name."""
        results = {
            "exercise": self.exercise_bp_correlation(snapshot.blood_pressure, snapshot.exercise),
            "diet": self.diet_bp_correlation(snapshot.blood_pressure, snapshot.diet),
            "medication": self.medication_bp_correlation(snapshot.blood_pressure, snapshot.medication_doses),
        }
        logger.debug(
            "Correlation insights generated",
            extra={"insights": sum(1 for r in results.values() if r.insight is not None)}
        )
        return results
