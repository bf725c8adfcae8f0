"""
Tests for CorrelationService - Pearson correlation and BP insights.
"""
import pytest

from health_engine.schemas.analytics import InsightConfidence, InsightType
from health_engine.schemas.health_data import UnifiedHealthSnapshot
from health_engine.services.correlation_service import pearson_correlation


class TestPearsonCorrelation:
    """Tests for the raw coefficient."""

    def test_perfect_positive(self):
        assert pearson_correlation([1, 2, 3], [2, 4, 6]) == pytest.approx(1.0)

    def test_perfect_negative(self):
        assert pearson_correlation([1, 2, 3], [3, 2, 1]) == pytest.approx(-1.0)

    @pytest.mark.parametrize("x,y", [
        ([], []),
        ([1, 2, 3], [1, 2]),
        ([5, 5, 5], [1, 2, 3]),
    ])
    def test_degenerate_input(self, x, y):
        assert pearson_correlation(x, y) == 0.0


# =============================================================================
# EXERCISE
# =============================================================================

class TestExerciseCorrelation:
    """Exercise minutes vs. mean arterial pressure."""

    def test_more_exercise_lower_bp(self, correlation, make_bp, make_exercise, at):
        minutes = [10, 20, 30, 40, 50]
        systolic = [150, 145, 140, 135, 130]
        readings = [make_bp(at(day), systolic=s, diastolic=90) for day, s in enumerate(systolic)]
        exercise = [make_exercise(at(day, hour=18), duration_minutes=m) for day, m in enumerate(minutes)]

        result = correlation.exercise_bp_correlation(readings, exercise)

        assert result.correlation == pytest.approx(-1.0)
        assert result.insight.type == InsightType.POSITIVE
        assert result.insight.confidence == InsightConfidence.HIGH
        assert result.insight.metric == pytest.approx(1.0)
        assert "30 minutes of exercise" in result.insight.description

    def test_more_exercise_higher_bp(self, correlation, make_bp, make_exercise, at):
        readings = [make_bp(at(day), systolic=130 + day * 5, diastolic=85) for day in range(5)]
        exercise = [make_exercise(at(day, hour=18), duration_minutes=20 + day * 10) for day in range(5)]

        result = correlation.exercise_bp_correlation(readings, exercise)

        assert result.insight.type == InsightType.NEUTRAL
        assert result.insight.title == "Exercise Timing May Matter"

    def test_too_few_readings(self, correlation, make_bp, make_exercise, at):
        readings = [make_bp(at(day)) for day in range(4)]
        exercise = [make_exercise(at(day)) for day in range(4)]

        result = correlation.exercise_bp_correlation(readings, exercise)

        assert result.correlation == 0.0
        assert result.insight is None

    def test_too_few_common_days(self, correlation, make_bp, make_exercise, at):
        readings = [make_bp(at(day)) for day in range(5)]
        exercise = [make_exercise(at(day)) for day in range(10, 14)]

        assert correlation.exercise_bp_correlation(readings, exercise).insight is None


# =============================================================================
# DIET & MEDICATION
# =============================================================================

class TestDietCorrelation:
    """Meals per day vs. systolic pressure."""

    def test_more_meals_higher_bp(self, correlation, make_bp, make_diet, at):
        meals_per_day = [1, 2, 3, 1, 2]
        systolic = [120, 130, 140, 120, 130]
        readings = [make_bp(at(day), systolic=s) for day, s in enumerate(systolic)]
        diet = [
            make_diet(at(day, hour=8 + meal))
            for day, count in enumerate(meals_per_day)
            for meal in range(count)
        ]

        result = correlation.diet_bp_correlation(readings, diet)

        assert result.correlation == pytest.approx(1.0)
        assert result.insight.type == InsightType.NEUTRAL
        assert "1.8 meals per day" in result.insight.description


class TestMedicationCorrelation:
    """Daily adherence vs. systolic pressure."""

    def test_adherence_lowers_bp(self, correlation, make_bp, make_dose, at):
        taken_per_day = [2, 2, 1, 1, 0]
        systolic = [120, 120, 135, 135, 150]
        readings = [make_bp(at(day, hour=10), systolic=s) for day, s in enumerate(systolic)]
        doses = [
            make_dose(at(day, hour=hour), was_taken=index < taken)
            for day, taken in enumerate(taken_per_day)
            for index, hour in enumerate((8, 20))
        ]

        result = correlation.medication_bp_correlation(readings, doses)

        assert result.correlation == pytest.approx(-1.0)
        assert result.insight.type == InsightType.POSITIVE
        assert result.insight.confidence == InsightConfidence.HIGH
        assert result.insight.metric == pytest.approx(60.0)

    def test_low_adherence_without_pattern(self, correlation, make_bp, make_dose, at):
        taken_per_day = [2, 2, 1, 1, 0]
        readings = [make_bp(at(day, hour=10), systolic=130) for day in range(5)]
        doses = [
            make_dose(at(day, hour=hour), was_taken=index < taken)
            for day, taken in enumerate(taken_per_day)
            for index, hour in enumerate((8, 20))
        ]

        result = correlation.medication_bp_correlation(readings, doses)

        assert result.correlation == 0.0
        assert result.insight.type == InsightType.NEGATIVE
        assert result.insight.title == "Improve Medication Adherence"
        assert "60%" in result.insight.description


class TestGenerateInsights:
    """Tests for the combined result."""

    def test_empty_snapshot(self, correlation):
        results = correlation.generate_insights(UnifiedHealthSnapshot())

        assert set(results) == {"exercise", "diet", "medication"}
        assert all(r.insight is None and r.correlation == 0.0 for r in results.values())
