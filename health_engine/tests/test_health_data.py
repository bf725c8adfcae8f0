"""
Tests for the input record schemas.
"""
import pytest
from pydantic import ValidationError

from health_engine.schemas.health_data import (
    BPClassification,
    MedicationConfig,
    MedicationDose,
    classify_blood_pressure,
)


# =============================================================================
# BLOOD PRESSURE
# =============================================================================

class TestBloodPressureClassification:
    """Tests for classify_blood_pressure and BloodPressureReading.classification."""

    @pytest.mark.parametrize("systolic,diastolic,expected", [
        (115, 75, BPClassification.NORMAL),
        (125, 75, BPClassification.ELEVATED),
        (125, 82, BPClassification.HIGH_STAGE_1),
        (132, 70, BPClassification.HIGH_STAGE_1),
        (141, 70, BPClassification.HIGH_STAGE_2),
        (120, 90, BPClassification.HIGH_STAGE_2),
        (180, 95, BPClassification.HYPERTENSIVE_CRISIS),
        (150, 120, BPClassification.HYPERTENSIVE_CRISIS),
    ])
    def test_thresholds(self, systolic, diastolic, expected):
        assert classify_blood_pressure(systolic, diastolic) == expected

    def test_reading_exposes_classification(self, make_bp, at):
        reading = make_bp(at(0), systolic=145, diastolic=85)

        assert reading.classification == BPClassification.HIGH_STAGE_2


# =============================================================================
# MEDICATIONS
# =============================================================================

class TestMedicationRecords:
    """Tests for MedicationConfig and MedicationDose validation."""

    def test_taken_at_requires_was_taken(self, now):
        with pytest.raises(ValidationError):
            MedicationDose(
                user_id="user-1",
                medication_log_id="med-1",
                scheduled_time=now,
                taken_at=now,
                was_taken=False,
            )

    def test_config_rejects_bad_time_of_day(self, now):
        with pytest.raises(ValidationError):
            MedicationConfig(
                id="med-1",
                user_id="user-1",
                frequency="once_daily",
                time_of_day=["8am"],
                start_date=now,
            )

    def test_config_rejects_more_than_four_times(self, now):
        with pytest.raises(ValidationError):
            MedicationConfig(
                id="med-1",
                user_id="user-1",
                frequency="other",
                time_of_day=["06:00", "10:00", "14:00", "18:00", "22:00"],
                start_date=now,
            )
