"""Tests for daily record validation."""

from datetime import date, datetime

import pytest

from gymless.core.records import DailyRecord
from gymless.core.validation import (
    AggregationError,
    DuplicateDateError,
    InvalidRecordError,
    check_duplicate_dates,
    validate_record,
    validate_records,
)
from gymless.rollups.aggregator import aggregate


def test_valid_record_passes():
    record = DailyRecord(date=date(2024, 3, 4), calories_consumed=2000, steps=8000)

    result = validate_record(record)

    assert result
    assert str(result) == "Valid"


def test_zero_values_are_valid():
    assert validate_record(DailyRecord(date=date(2024, 3, 4)))


class TestFieldErrors:
    def test_negative_value(self):
        result = validate_record(DailyRecord(date=date(2024, 3, 4), fat_grams=-1))

        assert not result
        assert len(result.errors) == 1
        error = result.errors[0]
        assert error.field == "fatGrams"
        assert error.date == date(2024, 3, 4)
        assert "non-negative" in str(error)
        assert "2024-03-04" in str(error)

    def test_all_errors_collected(self):
        record = DailyRecord(date=date(2024, 3, 4), calories_consumed=-5, water_liters=-1, meals_skipped=-2)

        result = validate_record(record)

        assert [e.field for e in result.errors] == ["caloriesConsumed", "waterLiters", "mealsSkipped"]

    def test_non_numeric_value(self):
        result = validate_record(DailyRecord(date=date(2024, 3, 4), protein_grams="lots"))  # type: ignore[arg-type]

        assert result.errors[0].field == "proteinGrams"
        assert "must be numeric" in str(result.errors[0])

    def test_bool_is_not_numeric(self):
        result = validate_record(DailyRecord(date=date(2024, 3, 4), meals_tracked=True))  # type: ignore[arg-type]

        assert result.errors[0].field == "mealsTracked"

    def test_nan_rejected(self):
        result = validate_record(DailyRecord(date=date(2024, 3, 4), water_liters=float("nan")))

        assert "finite" in str(result.errors[0])

    def test_fractional_integer_field_rejected(self):
        record = DailyRecord(date=date(2024, 3, 4), workout_duration_minutes=30.5)  # type: ignore[arg-type]

        result = validate_record(record)

        assert result.errors[0].field == "workoutDurationMinutes"

    def test_missing_required_value(self):
        result = validate_record(DailyRecord(date=date(2024, 3, 4), carbs_grams=None))  # type: ignore[arg-type]

        assert result.errors[0].field == "carbsGrams"
        assert "is required" in str(result.errors[0])

    def test_missing_steps_allowed(self):
        assert validate_record(DailyRecord(date=date(2024, 3, 4), steps=None))

    def test_malformed_date(self):
        result = validate_record(DailyRecord(date="not a date"))  # type: ignore[arg-type]

        assert result.errors[0].field == "date"
        assert result.errors[0].date is None

    def test_datetime_rejected(self):
        result = validate_record(DailyRecord(date=datetime(2024, 3, 4, 9, 30)))

        assert result.errors[0].field == "date"
        assert "without time" in str(result.errors[0])

    def test_non_string_workout_type(self):
        result = validate_record(DailyRecord(date=date(2024, 3, 4), workout_type=45))  # type: ignore[arg-type]

        assert result.errors[0].field == "workoutType"
        assert result.errors[0].date == date(2024, 3, 4)


class TestBatchValidation:
    def test_duplicate_dates(self):
        records = [DailyRecord(date=date(2024, 3, 4)), DailyRecord(date=date(2024, 3, 4))]

        with pytest.raises(DuplicateDateError) as exc_info:
            check_duplicate_dates(records)

        assert exc_info.value.dates == (date(2024, 3, 4), date(2024, 3, 4))

    def test_field_errors_reported_before_duplicates(self):
        records = [
            DailyRecord(date=date(2024, 3, 4)),
            DailyRecord(date=date(2024, 3, 4)),
            DailyRecord(date=date(2024, 3, 5), steps=-10),
        ]

        with pytest.raises(InvalidRecordError) as exc_info:
            validate_records(records)

        assert exc_info.value.field == "steps"

    def test_first_invalid_record_in_input_order(self):
        records = [
            DailyRecord(date=date(2024, 3, 9), calories_burned=-1),
            DailyRecord(date=date(2024, 3, 1), calories_consumed=-1),
        ]

        with pytest.raises(InvalidRecordError) as exc_info:
            validate_records(records)

        assert exc_info.value.date == date(2024, 3, 9)

    def test_errors_share_base_class(self):
        assert issubclass(InvalidRecordError, AggregationError)
        assert issubclass(DuplicateDateError, AggregationError)

    def test_empty_batch_is_valid(self):
        validate_records([])

    def test_same_day_datetimes_are_not_separate_days(self):
        records = [DailyRecord(date=datetime(2024, 3, 4, 8)), DailyRecord(date=datetime(2024, 3, 4, 20))]

        with pytest.raises(AggregationError) as exc_info:
            aggregate(records)

        assert isinstance(exc_info.value, InvalidRecordError)
        assert exc_info.value.field == "date"

    def test_mixed_date_and_datetime_batch(self):
        records = [DailyRecord(date=date(2024, 3, 4)), DailyRecord(date=datetime(2024, 3, 5, 9, 30))]

        with pytest.raises(InvalidRecordError, match="without time"):
            aggregate(records)
