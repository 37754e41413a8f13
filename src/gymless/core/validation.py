"""Validation for daily activity records.

Aggregation is all-or-nothing: a batch is validated completely before any
bucketing starts, and the first problem is raised to the caller. No partial
summaries are ever produced for a malformed batch.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Iterable, Literal

if TYPE_CHECKING:
    from .records import DailyRecord

__all__ = [
    "AggregationError",
    "DuplicateDateError",
    "FieldSpec",
    "InvalidRecordError",
    "RECORD_FIELDS",
    "ValidationResult",
    "check_duplicate_dates",
    "validate_record",
    "validate_records",
]


class AggregationError(Exception):
    """Base class for errors raised while validating or aggregating records."""


class InvalidRecordError(AggregationError):
    """Raised when a record fails field-level validation.

    Attributes
    ----------
    date : date | None
        Date of the offending record (None when the date itself is malformed)
    field : str
        JSON name of the offending field
    """

    def __init__(self, field: str, message: str, *, record_date: date | None = None) -> None:
        self.field = field
        self.date = record_date
        where = f"record {record_date.isoformat()}" if record_date else "record"
        super().__init__(f"Invalid {where}: field '{field}' {message}")


class DuplicateDateError(AggregationError):
    """Raised when two input records share the same date.

    The caller decides the merge policy; both input positions are reported.
    """

    def __init__(self, record_date: date, first_index: int, second_index: int) -> None:
        self.date = record_date
        self.first_index = first_index
        self.second_index = second_index
        self.dates = (record_date, record_date)
        super().__init__(
            f"Duplicate daily record for {record_date.isoformat()} "
            f"(input positions {first_index} and {second_index})"
        )


@dataclass(frozen=True)
class FieldSpec:
    """Description of one numeric field of a daily record."""

    attr: str
    key: str
    kind: Literal["number", "integer"]
    required: bool = True


# Order matters: it is the order errors are reported in.
RECORD_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("calories_consumed", "caloriesConsumed", "number"),
    FieldSpec("calories_burned", "caloriesBurned", "number"),
    FieldSpec("protein_grams", "proteinGrams", "number"),
    FieldSpec("carbs_grams", "carbsGrams", "number"),
    FieldSpec("fat_grams", "fatGrams", "number"),
    FieldSpec("water_liters", "waterLiters", "number"),
    FieldSpec("workout_duration_minutes", "workoutDurationMinutes", "integer"),
    FieldSpec("meals_tracked", "mealsTracked", "integer"),
    FieldSpec("meals_skipped", "mealsSkipped", "integer"),
    FieldSpec("steps", "steps", "integer", required=False),
)


class ValidationResult:
    """Result of record validation."""

    def __init__(self, valid: bool, errors: list[InvalidRecordError] | None = None) -> None:
        self.valid = valid
        self.errors = errors or []

    def __bool__(self) -> bool:
        return self.valid

    def __str__(self) -> str:
        if self.valid:
            return "Valid"
        return f"Invalid: {'; '.join(str(e) for e in self.errors)}"

    def add_error(self, error: InvalidRecordError) -> None:
        """Add validation error."""
        self.errors.append(error)
        self.valid = False


def _check_value(spec: FieldSpec, value: Any) -> str | None:
    if value is None:
        return "is required" if spec.required else None
    # bool is an int subclass but never a valid metric
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return f"must be numeric, got {type(value).__name__}"
    if isinstance(value, float) and not math.isfinite(value):
        return "must be a finite number"
    if spec.kind == "integer" and isinstance(value, float) and not value.is_integer():
        return f"must be an integer, got {value}"
    if value < 0:
        return f"must be non-negative, got {value}"
    return None


def validate_record(record: DailyRecord) -> ValidationResult:
    """Validate every field of a record and collect all errors.

    Parameters
    ----------
    record
        Record to validate

    Returns
    -------
    ValidationResult
        Result with one ``InvalidRecordError`` per failing field
    """
    result = ValidationResult(valid=True)

    record_date = record.date
    if isinstance(record_date, datetime):
        result.add_error(InvalidRecordError("date", "must be a calendar date without time"))
        record_date = None
    elif not isinstance(record_date, date):
        result.add_error(InvalidRecordError("date", f"must be a calendar date, got {record_date!r}"))
        record_date = None

    for spec in RECORD_FIELDS:
        problem = _check_value(spec, getattr(record, spec.attr))
        if problem:
            result.add_error(InvalidRecordError(spec.key, problem, record_date=record_date))

    workout_type = record.workout_type
    if workout_type is not None and not isinstance(workout_type, str):
        result.add_error(
            InvalidRecordError(
                "workoutType", f"must be a string, got {type(workout_type).__name__}", record_date=record_date
            )
        )

    return result


def check_duplicate_dates(records: Iterable[DailyRecord]) -> None:
    """Raise ``DuplicateDateError`` for the first date seen twice."""
    seen: dict[date, int] = {}
    for index, record in enumerate(records):
        if record.date in seen:
            raise DuplicateDateError(record.date, seen[record.date], index)
        seen[record.date] = index


def validate_records(records: Iterable[DailyRecord]) -> None:
    """Validate a batch of records before aggregation.

    Field errors are checked first, in input order; duplicates second.

    Raises
    ------
    InvalidRecordError
        First field-level problem found
    DuplicateDateError
        Two records share a date
    """
    batch = list(records)
    for record in batch:
        result = validate_record(record)
        if not result:
            raise result.errors[0]

    check_duplicate_dates(batch)
