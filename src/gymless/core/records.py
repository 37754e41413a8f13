"""Daily activity record model.

One ``DailyRecord`` per calendar date. The JSON shape uses the camelCase keys
shared with the mobile client (``caloriesConsumed``, ``proteinGrams``, ...).
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping

from .time import format_iso_date, parse_iso_date
from .validation import RECORD_FIELDS, InvalidRecordError, validate_record

__all__ = [
    "DailyRecord",
    "records_from_dicts",
]


@dataclass(frozen=True)
class DailyRecord:
    """One calendar day of tracked activity.

    Attributes
    ----------
    date : date
        Calendar date, unique key of the record
    calories_consumed, calories_burned : float
        kcal
    protein_grams, carbs_grams, fat_grams : float
        Macronutrients in grams
    water_liters : float
        Water intake in liters
    workout_duration_minutes : int
        0 means no workout that day
    meals_tracked, meals_skipped : int
        Meal tracking counters
    steps : int | None
        Step count, when the day reports one
    workout_type : str | None
        Free-form label, informational only
    """

    date: date
    calories_consumed: float = 0.0
    calories_burned: float = 0.0
    protein_grams: float = 0.0
    carbs_grams: float = 0.0
    fat_grams: float = 0.0
    water_liters: float = 0.0
    workout_duration_minutes: int = 0
    meals_tracked: int = 0
    meals_skipped: int = 0
    steps: int | None = None
    workout_type: str | None = None

    @property
    def calorie_balance(self) -> float:
        """Calories consumed minus calories burned."""
        return self.calories_consumed - self.calories_burned

    @property
    def has_workout(self) -> bool:
        return self.workout_duration_minutes > 0

    def with_changes(self, **changes: Any) -> DailyRecord:
        """Return a copy with the given attributes replaced.

        Raises
        ------
        InvalidRecordError
            A name is not a ``DailyRecord`` attribute
        """
        known = {f.name for f in dataclasses.fields(self)}
        for name in changes:
            if name not in known:
                raise InvalidRecordError(name, "is not a daily record field", record_date=self.date)
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DailyRecord:
        """Parse a record from its JSON shape.

        Raises
        ------
        InvalidRecordError
            Missing key, malformed date, non-numeric or negative value
        """
        if not isinstance(data, Mapping):
            raise InvalidRecordError("date", f"record must be an object, got {type(data).__name__}")

        if "date" not in data:
            raise InvalidRecordError("date", "is required")
        try:
            record_date = parse_iso_date(data["date"])
        except ValueError as exc:
            raise InvalidRecordError("date", f"is not an ISO-8601 date ({exc})") from exc

        values: dict[str, Any] = {}
        for spec in RECORD_FIELDS:
            if spec.key not in data or data[spec.key] is None:
                if spec.required:
                    raise InvalidRecordError(spec.key, "is required", record_date=record_date)
                continue
            value = data[spec.key]
            if spec.kind == "integer" and isinstance(value, float) and value.is_integer():
                value = int(value)
            values[spec.attr] = value

        workout_type = data.get("workoutType")
        record = cls(date=record_date, workout_type=workout_type, **values)

        result = validate_record(record)
        if not result:
            raise result.errors[0]

        return record

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape."""
        data: dict[str, Any] = {"date": format_iso_date(self.date)}
        for spec in RECORD_FIELDS:
            value = getattr(self, spec.attr)
            if value is None and not spec.required:
                continue
            data[spec.key] = value
        if self.workout_type:
            data["workoutType"] = self.workout_type
        return data


def records_from_dicts(items: list[Mapping[str, Any]]) -> list[DailyRecord]:
    """Parse a list of JSON-shaped records, failing on the first bad one."""
    return [DailyRecord.from_dict(item) for item in items]
