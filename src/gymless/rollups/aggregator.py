"""Daily -> weekly -> monthly statistics rollup.

``aggregate`` is a pure function: it validates the whole batch, buckets records
by ISO week (Monday start), buckets the weekly summaries by the calendar month
of their Monday, and attaches period-over-period trends. The input is never
mutated; every call builds fresh output structures.

Weekly averages divide by the number of records actually present in the week.
Monthly averages are the mean of the weekly averages, each week weighted
equally regardless of how many days it holds.
"""

from __future__ import annotations

import dataclasses
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Iterable, Sequence

from ..core.records import DailyRecord
from ..core.time import format_iso_date
from ..core.validation import validate_records
from .time_windows import get_month_key, get_week_start
from .trends import (
    TrendThresholds,
    Trends,
    calorie_balance_trend,
    nutrition_quality_trend,
    workout_consistency_trend,
)

__all__ = [
    "AVERAGED_METRICS",
    "AggregationResult",
    "MetricAverages",
    "MonthlySummary",
    "WeeklySummary",
    "aggregate",
    "build_monthly_summaries",
    "build_weekly_summaries",
]

# (attribute, JSON key) of every averaged metric
AVERAGED_METRICS: tuple[tuple[str, str], ...] = (
    ("calories_consumed", "caloriesConsumed"),
    ("calories_burned", "caloriesBurned"),
    ("calorie_balance", "calorieBalance"),
    ("protein_grams", "proteinGrams"),
    ("carbs_grams", "carbsGrams"),
    ("fat_grams", "fatGrams"),
    ("water_liters", "waterLiters"),
    ("workout_duration_minutes", "workoutDurationMinutes"),
    ("meals_tracked", "mealsTracked"),
    ("meals_skipped", "mealsSkipped"),
)


@dataclass(frozen=True)
class MetricAverages:
    """Per-metric means of one period.

    ``steps`` is averaged only over the samples that report it and is
    None when none do.
    """

    calories_consumed: float = 0.0
    calories_burned: float = 0.0
    calorie_balance: float = 0.0
    protein_grams: float = 0.0
    carbs_grams: float = 0.0
    fat_grams: float = 0.0
    water_liters: float = 0.0
    workout_duration_minutes: float = 0.0
    meals_tracked: float = 0.0
    meals_skipped: float = 0.0
    steps: float | None = None

    @classmethod
    def mean_of(cls, samples: Sequence[Any]) -> MetricAverages:
        """Average the metric attributes of ``samples``.

        Works on daily records (weekly averages) and on ``MetricAverages``
        (monthly mean of weekly means) alike.
        """
        count = len(samples)
        values = {attr: sum(getattr(s, attr) for s in samples) / count for attr, _ in AVERAGED_METRICS}

        steps = [s.steps for s in samples if s.steps is not None]
        values["steps"] = sum(steps) / len(steps) if steps else None

        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        data = {key: getattr(self, attr) for attr, key in AVERAGED_METRICS}
        data["steps"] = self.steps
        return data


@dataclass(frozen=True)
class WeeklySummary:
    """Summary of the records of one ISO week."""

    week_start_date: date
    daily_record_dates: tuple[date, ...]
    averages: MetricAverages
    total_workout_duration_minutes: int
    workout_frequency: int
    meals_tracked_percentage: float | None
    trends: Trends = field(default_factory=Trends)

    @property
    def week_end_date(self) -> date:
        return self.week_start_date + timedelta(days=6)

    @property
    def day_count(self) -> int:
        return len(self.daily_record_dates)

    def to_dict(self) -> dict[str, Any]:
        return {
            "weekStartDate": format_iso_date(self.week_start_date),
            "dailyRecordDates": [format_iso_date(d) for d in self.daily_record_dates],
            "averages": self.averages.to_dict(),
            "totalWorkoutDurationMinutes": self.total_workout_duration_minutes,
            "workoutFrequency": self.workout_frequency,
            "mealsTrackedPercentage": self.meals_tracked_percentage,
            "trends": self.trends.to_dict(),
        }


@dataclass(frozen=True)
class MonthlySummary:
    """Summary of the weeks whose Monday falls in one calendar month.

    Attributes
    ----------
    year : int
        Calendar year
    month : int
        Zero-based month (0 = January)
    weekly_summary_refs : tuple[date, ...]
        Start dates of the contributing weeks
    monthly_averages : MetricAverages
        Mean of the weekly averages
    total_workout_duration_minutes : int
        Sum over the contributing weeks
    workout_frequency : int
        Workout days summed over the contributing weeks
    meals_tracked_percentage : float | None
        Mean over the weeks that have a percentage
    """

    year: int
    month: int
    weekly_summary_refs: tuple[date, ...]
    monthly_averages: MetricAverages
    total_workout_duration_minutes: int
    workout_frequency: int
    meals_tracked_percentage: float | None
    trends: Trends = field(default_factory=Trends)

    @property
    def week_count(self) -> int:
        return len(self.weekly_summary_refs)

    @property
    def average_weekly_workout_frequency(self) -> float:
        return self.workout_frequency / self.week_count

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month,
            "year": self.year,
            "weeklySummaryRefs": [format_iso_date(d) for d in self.weekly_summary_refs],
            "monthlyAverages": self.monthly_averages.to_dict(),
            "totalWorkoutDurationMinutes": self.total_workout_duration_minutes,
            "workoutFrequency": self.workout_frequency,
            "mealsTrackedPercentage": self.meals_tracked_percentage,
            "trends": self.trends.to_dict(),
        }


@dataclass(frozen=True)
class AggregationResult:
    """Weekly and monthly summaries, both sorted ascending."""

    weekly: list[WeeklySummary] = field(default_factory=list)
    monthly: list[MonthlySummary] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.weekly)

    def find_week(self, day: date) -> WeeklySummary | None:
        """Weekly summary of the ISO week containing ``day``."""
        monday = get_week_start(day)
        return next((w for w in self.weekly if w.week_start_date == monday), None)

    def find_month(self, month: int, year: int) -> MonthlySummary | None:
        """Monthly summary for a zero-based month."""
        return next((m for m in self.monthly if m.month == month and m.year == year), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "weekly": [w.to_dict() for w in self.weekly],
            "monthly": [m.to_dict() for m in self.monthly],
        }


def _meals_tracked_percentage(tracked: float, skipped: float) -> float | None:
    total = tracked + skipped
    if total == 0:
        return None
    return tracked / total * 100


def _summarize_week(week_start: date, records: list[DailyRecord]) -> WeeklySummary:
    return WeeklySummary(
        week_start_date=week_start,
        daily_record_dates=tuple(r.date for r in records),
        averages=MetricAverages.mean_of(records),
        total_workout_duration_minutes=sum(r.workout_duration_minutes for r in records),
        workout_frequency=sum(1 for r in records if r.has_workout),
        meals_tracked_percentage=_meals_tracked_percentage(
            sum(r.meals_tracked for r in records),
            sum(r.meals_skipped for r in records),
        ),
    )


def _summarize_month(year: int, month: int, weeks: list[WeeklySummary]) -> MonthlySummary:
    percentages = [w.meals_tracked_percentage for w in weeks if w.meals_tracked_percentage is not None]

    return MonthlySummary(
        year=year,
        month=month,
        weekly_summary_refs=tuple(w.week_start_date for w in weeks),
        monthly_averages=MetricAverages.mean_of([w.averages for w in weeks]),
        total_workout_duration_minutes=sum(w.total_workout_duration_minutes for w in weeks),
        workout_frequency=sum(w.workout_frequency for w in weeks),
        meals_tracked_percentage=sum(percentages) / len(percentages) if percentages else None,
    )


def _with_weekly_trends(weeks: list[WeeklySummary], thresholds: TrendThresholds) -> list[WeeklySummary]:
    result = []
    previous: WeeklySummary | None = None
    for week in weeks:
        if previous is not None:
            trends = Trends(
                calorie_balance_trend=calorie_balance_trend(
                    previous.averages.calorie_balance, week.averages.calorie_balance, thresholds
                ),
                workout_consistency=workout_consistency_trend(
                    previous.workout_frequency, week.workout_frequency, thresholds
                ),
                nutrition_quality=nutrition_quality_trend(
                    previous.averages.protein_grams, week.averages.protein_grams, thresholds
                ),
            )
            week = dataclasses.replace(week, trends=trends)
        result.append(week)
        previous = week
    return result


def _with_monthly_trends(months: list[MonthlySummary], thresholds: TrendThresholds) -> list[MonthlySummary]:
    result = []
    previous: MonthlySummary | None = None
    for month in months:
        if previous is not None:
            trends = Trends(
                calorie_balance_trend=calorie_balance_trend(
                    previous.monthly_averages.calorie_balance,
                    month.monthly_averages.calorie_balance,
                    thresholds,
                ),
                # Months hold different numbers of weeks; compare per-week frequency.
                workout_consistency=workout_consistency_trend(
                    previous.average_weekly_workout_frequency,
                    month.average_weekly_workout_frequency,
                    thresholds,
                ),
                nutrition_quality=nutrition_quality_trend(
                    previous.monthly_averages.protein_grams,
                    month.monthly_averages.protein_grams,
                    thresholds,
                ),
            )
            month = dataclasses.replace(month, trends=trends)
        result.append(month)
        previous = month
    return result


def build_weekly_summaries(
    records: Iterable[DailyRecord],
    thresholds: TrendThresholds | None = None,
) -> list[WeeklySummary]:
    """Bucket already-validated records by ISO week, sorted by week start."""
    buckets: dict[date, list[DailyRecord]] = defaultdict(list)
    # Sorting first keeps float sums identical for any input order.
    for record in sorted(records, key=lambda r: r.date):
        buckets[get_week_start(record.date)].append(record)

    weeks = [_summarize_week(start, buckets[start]) for start in sorted(buckets)]
    return _with_weekly_trends(weeks, thresholds or TrendThresholds())


def build_monthly_summaries(
    weeks: Iterable[WeeklySummary],
    thresholds: TrendThresholds | None = None,
) -> list[MonthlySummary]:
    """Bucket weekly summaries by the month of their Monday."""
    buckets: dict[tuple[int, int], list[WeeklySummary]] = defaultdict(list)
    for week in sorted(weeks, key=lambda w: w.week_start_date):
        buckets[get_month_key(week.week_start_date)].append(week)

    months = [_summarize_month(year, month, buckets[(year, month)]) for year, month in sorted(buckets)]
    return _with_monthly_trends(months, thresholds or TrendThresholds())


def aggregate(
    records: Iterable[DailyRecord],
    *,
    thresholds: TrendThresholds | None = None,
) -> AggregationResult:
    """Fold daily records into weekly and monthly summaries.

    Parameters
    ----------
    records
        Daily records in any order, at most one per date
    thresholds
        Trend thresholds (default: 2% for every trend)

    Returns
    -------
    AggregationResult
        Weekly and monthly summaries; both empty for empty input

    Raises
    ------
    InvalidRecordError
        A record has a negative or malformed field
    DuplicateDateError
        Two records share a date
    """
    batch = list(records)
    validate_records(batch)

    if not batch:
        return AggregationResult()

    thresholds = thresholds or TrendThresholds()
    weekly = build_weekly_summaries(batch, thresholds)
    monthly = build_monthly_summaries(weekly, thresholds)

    return AggregationResult(weekly=weekly, monthly=monthly)
