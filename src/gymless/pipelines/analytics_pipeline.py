"""Analytics pipeline: thin orchestration over an injected record store.

The pipeline owns no state besides its store. Every read re-aggregates the
full record set from scratch; every write re-validates the full set before
it is saved, so a malformed or duplicate record never reaches the store.
Coaching insights are kept in the same store and managed by id.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

from ..core.insights import AIInsight, new_insight_id, validate_insight
from ..core.records import DailyRecord
from ..core.time import get_today
from ..core.validation import DuplicateDateError, validate_records
from ..observability.loguru_config import get_logger, log_timing, timing_context
from ..rollups.aggregator import AggregationResult, MonthlySummary, WeeklySummary, aggregate
from ..rollups.trends import TrendThresholds
from ..storage.base import DailyRecordStore

__all__ = [
    "AnalyticsPipeline",
    "AnalyticsPipelineConfig",
    "InsightNotFoundError",
    "RecordNotFoundError",
    "SAMPLE_DAYS",
    "SAMPLE_INSIGHTS",
    "create_analytics_pipeline",
]

logger = get_logger("pipeline")


class RecordNotFoundError(Exception):
    """Raised when no daily record exists for a date."""

    def __init__(self, record_date: date) -> None:
        self.date = record_date
        super().__init__(f"No daily record for {record_date.isoformat()}")


class InsightNotFoundError(Exception):
    """Raised when no insight has the given id."""

    def __init__(self, insight_id: str) -> None:
        self.insight_id = insight_id
        super().__init__(f"No insight with id {insight_id!r}")


# Demo days seeded into an empty store, oldest first.
SAMPLE_DAYS: tuple[dict[str, Any], ...] = (
    {
        "calories_consumed": 2100,
        "calories_burned": 350,
        "protein_grams": 95,
        "carbs_grams": 220,
        "fat_grams": 65,
        "water_liters": 2.5,
        "workout_duration_minutes": 45,
        "workout_type": "Strength Training",
        "meals_tracked": 3,
        "meals_skipped": 0,
        "steps": 8500,
    },
    {
        "calories_consumed": 1950,
        "calories_burned": 280,
        "protein_grams": 85,
        "carbs_grams": 200,
        "fat_grams": 60,
        "water_liters": 2.2,
        "workout_duration_minutes": 30,
        "workout_type": "Cardio",
        "meals_tracked": 2,
        "meals_skipped": 1,
        "steps": 7200,
    },
    {
        "calories_consumed": 2200,
        "calories_burned": 400,
        "protein_grams": 100,
        "carbs_grams": 230,
        "fat_grams": 70,
        "water_liters": 3.0,
        "workout_duration_minutes": 60,
        "workout_type": "HIIT",
        "meals_tracked": 3,
        "meals_skipped": 0,
        "steps": 9500,
    },
)

# Insights seeded next to the demo days, dated today.
SAMPLE_INSIGHTS: tuple[dict[str, Any], ...] = (
    {
        "type": "diet",
        "title": "Protein Intake Improvement",
        "description": "Your protein intake has been consistently improving over the past week. Keep it up!",
        "related_metric": "protein",
        "recommendation": "Try to maintain this level by including protein in every meal.",
        "priority": "medium",
    },
    {
        "type": "workout",
        "title": "Workout Consistency",
        "description": "You've been consistent with your workouts this week. This is great for building a habit!",
        "related_metric": "workout_frequency",
        "recommendation": "Consider increasing intensity slightly next week.",
        "priority": "high",
    },
    {
        "type": "progress",
        "title": "Calorie Balance",
        "description": "Your calorie deficit is on track with your goals.",
        "related_metric": "calorie_balance",
        "recommendation": "Continue with current diet and exercise plan.",
        "priority": "medium",
    },
    {
        "type": "general",
        "title": "Hydration Reminder",
        "description": "Your water intake could be improved.",
        "related_metric": "water_intake",
        "recommendation": "Try to drink at least 3L of water daily.",
        "priority": "low",
    },
)


@dataclass
class AnalyticsPipelineConfig:
    """Configuration for the analytics pipeline."""

    thresholds: TrendThresholds
    timezone: str = "UTC"


class AnalyticsPipeline:
    """Daily record management and rollup reporting.

    Example:
        >>> store = InMemoryDailyRecordStore()
        >>> pipeline = AnalyticsPipeline(store)
        >>> pipeline.add_daily_record(DailyRecord(date=date(2024, 3, 4), calories_consumed=2000))
        >>> result = pipeline.report()
        >>> result.weekly[0].week_start_date
        datetime.date(2024, 3, 4)
    """

    def __init__(
        self,
        store: DailyRecordStore,
        config: AnalyticsPipelineConfig | None = None,
        *,
        trace_id: str | None = None,
    ) -> None:
        """Initialize analytics pipeline.

        Parameters
        ----------
        store
            Daily record store
        config
            Pipeline configuration (default thresholds when omitted)
        trace_id
            Trace ID attached to every log record
        """
        self.store = store
        self.config = config or AnalyticsPipelineConfig(thresholds=TrendThresholds())
        self.trace_id = trace_id or f"trace-{uuid.uuid4().hex[:12]}"

    @log_timing(component="pipeline")
    def list_daily_records(self) -> list[DailyRecord]:
        """All stored records, sorted by date."""
        return sorted(self.store.load(), key=lambda r: r.date)

    def get_daily_record(self, day: date) -> DailyRecord | None:
        return next((r for r in self.store.load() if r.date == day), None)

    def report(self) -> AggregationResult:
        """Aggregate every stored record into weekly and monthly summaries."""
        with timing_context("report", component="pipeline", trace_id=self.trace_id) as ctx:
            records = self.store.load()
            result = aggregate(records, thresholds=self.config.thresholds)
            ctx.update(records=len(records), weeks=len(result.weekly), months=len(result.monthly))

        logger.info(
            "Aggregated daily records",
            trace_id=self.trace_id,
            records=len(records),
            weeks=len(result.weekly),
            months=len(result.monthly),
        )
        return result

    @log_timing(component="pipeline")
    def get_weekly_summary(self, day: date) -> WeeklySummary | None:
        """Summary of the ISO week containing ``day`` (None when no data)."""
        return self.report().find_week(day)

    @log_timing(component="pipeline")
    def get_monthly_summary(self, month: int, year: int) -> MonthlySummary | None:
        """Summary of a zero-based month (None when no data)."""
        return self.report().find_month(month, year)

    def add_daily_record(self, record: DailyRecord) -> DailyRecord:
        """Add the record for a new date.

        Raises
        ------
        DuplicateDateError
            A record already exists for that date
        InvalidRecordError
            The record fails validation
        """
        records = self.store.load()
        for index, existing in enumerate(records):
            if existing.date == record.date:
                raise DuplicateDateError(record.date, index, len(records))

        records.append(record)
        self._save(records, action="add", record_date=record.date)
        return record

    def update_daily_record(self, day: date, **changes: Any) -> DailyRecord:
        """Replace fields of the record for ``day``.

        Raises
        ------
        RecordNotFoundError
            No record exists for ``day``
        InvalidRecordError
            A change names an unknown field, or the updated record fails validation
        DuplicateDateError
            ``changes`` moves the record onto another stored date
        """
        records = self.store.load()
        for index, existing in enumerate(records):
            if existing.date == day:
                updated = existing.with_changes(**changes)
                records[index] = updated
                self._save(records, action="update", record_date=day)
                return updated

        raise RecordNotFoundError(day)

    def remove_daily_record(self, day: date) -> DailyRecord:
        """Delete the record for ``day``.

        Raises
        ------
        RecordNotFoundError
            No record exists for ``day``
        """
        records = self.store.load()
        remaining = [r for r in records if r.date != day]
        if len(remaining) == len(records):
            raise RecordNotFoundError(day)

        removed = next(r for r in records if r.date == day)
        self._save(remaining, action="remove", record_date=day)
        return removed

    def seed_sample_data(self, today: date | None = None) -> list[DailyRecord]:
        """Seed three demo days ending at ``today`` into an empty store.

        The four sample insights, dated ``today``, are appended to the
        stored insights in the same run.

        Returns
        -------
        list[DailyRecord]
            Seeded records (empty when the store already holds data)
        """
        if self.store.load():
            logger.info("Store not empty, skipping sample data", trace_id=self.trace_id)
            return []

        today = today or get_today(self.config.timezone)
        start = today - timedelta(days=len(SAMPLE_DAYS) - 1)
        records = [
            DailyRecord(date=start + timedelta(days=offset), **values)
            for offset, values in enumerate(SAMPLE_DAYS)
        ]
        self._save(records, action="seed", record_date=today)

        insights = self.store.load_insights()
        insights.extend(AIInsight(id=new_insight_id(), date=today, **values) for values in SAMPLE_INSIGHTS)
        self.store.save_insights(insights)
        logger.info("Seeded sample insights", trace_id=self.trace_id, count=len(SAMPLE_INSIGHTS))
        return records

    @log_timing(component="pipeline")
    def list_insights(self) -> list[AIInsight]:
        """All stored insights, in the order they were added."""
        return self.store.load_insights()

    def add_insight(
        self,
        *,
        type: str,
        title: str,
        description: str,
        priority: str = "medium",
        related_metric: str | None = None,
        recommendation: str | None = None,
        day: date | None = None,
    ) -> AIInsight:
        """Store a new insight under a fresh id.

        Parameters
        ----------
        type
            diet, workout, progress or general
        priority
            low, medium or high
        day
            Date of the insight (default: today in the configured timezone)

        Raises
        ------
        InvalidInsightError
            A field is missing or outside its allowed values
        """
        insight = AIInsight(
            id=new_insight_id(),
            date=day or get_today(self.config.timezone),
            type=type,
            title=title,
            description=description,
            priority=priority,
            related_metric=related_metric,
            recommendation=recommendation,
        )
        validate_insight(insight)

        insights = self.store.load_insights()
        insights.append(insight)
        self.store.save_insights(insights)

        logger.info("Insight added", trace_id=self.trace_id, insight_id=insight.id, type=insight.type)
        return insight

    def remove_insight(self, insight_id: str) -> AIInsight:
        """Delete the insight with ``insight_id``.

        Raises
        ------
        InsightNotFoundError
            No insight has that id
        """
        insights = self.store.load_insights()
        removed = next((i for i in insights if i.id == insight_id), None)
        if removed is None:
            raise InsightNotFoundError(insight_id)

        self.store.save_insights([i for i in insights if i.id != insight_id])
        logger.info("Insight removed", trace_id=self.trace_id, insight_id=insight_id, total=len(insights) - 1)
        return removed

    def _save(self, records: list[DailyRecord], *, action: str, record_date: date) -> None:
        with timing_context("save", component="pipeline", trace_id=self.trace_id, action=action):
            validate_records(records)
            self.store.save(records)

        logger.info(
            f"Daily records {action}",
            trace_id=self.trace_id,
            date=record_date.isoformat(),
            total=len(records),
        )


def create_analytics_pipeline(
    store: DailyRecordStore,
    *,
    thresholds: TrendThresholds | None = None,
    timezone: str = "UTC",
    trace_id: str | None = None,
) -> AnalyticsPipeline:
    """Factory function to create an analytics pipeline."""
    config = AnalyticsPipelineConfig(thresholds=thresholds or TrendThresholds(), timezone=timezone)
    return AnalyticsPipeline(store, config, trace_id=trace_id)
