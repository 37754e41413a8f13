"""Integration tests for the analytics pipeline over real stores."""

from datetime import date
from pathlib import Path

import pytest
from loguru import logger

from gymless.core.insights import InvalidInsightError
from gymless.core.records import DailyRecord
from gymless.core.validation import DuplicateDateError, InvalidRecordError
from gymless.pipelines.analytics_pipeline import (
    SAMPLE_DAYS,
    SAMPLE_INSIGHTS,
    AnalyticsPipeline,
    InsightNotFoundError,
    RecordNotFoundError,
    create_analytics_pipeline,
)
from gymless.rollups.trends import TrendThresholds
from gymless.storage import InMemoryDailyRecordStore, JsonFileDailyRecordStore


@pytest.fixture
def store():
    return InMemoryDailyRecordStore()


@pytest.fixture
def pipeline(store):
    return AnalyticsPipeline(store, trace_id="trace-test")


def record(day: date, **values) -> DailyRecord:
    return DailyRecord(date=day, calories_consumed=2000, calories_burned=300, meals_tracked=3, **values)


class TestRecordManagement:
    def test_add_record(self, pipeline, store):
        added = pipeline.add_daily_record(record(date(2024, 3, 4)))

        assert store.load() == [added]
        assert pipeline.get_daily_record(date(2024, 3, 4)) == added

    def test_add_duplicate_date(self, pipeline, store):
        pipeline.add_daily_record(record(date(2024, 3, 4)))

        with pytest.raises(DuplicateDateError) as exc_info:
            pipeline.add_daily_record(record(date(2024, 3, 4), protein_grams=120))

        assert exc_info.value.date == date(2024, 3, 4)
        assert len(store.load()) == 1

    def test_add_invalid_record_leaves_store_untouched(self, pipeline, store):
        with pytest.raises(InvalidRecordError):
            pipeline.add_daily_record(record(date(2024, 3, 4), water_liters=-1))

        assert store.load() == []

    def test_update_record(self, pipeline):
        pipeline.add_daily_record(record(date(2024, 3, 4)))

        updated = pipeline.update_daily_record(date(2024, 3, 4), protein_grams=110, steps=9000)

        assert updated.protein_grams == 110
        assert updated.steps == 9000
        assert updated.calories_consumed == 2000
        assert pipeline.get_daily_record(date(2024, 3, 4)) == updated

    def test_update_missing_record(self, pipeline):
        with pytest.raises(RecordNotFoundError, match="2024-03-04"):
            pipeline.update_daily_record(date(2024, 3, 4), protein_grams=110)

    def test_update_to_invalid_value(self, pipeline):
        original = pipeline.add_daily_record(record(date(2024, 3, 4)))

        with pytest.raises(InvalidRecordError):
            pipeline.update_daily_record(date(2024, 3, 4), calories_burned=-50)

        assert pipeline.get_daily_record(date(2024, 3, 4)) == original

    def test_update_unknown_field(self, pipeline):
        original = pipeline.add_daily_record(record(date(2024, 3, 4)))

        with pytest.raises(InvalidRecordError, match="is not a daily record field") as exc_info:
            pipeline.update_daily_record(date(2024, 3, 4), caloriesBurned=300)

        assert exc_info.value.field == "caloriesBurned"
        assert pipeline.get_daily_record(date(2024, 3, 4)) == original

    def test_update_onto_existing_date(self, pipeline):
        pipeline.add_daily_record(record(date(2024, 3, 4)))
        pipeline.add_daily_record(record(date(2024, 3, 5)))

        with pytest.raises(DuplicateDateError):
            pipeline.update_daily_record(date(2024, 3, 5), date=date(2024, 3, 4))

    def test_remove_record(self, pipeline):
        pipeline.add_daily_record(record(date(2024, 3, 4)))
        pipeline.add_daily_record(record(date(2024, 3, 5)))

        removed = pipeline.remove_daily_record(date(2024, 3, 4))

        assert removed.date == date(2024, 3, 4)
        assert [r.date for r in pipeline.list_daily_records()] == [date(2024, 3, 5)]

    def test_remove_missing_record(self, pipeline):
        with pytest.raises(RecordNotFoundError):
            pipeline.remove_daily_record(date(2024, 3, 4))

    def test_list_sorted_by_date(self, store):
        store.save([record(date(2024, 3, 6)), record(date(2024, 3, 4))])

        dates = [r.date for r in AnalyticsPipeline(store).list_daily_records()]

        assert dates == [date(2024, 3, 4), date(2024, 3, 6)]


class TestSampleData:
    def test_seed_empty_store(self, pipeline, store):
        seeded = pipeline.seed_sample_data(date(2024, 3, 6))

        assert [r.date for r in seeded] == [date(2024, 3, 4), date(2024, 3, 5), date(2024, 3, 6)]
        assert seeded[0].workout_type == SAMPLE_DAYS[0]["workout_type"]
        assert len(store.load()) == 3

    def test_seed_adds_sample_insights(self, pipeline, store):
        pipeline.seed_sample_data(date(2024, 3, 6))

        insights = store.load_insights()
        assert [i.title for i in insights] == [values["title"] for values in SAMPLE_INSIGHTS]
        assert [i.priority for i in insights] == ["medium", "high", "medium", "low"]
        assert {i.date for i in insights} == {date(2024, 3, 6)}
        assert len({i.id for i in insights}) == 4

    def test_seed_skips_non_empty_store(self, pipeline, store):
        pipeline.add_daily_record(record(date(2024, 3, 1)))

        assert pipeline.seed_sample_data(date(2024, 3, 6)) == []
        assert len(store.load()) == 1
        assert store.load_insights() == []

    def test_seeded_week_report(self, pipeline):
        pipeline.seed_sample_data(date(2024, 3, 6))

        week = pipeline.get_weekly_summary(date(2024, 3, 6))

        assert week.week_start_date == date(2024, 3, 4)
        assert week.averages.calories_consumed == pytest.approx((2100 + 1950 + 2200) / 3)
        assert week.workout_frequency == 3
        assert week.total_workout_duration_minutes == 135
        assert week.meals_tracked_percentage == pytest.approx(8 / 9 * 100)
        assert week.averages.steps == pytest.approx((8500 + 7200 + 9500) / 3)


class TestInsights:
    def test_add_insight(self, pipeline, store):
        insight = pipeline.add_insight(
            type="diet",
            title="Protein Intake Improvement",
            description="Protein is up this week.",
            related_metric="protein",
            day=date(2024, 3, 6),
        )

        assert insight.priority == "medium"
        assert insight.date == date(2024, 3, 6)
        assert insight.id
        assert store.load_insights() == [insight]

    def test_insights_keep_insertion_order(self, pipeline):
        first = pipeline.add_insight(type="general", title="Hydration", description="Drink more.", day=date(2024, 3, 9))
        second = pipeline.add_insight(type="workout", title="Rest", description="Take a day off.", day=date(2024, 3, 1))

        assert pipeline.list_insights() == [first, second]

    @pytest.mark.parametrize(
        "changes, field",
        [
            ({"type": "sleep"}, "type"),
            ({"priority": "urgent"}, "priority"),
            ({"title": "  "}, "title"),
        ],
    )
    def test_invalid_insight_rejected(self, pipeline, store, changes, field):
        values = {"type": "diet", "title": "Protein", "description": "Protein is up.", **changes}

        with pytest.raises(InvalidInsightError) as exc_info:
            pipeline.add_insight(**values)

        assert exc_info.value.field == field
        assert store.load_insights() == []

    def test_remove_insight(self, pipeline):
        keep = pipeline.add_insight(type="general", title="Hydration", description="Drink more.")
        drop = pipeline.add_insight(type="progress", title="Balance", description="On track.")

        assert pipeline.remove_insight(drop.id) == drop
        assert pipeline.list_insights() == [keep]

    def test_remove_missing_insight(self, pipeline):
        with pytest.raises(InsightNotFoundError, match="no-such-id"):
            pipeline.remove_insight("no-such-id")

    def test_record_writes_keep_insights(self, pipeline):
        insight = pipeline.add_insight(type="general", title="Hydration", description="Drink more.")

        pipeline.add_daily_record(record(date(2024, 3, 4)))
        pipeline.remove_daily_record(date(2024, 3, 4))

        assert pipeline.list_insights() == [insight]


class TestReports:
    def test_empty_store_report(self, pipeline):
        result = pipeline.report()

        assert result.weekly == []
        assert result.monthly == []

    def test_weekly_and_monthly_lookup(self, pipeline):
        pipeline.add_daily_record(record(date(2024, 3, 4)))
        pipeline.add_daily_record(record(date(2024, 3, 12)))

        assert pipeline.get_weekly_summary(date(2024, 3, 13)).week_start_date == date(2024, 3, 11)
        assert pipeline.get_weekly_summary(date(2024, 3, 20)) is None
        assert pipeline.get_monthly_summary(2, 2024).week_count == 2
        assert pipeline.get_monthly_summary(3, 2024) is None

    def test_configured_thresholds(self, store):
        store.save(
            [
                DailyRecord(date=date(2024, 3, 4), calories_consumed=2000, calories_burned=1000),
                DailyRecord(date=date(2024, 3, 11), calories_consumed=2040, calories_burned=1000),
            ]
        )

        strict = create_analytics_pipeline(store)
        relaxed = create_analytics_pipeline(store, thresholds=TrendThresholds.uniform(0.05))

        assert strict.report().weekly[1].trends.calorie_balance_trend == "increasing"
        assert relaxed.report().weekly[1].trends.calorie_balance_trend == "stable"

    def test_lookups_are_timed(self, pipeline):
        timings = []
        sink_id = logger.add(
            lambda message: timings.append(message.record),
            level="DEBUG",
            filter=lambda entry: entry["extra"].get("timing", False),
        )
        try:
            pipeline.get_weekly_summary(date(2024, 3, 4))
        finally:
            logger.remove(sink_id)

        end = [r for r in timings if r["message"] == "END: AnalyticsPipeline.get_weekly_summary"]
        assert len(end) == 1
        assert end[0]["extra"]["trace_id"] == "trace-test"
        assert end[0]["extra"]["component"] == "pipeline"


def test_json_store_persists_between_pipelines(tmp_path: Path):
    path = tmp_path / "daily_stats.json"

    AnalyticsPipeline(JsonFileDailyRecordStore(path)).seed_sample_data(date(2024, 3, 6))
    result = AnalyticsPipeline(JsonFileDailyRecordStore(path)).report()

    assert [w.week_start_date for w in result.weekly] == [date(2024, 3, 4)]
    assert result.weekly[0].day_count == 3
    assert (result.monthly[0].year, result.monthly[0].month) == (2024, 2)
    assert len(AnalyticsPipeline(JsonFileDailyRecordStore(path)).list_insights()) == len(SAMPLE_INSIGHTS)
