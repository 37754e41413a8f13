"""Daily -> weekly -> monthly statistics rollups."""

from .aggregator import (
    AggregationResult,
    MetricAverages,
    MonthlySummary,
    WeeklySummary,
    aggregate,
    build_monthly_summaries,
    build_weekly_summaries,
)
from .time_windows import (
    TimeWindow,
    compute_month_window,
    compute_week_window,
    compute_window,
    get_month_key,
    get_week_start,
    iter_days,
)
from .trends import TrendThresholds, Trends, classify_change

__all__ = [
    # Time windows
    "TimeWindow",
    "compute_window",
    "compute_week_window",
    "compute_month_window",
    "get_month_key",
    "get_week_start",
    "iter_days",
    # Trends
    "TrendThresholds",
    "Trends",
    "classify_change",
    # Aggregation
    "AggregationResult",
    "MetricAverages",
    "MonthlySummary",
    "WeeklySummary",
    "aggregate",
    "build_weekly_summaries",
    "build_monthly_summaries",
]
