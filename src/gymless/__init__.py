"""Gymless People analytics: daily activity records rolled up into weekly and monthly summaries."""

from .core.insights import AIInsight
from .core.records import DailyRecord
from .core.validation import AggregationError, DuplicateDateError, InvalidRecordError
from .rollups.aggregator import AggregationResult, MonthlySummary, WeeklySummary, aggregate
from .rollups.trends import TrendThresholds

__version__ = "0.3.0"

__all__ = [
    "AIInsight",
    "AggregationError",
    "AggregationResult",
    "DailyRecord",
    "DuplicateDateError",
    "InvalidRecordError",
    "MonthlySummary",
    "TrendThresholds",
    "WeeklySummary",
    "aggregate",
]
