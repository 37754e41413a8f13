"""Core domain model: daily records, insights, validation and date helpers."""

from .insights import AIInsight, InvalidInsightError, validate_insight
from .records import DailyRecord, records_from_dicts
from .time import (
    format_iso_date,
    get_current_time,
    get_default_timezone,
    get_today,
    parse_iso_date,
    resolve_timezone,
    set_default_timezone,
)
from .validation import (
    AggregationError,
    DuplicateDateError,
    InvalidRecordError,
    ValidationResult,
    validate_record,
    validate_records,
)

__all__ = [
    # Records
    "DailyRecord",
    "records_from_dicts",
    # Insights
    "AIInsight",
    "InvalidInsightError",
    "validate_insight",
    # Validation
    "AggregationError",
    "DuplicateDateError",
    "InvalidRecordError",
    "ValidationResult",
    "validate_record",
    "validate_records",
    # Time
    "format_iso_date",
    "get_current_time",
    "get_default_timezone",
    "get_today",
    "parse_iso_date",
    "resolve_timezone",
    "set_default_timezone",
]
