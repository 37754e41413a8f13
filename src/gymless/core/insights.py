"""Coaching insight model.

Insights are short notes shown next to the rollups ("Workout Consistency",
"Hydration Reminder", ...). They are stored alongside daily records but take
no part in aggregation.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping

from .time import format_iso_date, parse_iso_date

__all__ = [
    "AIInsight",
    "INSIGHT_PRIORITIES",
    "INSIGHT_TYPES",
    "InvalidInsightError",
    "new_insight_id",
    "validate_insight",
]

INSIGHT_TYPES = ("diet", "workout", "progress", "general")
INSIGHT_PRIORITIES = ("low", "medium", "high")


class InvalidInsightError(ValueError):
    """Raised when an insight has a missing or malformed field."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"Invalid insight: field '{field}' {message}")


def new_insight_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class AIInsight:
    """One coaching insight.

    Attributes
    ----------
    id : str
        Unique identifier (UUID string)
    date : date
        Day the insight was generated
    type : str
        One of ``INSIGHT_TYPES``
    title, description : str
        Display text
    priority : str
        One of ``INSIGHT_PRIORITIES``
    related_metric : str | None
        Metric the insight is about (e.g., "protein", "workout_frequency")
    recommendation : str | None
        Suggested next step
    """

    id: str
    date: date
    type: str
    title: str
    description: str
    priority: str = "medium"
    related_metric: str | None = None
    recommendation: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AIInsight:
        """Parse an insight from its JSON shape.

        Raises
        ------
        InvalidInsightError
            Missing key, malformed date or value outside the allowed set
        """
        if not isinstance(data, Mapping):
            raise InvalidInsightError("id", f"insight must be an object, got {type(data).__name__}")

        for key in ("id", "date", "type", "title", "description", "priority"):
            if data.get(key) is None:
                raise InvalidInsightError(key, "is required")
        try:
            insight_date = parse_iso_date(data["date"])
        except ValueError as exc:
            raise InvalidInsightError("date", f"is not an ISO-8601 date ({exc})") from exc

        insight = cls(
            id=data["id"],
            date=insight_date,
            type=data["type"],
            title=data["title"],
            description=data["description"],
            priority=data["priority"],
            related_metric=data.get("relatedMetric"),
            recommendation=data.get("recommendation"),
        )
        validate_insight(insight)
        return insight

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape."""
        data: dict[str, Any] = {
            "id": self.id,
            "date": format_iso_date(self.date),
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
        }
        if self.related_metric:
            data["relatedMetric"] = self.related_metric
        if self.recommendation:
            data["recommendation"] = self.recommendation
        return data


def validate_insight(insight: AIInsight) -> None:
    """Raise ``InvalidInsightError`` for the first bad field of an insight."""
    if not isinstance(insight.id, str) or not insight.id.strip():
        raise InvalidInsightError("id", "must be a non-empty string")
    if isinstance(insight.date, datetime) or not isinstance(insight.date, date):
        raise InvalidInsightError("date", "must be a calendar date without time")
    if insight.type not in INSIGHT_TYPES:
        raise InvalidInsightError("type", f"must be one of {', '.join(INSIGHT_TYPES)}, got {insight.type!r}")
    for key in ("title", "description"):
        value = getattr(insight, key)
        if not isinstance(value, str) or not value.strip():
            raise InvalidInsightError(key, "must be a non-empty string")
    if insight.priority not in INSIGHT_PRIORITIES:
        raise InvalidInsightError(
            "priority", f"must be one of {', '.join(INSIGHT_PRIORITIES)}, got {insight.priority!r}"
        )
    for attr, key in (("related_metric", "relatedMetric"), ("recommendation", "recommendation")):
        value = getattr(insight, attr)
        if value is not None and not isinstance(value, str):
            raise InvalidInsightError(key, f"must be a string, got {type(value).__name__}")
