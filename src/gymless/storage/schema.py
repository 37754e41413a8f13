"""JSON schema of the persisted daily record payload.

Both the file store and the HTTP store exchange ``{"records": [...]}``
documents; insights travel as ``{"insights": [...]}`` (a key of the same
document in the file store, a separate resource over HTTP). The schemas guard
the shape; ``from_dict`` then parses dates and enforces the field rules.
"""

from __future__ import annotations

from typing import Any, Iterable

import jsonschema  # type: ignore[import-untyped]

from ..core.insights import INSIGHT_PRIORITIES, INSIGHT_TYPES, AIInsight, InvalidInsightError
from ..core.records import DailyRecord
from ..core.validation import RECORD_FIELDS, InvalidRecordError
from .base import StoreError

__all__ = [
    "DAILY_RECORDS_SCHEMA",
    "INSIGHTS_SCHEMA",
    "PAYLOAD_VERSION",
    "build_insights_payload",
    "build_payload",
    "parse_insights",
    "parse_payload",
    "validate_insights_payload",
    "validate_payload",
]

PAYLOAD_VERSION = 1


def _record_schema() -> dict[str, Any]:
    properties: dict[str, Any] = {
        "date": {"type": "string", "pattern": r"^\d{4}-\d{2}-\d{2}"},
        "workoutType": {"type": ["string", "null"]},
        "id": {"type": "string"},
    }
    for spec in RECORD_FIELDS:
        json_type: Any = spec.kind if spec.required else [spec.kind, "null"]
        properties[spec.key] = {"type": json_type, "minimum": 0}

    return {
        "type": "object",
        "required": ["date"] + [spec.key for spec in RECORD_FIELDS if spec.required],
        "properties": properties,
    }


_INSIGHT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["id", "date", "type", "title", "description", "priority"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "date": {"type": "string", "pattern": r"^\d{4}-\d{2}-\d{2}"},
        "type": {"enum": list(INSIGHT_TYPES)},
        "title": {"type": "string"},
        "description": {"type": "string"},
        "priority": {"enum": list(INSIGHT_PRIORITIES)},
        "relatedMetric": {"type": ["string", "null"]},
        "recommendation": {"type": ["string", "null"]},
    },
}

DAILY_RECORDS_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["records"],
    "properties": {
        "version": {"type": "integer"},
        "records": {"type": "array", "items": _record_schema()},
        "insights": {"type": "array", "items": _INSIGHT_SCHEMA},
    },
}

INSIGHTS_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "version": {"type": "integer"},
        "insights": {"type": "array", "items": _INSIGHT_SCHEMA},
    },
}

_validator = jsonschema.Draft7Validator(DAILY_RECORDS_SCHEMA)
_insights_validator = jsonschema.Draft7Validator(INSIGHTS_SCHEMA)


def _collect_errors(validator: jsonschema.Draft7Validator, payload: Any) -> list[str]:
    errors = []
    for error in sorted(validator.iter_errors(payload), key=lambda err: list(map(str, err.absolute_path))):
        location = " -> ".join(str(part) for part in error.absolute_path) or "<root>"
        errors.append(f"[{location}] {error.message}")
    return errors


def validate_payload(payload: Any) -> list[str]:
    """Validate a payload against the schema.

    Returns
    -------
    list[str]
        One message per violation, ordered by location
    """
    return _collect_errors(_validator, payload)


def validate_insights_payload(payload: Any) -> list[str]:
    """Validate an insights document; same message format as ``validate_payload``."""
    return _collect_errors(_insights_validator, payload)


def parse_payload(payload: Any, *, source: str) -> list[DailyRecord]:
    """Validate and parse a payload into records.

    Raises
    ------
    StoreError
        If the payload violates the schema or holds an invalid record
    """
    errors = validate_payload(payload)
    if errors:
        raise StoreError(f"Malformed daily records from {source}: {'; '.join(errors[:5])}")

    try:
        return [DailyRecord.from_dict(item) for item in payload["records"]]
    except InvalidRecordError as exc:
        raise StoreError(f"Malformed daily records from {source}: {exc}") from exc


def build_payload(records: Iterable[DailyRecord]) -> dict[str, Any]:
    """Serialize records (sorted by date) into a payload."""
    return {
        "version": PAYLOAD_VERSION,
        "records": [r.to_dict() for r in sorted(records, key=lambda r: r.date)],
    }


def parse_insights(payload: Any, *, source: str) -> list[AIInsight]:
    """Validate and parse the ``insights`` list of a document.

    A document without an ``insights`` key holds no insights.

    Raises
    ------
    StoreError
        If the insights violate the schema or hold an invalid insight
    """
    errors = validate_insights_payload(payload)
    if errors:
        raise StoreError(f"Malformed insights from {source}: {'; '.join(errors[:5])}")

    try:
        return [AIInsight.from_dict(item) for item in payload.get("insights", [])]
    except InvalidInsightError as exc:
        raise StoreError(f"Malformed insights from {source}: {exc}") from exc


def build_insights_payload(insights: Iterable[AIInsight]) -> dict[str, Any]:
    """Serialize insights, in stored order, into a payload."""
    return {
        "version": PAYLOAD_VERSION,
        "insights": [insight.to_dict() for insight in insights],
    }
