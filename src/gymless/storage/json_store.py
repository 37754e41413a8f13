"""JSON file store for daily records.

The file holds one ``{"version": 1, "records": [...], "insights": [...]}``
document (``insights`` is omitted while there are none). Writes are atomic
(temp file in the same directory + rename), so a crash leaves either the old
or the new file, never a partial one. A failed write removes its temp file.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Iterable

from ..core.insights import AIInsight
from ..core.records import DailyRecord
from ..observability.loguru_config import get_logger
from .base import DailyRecordStore, StoreError
from .schema import build_insights_payload, build_payload, parse_insights, parse_payload

__all__ = ["JsonFileDailyRecordStore"]

logger = get_logger("store")


class JsonFileDailyRecordStore(DailyRecordStore):
    """Daily records and insights persisted in a local JSON file.

    A missing file loads as an empty record set with no insights.

    Example:
        >>> store = JsonFileDailyRecordStore(Path("data/daily_stats.json"))
        >>> records = store.load()
    """

    def __init__(self, path: Path | str, *, create_dirs: bool = True) -> None:
        """Initialize JSON file store.

        Parameters
        ----------
        path
            Path of the JSON document
        create_dirs
            Create parent directories on save
        """
        self.path = Path(path)
        self.create_dirs = create_dirs

    def _read_document(self) -> Any:
        """Raw JSON document, or ``None`` when the file does not exist."""
        if not self.path.exists():
            logger.debug("Data file missing, starting empty", path=str(self.path))
            return None

        try:
            with open(self.path, encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as exc:
            raise StoreError(f"Invalid JSON in {self.path}: {exc}") from exc
        except OSError as exc:
            raise StoreError(f"Failed to read {self.path}: {exc}") from exc

    def _write_document(self, payload: dict[str, Any]) -> None:
        content = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
        tmp_path: Path | None = None

        try:
            if self.create_dirs:
                self.path.parent.mkdir(parents=True, exist_ok=True)

            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.tmp",
                delete=False,
            ) as tmp_file:
                tmp_path = Path(tmp_file.name)
                tmp_file.write(content)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())

            tmp_path.replace(self.path)
        except OSError as exc:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise StoreError(f"Failed to write {self.path}: {exc}") from exc

    def load(self) -> list[DailyRecord]:
        document = self._read_document()
        if document is None:
            return []

        records = parse_payload(document, source=str(self.path))
        logger.debug("Loaded daily records", path=str(self.path), count=len(records))
        return records

    def save(self, records: Iterable[DailyRecord]) -> None:
        payload = build_payload(records)
        insights = self.load_insights()
        if insights:
            payload["insights"] = build_insights_payload(insights)["insights"]

        self._write_document(payload)
        logger.debug("Saved daily records", path=str(self.path), count=len(payload["records"]))

    def load_insights(self) -> list[AIInsight]:
        document = self._read_document()
        if document is None:
            return []

        insights = parse_insights(document, source=str(self.path))
        logger.debug("Loaded insights", path=str(self.path), count=len(insights))
        return insights

    def save_insights(self, insights: Iterable[AIInsight]) -> None:
        payload = build_payload(self.load())
        payload["insights"] = build_insights_payload(insights)["insights"]

        self._write_document(payload)
        logger.debug("Saved insights", path=str(self.path), count=len(payload["insights"]))

    def describe(self) -> str:
        return f"json file {self.path}"
