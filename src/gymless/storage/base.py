"""Daily record store abstraction.

A store holds two collections: daily records and coaching insights. Each is
loaded and saved as a whole.

Stores are injected into callers instead of being reached through global
state. The aggregation core never touches a store; the analytics pipeline
loads the full record set, aggregates it and hands summaries to presentation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from ..core.insights import AIInsight
from ..core.records import DailyRecord

__all__ = [
    "DailyRecordStore",
    "InMemoryDailyRecordStore",
    "StoreError",
]


class StoreError(Exception):
    """Raised when records cannot be loaded from or saved to a store."""


class DailyRecordStore(ABC):
    """Persistence boundary for daily records and insights.

    ``save`` and ``save_insights`` replace the whole collection; last write
    wins. Saving one collection leaves the other untouched.
    """

    @abstractmethod
    def load(self) -> list[DailyRecord]:
        """Load every stored record.

        Raises
        ------
        StoreError
            If the backend cannot be read or holds malformed data
        """

    @abstractmethod
    def save(self, records: Iterable[DailyRecord]) -> None:
        """Replace the stored records.

        Raises
        ------
        StoreError
            If the backend cannot be written
        """

    @abstractmethod
    def load_insights(self) -> list[AIInsight]:
        """Load every stored insight, in stored order.

        Raises
        ------
        StoreError
            If the backend cannot be read or holds malformed data
        """

    @abstractmethod
    def save_insights(self, insights: Iterable[AIInsight]) -> None:
        """Replace the stored insights.

        Raises
        ------
        StoreError
            If the backend cannot be written
        """

    def describe(self) -> str:
        """Short human-readable description of the backend."""
        return type(self).__name__


class InMemoryDailyRecordStore(DailyRecordStore):
    """Store keeping records in process memory.

    Example:
        >>> store = InMemoryDailyRecordStore()
        >>> store.save([DailyRecord(date=date(2024, 3, 4), calories_consumed=2000)])
        >>> len(store.load())
        1
    """

    def __init__(
        self, records: Iterable[DailyRecord] | None = None, insights: Iterable[AIInsight] | None = None
    ) -> None:
        self._records: list[DailyRecord] = list(records or [])
        self._insights: list[AIInsight] = list(insights or [])

    def load(self) -> list[DailyRecord]:
        return list(self._records)

    def save(self, records: Iterable[DailyRecord]) -> None:
        self._records = list(records)

    def load_insights(self) -> list[AIInsight]:
        return list(self._insights)

    def save_insights(self, insights: Iterable[AIInsight]) -> None:
        self._insights = list(insights)

    def describe(self) -> str:
        return f"memory ({len(self._records)} records, {len(self._insights)} insights)"
