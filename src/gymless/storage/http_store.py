"""HTTP store for daily records.

Talks to the app backend:

- ``GET {base_url}/daily-stats`` returns ``{"records": [...]}``
- ``PUT {base_url}/daily-stats`` replaces the record set with the same shape
- ``GET`` / ``PUT {base_url}/insights`` do the same for ``{"insights": [...]}``
"""

from __future__ import annotations

from typing import Any, Iterable

import httpx

from ..core.insights import AIInsight
from ..core.records import DailyRecord
from ..observability.loguru_config import get_logger
from .base import DailyRecordStore, StoreError
from .schema import build_insights_payload, build_payload, parse_insights, parse_payload

__all__ = ["HttpDailyRecordStore"]

logger = get_logger("store")

DAILY_STATS_PATH = "/daily-stats"
INSIGHTS_PATH = "/insights"


class HttpDailyRecordStore(DailyRecordStore):
    """Daily records and insights served by a REST backend."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        api_token: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize HTTP store.

        Parameters
        ----------
        base_url
            API base URL (e.g., "https://api.example.com/v1")
        timeout
            Request timeout in seconds
        api_token
            Optional bearer token
        transport
            Optional httpx transport (tests pass ``httpx.MockTransport``)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.api_token = api_token
        self.transport = transport

    def _make_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    def _request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.request(method, url, json=payload, headers=self._make_headers())
        except httpx.TimeoutException as exc:
            raise StoreError(f"{method} {url} timed out after {self.timeout}s") from exc
        except httpx.HTTPError as exc:
            raise StoreError(f"{method} {url} failed: {exc}") from exc

        if response.status_code >= 400:
            error_msg = response.text
            try:
                error_msg = response.json().get("error", error_msg)
            except (ValueError, AttributeError):
                pass
            raise StoreError(f"{method} {url} returned {response.status_code}: {error_msg}")

        return response

    def _get_json(self, path: str) -> Any:
        response = self._request("GET", path)
        try:
            return response.json()
        except ValueError as exc:
            raise StoreError(f"Backend returned invalid JSON: {exc}") from exc

    def load(self) -> list[DailyRecord]:
        records = parse_payload(self._get_json(DAILY_STATS_PATH), source=self.base_url)
        logger.debug("Fetched daily records", url=self.base_url, count=len(records))
        return records

    def save(self, records: Iterable[DailyRecord]) -> None:
        payload = build_payload(records)
        self._request("PUT", DAILY_STATS_PATH, payload)
        logger.debug("Pushed daily records", url=self.base_url, count=len(payload["records"]))

    def load_insights(self) -> list[AIInsight]:
        insights = parse_insights(self._get_json(INSIGHTS_PATH), source=self.base_url)
        logger.debug("Fetched insights", url=self.base_url, count=len(insights))
        return insights

    def save_insights(self, insights: Iterable[AIInsight]) -> None:
        payload = build_insights_payload(insights)
        self._request("PUT", INSIGHTS_PATH, payload)
        logger.debug("Pushed insights", url=self.base_url, count=len(payload["insights"]))

    def describe(self) -> str:
        return f"http {self.base_url}"
