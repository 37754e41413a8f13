"""Tests for daily record stores (memory, JSON file, HTTP)."""

import json
from datetime import date
from pathlib import Path

import httpx
import pytest

from gymless.config.settings import ConfigError, Settings
from gymless.core.insights import AIInsight
from gymless.core.records import DailyRecord
from gymless.storage import (
    HttpDailyRecordStore,
    InMemoryDailyRecordStore,
    JsonFileDailyRecordStore,
    StoreError,
    create_store,
)
from gymless.storage.schema import PAYLOAD_VERSION, build_insights_payload, build_payload, validate_payload


def make_records() -> list[DailyRecord]:
    return [
        DailyRecord(date=date(2024, 3, 5), calories_consumed=1950, protein_grams=85, meals_tracked=2, steps=7200),
        DailyRecord(
            date=date(2024, 3, 4),
            calories_consumed=2100,
            workout_duration_minutes=45,
            workout_type="Strength Training",
        ),
    ]


def make_insights() -> list[AIInsight]:
    return [
        AIInsight(
            id="b1c7",
            date=date(2024, 3, 6),
            type="general",
            title="Hydration Reminder",
            description="Your water intake could be improved.",
            priority="low",
            related_metric="water_intake",
        ),
        AIInsight(
            id="a9f2",
            date=date(2024, 3, 6),
            type="workout",
            title="Workout Consistency",
            description="Three workouts this week.",
            priority="high",
        ),
    ]


class TestInMemoryStore:
    def test_starts_empty(self):
        assert InMemoryDailyRecordStore().load() == []

    def test_save_replaces_records(self):
        store = InMemoryDailyRecordStore(make_records())

        store.save(make_records()[:1])

        assert store.load() == make_records()[:1]

    def test_insights_kept_apart_from_records(self):
        store = InMemoryDailyRecordStore(make_records())

        store.save_insights(make_insights())

        assert store.load_insights() == make_insights()
        assert len(store.load()) == 2

    def test_load_returns_copy(self):
        store = InMemoryDailyRecordStore(make_records())

        store.load().clear()

        assert len(store.load()) == 2


class TestPayloadSchema:
    def test_build_payload_sorted(self):
        payload = build_payload(make_records())

        assert payload["version"] == PAYLOAD_VERSION
        assert [r["date"] for r in payload["records"]] == ["2024-03-04", "2024-03-05"]
        assert validate_payload(payload) == []

    def test_missing_records_key(self):
        errors = validate_payload({"version": 1})

        assert len(errors) == 1
        assert "'records' is a required property" in errors[0]

    def test_violation_location_reported(self):
        payload = build_payload(make_records())
        payload["records"][1]["fatGrams"] = -3

        errors = validate_payload(payload)

        assert errors[0].startswith("[records -> 1 -> fatGrams]")


class TestJsonFileStore:
    def test_missing_file_is_empty(self, tmp_path):
        assert JsonFileDailyRecordStore(tmp_path / "missing.json").load() == []

    def test_save_and_load(self, tmp_path):
        store = JsonFileDailyRecordStore(tmp_path / "data" / "daily_stats.json")

        store.save(make_records())

        assert store.load() == sorted(make_records(), key=lambda r: r.date)

    def test_file_layout(self, tmp_path):
        path = tmp_path / "daily_stats.json"

        JsonFileDailyRecordStore(path).save(make_records())

        payload = json.loads(path.read_text())
        assert payload["version"] == 1
        assert payload["records"][0]["date"] == "2024-03-04"
        assert payload["records"][0]["workoutType"] == "Strength Training"
        assert "steps" not in payload["records"][0]
        assert payload["records"][1]["steps"] == 7200

    def test_no_temp_files_left(self, tmp_path):
        store = JsonFileDailyRecordStore(tmp_path / "daily_stats.json")

        store.save(make_records())
        store.save(make_records()[:1])

        assert [p.name for p in tmp_path.iterdir()] == ["daily_stats.json"]

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "daily_stats.json"
        path.write_text("{not json")

        with pytest.raises(StoreError, match="Invalid JSON"):
            JsonFileDailyRecordStore(path).load()

    def test_schema_violation(self, tmp_path):
        path = tmp_path / "daily_stats.json"
        path.write_text(json.dumps({"records": [{"date": "2024-03-04", "caloriesConsumed": 2000}]}))

        with pytest.raises(StoreError, match="Malformed daily records"):
            JsonFileDailyRecordStore(path).load()

    def test_invalid_record_wrapped(self, tmp_path):
        path = tmp_path / "daily_stats.json"
        payload = build_payload(make_records())
        payload["records"][0]["date"] = "2024-02-30"
        path.write_text(json.dumps(payload))

        with pytest.raises(StoreError, match="field 'date'"):
            JsonFileDailyRecordStore(path).load()

    def test_failed_write_removes_temp_file(self, tmp_path, monkeypatch):
        path = tmp_path / "daily_stats.json"
        store = JsonFileDailyRecordStore(path)
        store.save(make_records())
        before = path.read_text()

        def failing_fsync(fd):
            raise OSError(28, "No space left on device")

        monkeypatch.setattr("gymless.storage.json_store.os.fsync", failing_fsync)

        with pytest.raises(StoreError, match="No space left"):
            store.save(make_records()[:1])

        assert [p.name for p in tmp_path.iterdir()] == ["daily_stats.json"]
        assert path.read_text() == before

    def test_insights_round_trip(self, tmp_path):
        store = JsonFileDailyRecordStore(tmp_path / "daily_stats.json")

        store.save_insights(make_insights())

        assert store.load_insights() == make_insights()
        assert store.load() == []

    def test_saving_records_keeps_insights(self, tmp_path):
        path = tmp_path / "daily_stats.json"
        store = JsonFileDailyRecordStore(path)
        store.save_insights(make_insights())

        store.save(make_records())

        payload = json.loads(path.read_text())
        assert [i["id"] for i in payload["insights"]] == ["b1c7", "a9f2"]
        assert payload["insights"][0]["relatedMetric"] == "water_intake"
        assert "recommendation" not in payload["insights"][0]
        assert store.load_insights() == make_insights()

    def test_file_without_insights_key(self, tmp_path):
        path = tmp_path / "daily_stats.json"
        path.write_text(json.dumps(build_payload(make_records())))

        assert JsonFileDailyRecordStore(path).load_insights() == []

    def test_invalid_insight_priority(self, tmp_path):
        path = tmp_path / "daily_stats.json"
        payload = build_payload([])
        payload["insights"] = [{**make_insights()[0].to_dict(), "priority": "urgent"}]
        path.write_text(json.dumps(payload))

        with pytest.raises(StoreError, match="Malformed insights"):
            JsonFileDailyRecordStore(path).load_insights()

    def test_unwritable_directory(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        store = JsonFileDailyRecordStore(blocker / "daily_stats.json")

        with pytest.raises(StoreError, match="Failed to write"):
            store.save(make_records())


class TestHttpStore:
    def _store(self, handler, **kwargs) -> HttpDailyRecordStore:
        return HttpDailyRecordStore("https://api.example.com/v1/", transport=httpx.MockTransport(handler), **kwargs)

    def test_load(self):
        payload = build_payload(make_records())

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "GET"
            assert request.url == "https://api.example.com/v1/daily-stats"
            return httpx.Response(200, json=payload)

        records = self._store(handler).load()

        assert [r.date for r in records] == [date(2024, 3, 4), date(2024, 3, 5)]

    def test_save_puts_payload(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["method"] = request.method
            captured["body"] = json.loads(request.content)
            captured["auth"] = request.headers.get("Authorization")
            return httpx.Response(204)

        self._store(handler, api_token="secret").save(make_records())

        assert captured["method"] == "PUT"
        assert captured["body"] == build_payload(make_records())
        assert captured["auth"] == "Bearer secret"

    def test_no_auth_header_without_token(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert "Authorization" not in request.headers
            return httpx.Response(200, json={"records": []})

        assert self._store(handler).load() == []

    def test_error_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, json={"error": "maintenance"})

        with pytest.raises(StoreError, match="503: maintenance"):
            self._store(handler).load()

    def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(StoreError, match="failed"):
            self._store(handler).load()

    def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        with pytest.raises(StoreError, match="timed out"):
            self._store(handler, timeout=2.5).save(make_records())

    def test_invalid_json_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>")

        with pytest.raises(StoreError, match="invalid JSON"):
            self._store(handler).load()

    def test_malformed_payload(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"items": []})

        with pytest.raises(StoreError, match="Malformed daily records"):
            self._store(handler).load()


    def test_load_insights(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "GET"
            assert request.url == "https://api.example.com/v1/insights"
            return httpx.Response(200, json=build_insights_payload(make_insights()))

        assert self._store(handler).load_insights() == make_insights()

    def test_save_insights(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["body"] = json.loads(request.content)
            return httpx.Response(204)

        self._store(handler).save_insights(make_insights())

        assert captured["url"] == "https://api.example.com/v1/insights"
        assert captured["body"] == build_insights_payload(make_insights())


class TestCreateStore:
    def test_json_backend(self, tmp_path):
        store = create_store(Settings(data_path=tmp_path / "stats.json"))

        assert isinstance(store, JsonFileDailyRecordStore)
        assert store.path == Path(tmp_path / "stats.json")

    def test_memory_backend(self):
        assert isinstance(create_store(Settings(store_backend="memory")), InMemoryDailyRecordStore)

    def test_http_backend(self):
        settings = Settings(store_backend="http", api_base_url="https://api.example.com/v1", api_timeout=3)

        store = create_store(settings)

        assert isinstance(store, HttpDailyRecordStore)
        assert store.base_url == "https://api.example.com/v1"
        assert store.timeout == 3

    def test_http_backend_without_url(self):
        settings = Settings(store_backend="memory")
        settings.store_backend = "http"

        with pytest.raises(ConfigError, match="GYMLESS_API_BASE_URL"):
            create_store(settings)
