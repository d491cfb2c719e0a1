"""Tests for the FastAPI routes."""

import time

import pytest
from fastapi.testclient import TestClient

from conftest import FakeSource, make_rows

from pivot_report.core.config import settings
from pivot_report.main import create_fastapi_app
from pivot_report.services.orchestrator import session_registry

BASE = "/api/v1/acquisition"


@pytest.fixture
def source():
    return FakeSource(
        pages=[(make_rows(1, 3), "K2"), (make_rows(4, 2, day="2026-09-20"), "")],
        total=5,
        filtered_pages=[(make_rows(10, 2), "")],
    )


@pytest.fixture
def client(source, monkeypatch):
    monkeypatch.setattr(settings, "LOG_FILE", "")
    monkeypatch.setattr(session_registry, "source", source)
    with TestClient(create_fastapi_app()) as test_client:
        yield test_client


def poll(client, entity, predicate, attempts=200):
    for _ in range(attempts):
        body = client.get(f"{BASE}/{entity}").json()
        if predicate(body):
            return body
        time.sleep(0.01)
    raise AssertionError(f"Session for {entity} never satisfied the condition: {body}")


def wait_for_state(client, entity, state):
    return poll(client, entity, lambda body: body["state"] == state)


class TestSystem:
    def test_health(self, client):
        response = client.get("/api/v1/system/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert "pivot_page" in body["remote_operations"]

    def test_root(self, client):
        assert client.get("/").json()["status"] == "running"


class TestAutoLoad:
    def test_start_and_read_records(self, client):
        response = client.post(f"{BASE}/Activity/start")
        assert response.status_code == 202

        body = wait_for_state(client, "Activity", "complete")
        assert body["strategy"] == "auto"
        assert body["total_loaded"] == 5
        assert body["progress"] == 100

        records = client.get(f"{BASE}/Activity/records", params={"limit": 2, "offset": 1}).json()
        assert records["header"] == ["id", "subject", "activity_date_time"]
        assert records["total"] == 5
        assert [r["id"] for r in records["records"]] == [2, 3]

    def test_matching_dates(self, client):
        client.post(f"{BASE}/Activity/start")
        wait_for_state(client, "Activity", "complete")

        response = client.get(
            f"{BASE}/Activity/dates/activity_date_time",
            params={"start": "2026-09-01", "end": "2026-09-30"},
        )
        assert response.json()["values"] == [{"value": "2026-09-20", "label": "2026-09-20"}]

    def test_health_lists_session(self, client):
        client.post(f"{BASE}/Activity/start")
        wait_for_state(client, "Activity", "complete")
        assert client.get("/api/v1/system/health").json()["sessions"] == {"Activity": "complete"}


class TestFilteredLoad:
    @pytest.fixture(autouse=True)
    def threshold(self, monkeypatch, source):
        monkeypatch.setattr(settings, "INITIAL_LOAD_LIMIT", 3)
        source.filtered_total = 2

    def test_awaits_filter(self, client):
        client.post(f"{BASE}/Activity/start")
        body = wait_for_state(client, "Activity", "awaiting_filter_input")

        assert body["strategy"] == "filtered"
        assert body["notices"] == [settings.INITIAL_LOAD_MESSAGE]
        assert client.get(f"{BASE}/Activity/records").status_code == 409

    def test_explicit_range(self, client, source):
        client.post(f"{BASE}/Activity/start")
        wait_for_state(client, "Activity", "awaiting_filter_input")

        response = client.post(
            f"{BASE}/Activity/filter", json={"start": "2026-10-01", "end": "2026-10-31"},
        )
        assert response.status_code == 202

        body = wait_for_state(client, "Activity", "complete")
        assert body["filter_bounds"] == {"start": "2026-10-01", "end": "2026-10-31"}
        assert body["total_loaded"] == 2
        assert source.count_calls[-1] == {"keyvalue_from": "2026-10-01", "keyvalue_to": "2026-10-31"}

    def test_preset(self, client, source):
        client.post(f"{BASE}/Activity/start")
        wait_for_state(client, "Activity", "awaiting_filter_input")

        response = client.post(f"{BASE}/Activity/filter", json={"preset": "this.month"})

        assert response.status_code == 202
        requested = response.json()["requested"]
        assert requested["start"].endswith("-01")
        wait_for_state(client, "Activity", "complete")

    def test_unknown_preset(self, client, source):
        client.post(f"{BASE}/Activity/start")
        wait_for_state(client, "Activity", "awaiting_filter_input")
        calls = len(source.count_calls)

        response = client.post(f"{BASE}/Activity/filter", json={"preset": "this.decade"})

        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "INVALID_FILTER_PRESET"
        assert len(source.count_calls) == calls

    def test_empty_result(self, client, source):
        source.filtered_total = 0
        client.post(f"{BASE}/Activity/start")
        wait_for_state(client, "Activity", "awaiting_filter_input")

        client.post(f"{BASE}/Activity/filter", json={"start": "2030-01-01", "end": "2030-01-31"})
        body = poll(client, "Activity", lambda b: b["empty_message"] is not None)

        assert body["state"] == "awaiting_filter_input"
        assert source.page_calls == []

    def test_load_all(self, client, source):
        client.post(f"{BASE}/Activity/start")
        wait_for_state(client, "Activity", "awaiting_filter_input")

        assert client.post(f"{BASE}/Activity/load-all").status_code == 202
        body = wait_for_state(client, "Activity", "complete")
        assert body["total_loaded"] == 5
        assert source.total_count_calls == 1

    def test_presets(self, client):
        client.post(f"{BASE}/Activity/start")
        wait_for_state(client, "Activity", "awaiting_filter_input")

        presets = client.get(f"{BASE}/Activity/presets").json()["presets"]
        assert presets[0] == {"value": "", "label": "- Any -"}
        assert len(presets) == 4


class TestErrors:
    def test_unknown_entity(self, client):
        assert client.get(f"{BASE}/Nothing").status_code == 404
        assert client.post(f"{BASE}/Nothing/load-all").status_code == 404
        assert client.post(f"{BASE}/Nothing/filter", json={}).status_code == 404

    def test_metadata_failure(self, client, source):
        source.fail_metadata = "header unavailable"
        client.post(f"{BASE}/Activity/start")

        body = wait_for_state(client, "Activity", "failed")

        assert body["last_error"]["kind"] == "METADATA_FETCH_FAILURE"
        assert body["error"]["details"]["operation"] == "pivot_header"
        assert client.post(f"{BASE}/Activity/load-all").status_code == 409
