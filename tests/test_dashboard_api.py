"""Tests for the dashboard web API."""

from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from turnout_vision.core.config import DashboardConfig, Settings
from turnout_vision.web.app import create_app
from tests.conftest import FakeLLMClient, csv_row, to_csv


@pytest.fixture
def llm():
    return FakeLLMClient()


@pytest.fixture
def client(llm):
    app = create_app(settings=Settings(), llm_client=llm)
    return TestClient(app)


@pytest.fixture
def session_id(client):
    return client.post("/api/sessions").json()["session_id"]


@pytest.fixture
def loaded(client, session_id, regional_csv):
    resp = client.post(
        f"/api/sessions/{session_id}/dataset",
        json={"filename": "results.csv", "csv_text": regional_csv},
    )
    assert resp.status_code == 200
    return session_id


class TestHealthAndPage:
    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"
        assert resp.json()["service"] == "turnout-vision"

    def test_llm_health(self, client):
        resp = client.get("/api/health/llm")
        assert resp.status_code == 200
        assert resp.json()["healthy"] is True

    def test_dashboard_page(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert "Turnout Vision" in resp.text


class TestSessions:
    def test_create_session_is_empty(self, client):
        data = client.post("/api/sessions").json()
        assert data["record_count"] == 0
        assert data["catalog"] == {}
        assert data["insight"]["status"] == "idle"

    def test_unknown_session(self, client):
        assert client.get("/api/sessions/missing").status_code == 404
        assert client.get("/api/sessions/missing/histogram").status_code == 404

    def test_delete_session(self, client, session_id):
        assert client.delete(f"/api/sessions/{session_id}").status_code == 200
        assert client.get(f"/api/sessions/{session_id}").status_code == 404


class TestUpload:
    def test_upload_success(self, client, loaded):
        data = client.get(f"/api/sessions/{loaded}").json()
        assert data["filename"] == "results.csv"
        assert data["record_count"] == 10
        assert data["catalog"] == {"region": ["All", "East", "North", "South"]}
        assert data["error"] is None

    def test_non_csv_filename_rejected(self, client, session_id, sample_csv):
        resp = client.post(
            f"/api/sessions/{session_id}/dataset",
            json={"filename": "results.xlsx", "csv_text": sample_csv},
        )
        assert resp.status_code == 415

    def test_too_large(self, llm, sample_csv):
        settings = Settings(dashboard=DashboardConfig(max_upload_bytes=10))
        client = TestClient(create_app(settings=settings, llm_client=llm))
        sid = client.post("/api/sessions").json()["session_id"]
        resp = client.post(
            f"/api/sessions/{sid}/dataset",
            json={"filename": "a.csv", "csv_text": sample_csv},
        )
        assert resp.status_code == 413

    def test_missing_columns(self, client, session_id, sample_rows):
        bad = to_csv(sample_rows, columns=["precinct_id", "votes_cast"])
        resp = client.post(
            f"/api/sessions/{session_id}/dataset",
            json={"filename": "bad.csv", "csv_text": bad},
        )
        assert resp.status_code == 422
        detail = resp.json()["detail"]
        assert detail["kind"] == "schema"
        assert detail["missing_columns"] == ["total_registered_voters", "geojson_boundary"]

    def test_bad_value_reports_precinct(self, client, session_id):
        bad = to_csv([csv_row("P1", 100, 50), csv_row("P7", "lots", 50)])
        resp = client.post(
            f"/api/sessions/{session_id}/dataset",
            json={"filename": "bad.csv", "csv_text": bad},
        )
        assert resp.status_code == 422
        detail = resp.json()["detail"]
        assert detail["kind"] == "value"
        assert detail["precinct_id"] == "P7"
        assert client.get(f"/api/sessions/{session_id}").json()["record_count"] == 0

    def test_reset(self, client, loaded):
        data = client.delete(f"/api/sessions/{loaded}/dataset").json()
        assert data["record_count"] == 0
        assert data["filename"] is None


class TestFiltersAndViews:
    def test_select_filter(self, client, loaded):
        resp = client.put(f"/api/sessions/{loaded}/filters/region", json={"value": "East"})
        assert resp.status_code == 200
        assert resp.json()["filtered_count"] == 4
        assert resp.json()["active_filters"] == {"region": "East"}

        records = client.get(f"/api/sessions/{loaded}/records").json()
        assert [r["precinct_id"] for r in records] == ["P7", "P8", "P9", "P10"]

    def test_invalid_filter(self, client, loaded):
        resp = client.put(f"/api/sessions/{loaded}/filters/region", json={"value": "West"})
        assert resp.status_code == 400

    def test_clear_filters(self, client, loaded):
        client.put(f"/api/sessions/{loaded}/filters/region", json={"value": "East"})
        data = client.delete(f"/api/sessions/{loaded}/filters").json()
        assert data["filtered_count"] == 10

    def test_histogram(self, client, loaded):
        bins = client.get(f"/api/sessions/{loaded}/histogram").json()
        assert len(bins) == 10
        assert all(b["count"] == 1 for b in bins)

    def test_histogram_follows_filters(self, client, loaded):
        client.put(f"/api/sessions/{loaded}/filters/region", json={"value": "North"})
        bins = client.get(f"/api/sessions/{loaded}/histogram").json()
        assert sum(b["count"] for b in bins) == 3

    def test_extremes(self, client, loaded):
        entries = client.get(f"/api/sessions/{loaded}/extremes").json()
        assert [e["precinct_id"] for e in entries[:5]] == ["P10", "P9", "P8", "P7", "P6"]
        assert entries[0]["group"] == "Top 5"
        assert entries[5]["precinct_id"] == "P1"
        assert entries[5]["group"] == "Bottom 5"

    def test_map_layer(self, client, loaded):
        layer = client.get(f"/api/sessions/{loaded}/map").json()
        assert layer["type"] == "FeatureCollection"
        assert len(layer["features"]) == 10
        assert len(layer["legend"]) == 6
        assert layer["features"][0]["id"] == "P1"

    def test_precinct_details(self, client, loaded):
        resp = client.get(f"/api/sessions/{loaded}/precincts/P2")
        assert resp.status_code == 200
        data = resp.json()
        assert data["turnout_label"] == "15.00%"
        assert data["attributes"]["region"] == "North"

    def test_precinct_outside_filter_not_found(self, client, loaded):
        client.put(f"/api/sessions/{loaded}/filters/region", json={"value": "East"})
        assert client.get(f"/api/sessions/{loaded}/precincts/P2").status_code == 404


class TestInsights:
    def test_requires_data(self, client, session_id):
        resp = client.post(f"/api/sessions/{session_id}/insights")
        assert resp.status_code == 409

    def test_success(self, client, loaded, llm, regional_csv):
        resp = client.post(f"/api/sessions/{loaded}/insights")
        assert resp.status_code == 200
        assert resp.json()["status"] == "success"
        assert resp.json()["insights"] == "Precinct P1 shows unusually high turnout."
        assert regional_csv in llm.prompts[0]

        stored = client.get(f"/api/sessions/{loaded}/insights").json()
        assert stored["status"] == "success"

    def test_provider_failure(self, client, loaded, llm):
        llm.error = httpx.ConnectError("connection refused")
        resp = client.post(f"/api/sessions/{loaded}/insights")
        assert resp.status_code == 502

        stored = client.get(f"/api/sessions/{loaded}/insights").json()
        assert stored["status"] == "error"
        assert "connection refused" in stored["error"]

    def test_unexpected_provider_error_does_not_stick_at_loading(self, llm, regional_csv):
        client = TestClient(
            create_app(settings=Settings(), llm_client=llm), raise_server_exceptions=False
        )
        sid = client.post("/api/sessions").json()["session_id"]
        client.post(
            f"/api/sessions/{sid}/dataset",
            json={"filename": "results.csv", "csv_text": regional_csv},
        )
        llm.error = RuntimeError("provider exploded")

        resp = client.post(f"/api/sessions/{sid}/insights")
        assert resp.status_code == 500

        stored = client.get(f"/api/sessions/{sid}/insights").json()
        assert stored["status"] == "error"
        assert "provider exploded" in stored["error"]

    def test_reupload_clears_insight(self, client, loaded, regional_csv):
        client.post(f"/api/sessions/{loaded}/insights")
        client.post(
            f"/api/sessions/{loaded}/dataset",
            json={"filename": "again.csv", "csv_text": regional_csv},
        )
        stored = client.get(f"/api/sessions/{loaded}/insights").json()
        assert stored["status"] == "idle"
        assert stored["insights"] is None
