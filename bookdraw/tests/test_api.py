"""
Tests for the HTTP API.

Tests:
- Read endpoints
- Reading flow (draw, complete, decide)
- Series controls
- Error responses and status codes
"""

import random

import pytest
from fastapi.testclient import TestClient

from .. import __version__
from ..api.app import create_app
from ..api.service import PickerService
from ..config import Settings
from ..store import InMemoryStateStore, StaleStateError


class AlwaysStaleStore(InMemoryStateStore):
    """Every save after initialization loses the race."""

    def save(self, state, expected_version=None):
        if expected_version:
            raise StaleStateError(expected_version, expected_version + 1)
        return super().save(state, expected_version=expected_version)


@pytest.fixture
def client(catalog):
    service = PickerService(catalog=catalog, rng=random.Random(0))
    return TestClient(create_app(service=service, settings=Settings()))


def complete(client, book_id):
    return client.post(f"/api/v1/books/{book_id}/complete")


class TestSystemEndpoints:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "service": "bookdraw",
            "version": __version__,
        }

    def test_root(self, client):
        data = client.get("/").json()
        assert data["name"] == "Bookdraw API"
        assert data["docs"] == "/api/docs"


class TestReadEndpoints:
    """Tests for state, mode and catalog queries."""

    def test_state(self, client):
        data = client.get("/api/v1/state").json()

        assert data["state_id"] == "global"
        assert data["version"] == 1
        assert data["completed_book_ids"] == []
        assert data["series_state"]["Series A"] == {"status": "unstarted", "next_order": 1}
        assert data["mode"] == {"mode": "random_draw", "series_name": None, "next_order": None}
        assert data["current_pick"] is None

    def test_mode(self, client):
        assert client.get("/api/v1/mode").json()["mode"] == "random_draw"

    def test_books(self, client):
        data = client.get("/api/v1/books").json()

        assert data["count"] == 7
        by_id = {entry["book"]["id"]: entry for entry in data["books"]}
        assert by_id["series_a_1"]["book"]["series"] == {"name": "Series A", "order": 1, "total": 3}
        assert by_id["series_a_1"]["eligibility"]["eligible"] is True
        assert by_id["series_a_2"]["eligibility"] == {
            "eligible": False,
            "reason": "Book 2 - must complete earlier books first",
        }

    def test_book(self, client):
        response = client.get("/api/v1/books/standalone_1")

        assert response.status_code == 200
        data = response.json()
        assert data["book"]["title"] == "Standalone 1"
        assert data["eligibility"]["reason"] == "Standalone - eligible"

    def test_book_not_found(self, client):
        response = client.get("/api/v1/books/nope")

        assert response.status_code == 404
        data = response.json()
        assert data["success"] is False
        assert data["error_code"] == "BOOK_NOT_FOUND"

    def test_series_list(self, client):
        data = client.get("/api/v1/series").json()

        assert data["count"] == 2
        assert data["series"][0] == {
            "series_name": "Series A",
            "completed": 0,
            "total": 3,
            "status": "unstarted",
            "next_order": 1,
        }

    def test_series_detail(self, client):
        response = client.get("/api/v1/series/Series B")

        assert response.status_code == 200
        assert response.json()["total"] == 2

    def test_series_not_found(self, client):
        response = client.get("/api/v1/series/Nope")

        assert response.status_code == 404
        assert response.json()["error_code"] == "SERIES_NOT_FOUND"


class TestReadingFlow:
    """Tests for the draw / complete / decide cycle."""

    def test_draw(self, client):
        response = client.post("/api/v1/draw", json={"actor": "Ana"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        pick = data["pick"]
        assert pick["forced"] is False
        assert pick["eligible_count"] == 4
        assert data["state"]["current_pick_id"] == pick["book"]["id"]
        assert data["state"]["current_pick"]["id"] == pick["book"]["id"]
        assert data["state"]["version"] == 2

    def test_draw_without_body(self, client):
        assert client.post("/api/v1/draw").status_code == 200

    def test_complete_pilot_then_continue(self, client):
        response = complete(client, "series_a_1")

        assert response.status_code == 200
        state = response.json()["state"]
        assert state["pending_decision"] == "Series A"
        assert state["mode"]["mode"] == "decision_required"

        response = client.post("/api/v1/draw")
        assert response.status_code == 409
        assert response.json()["error_code"] == "DECISION_REQUIRED"

        response = client.post(
            "/api/v1/series/Series A/decision", json={"decision": "continue"}
        )
        assert response.status_code == 200
        mode = response.json()["state"]["mode"]
        assert mode == {"mode": "series_lock", "series_name": "Series A", "next_order": 2}

        data = client.post("/api/v1/draw").json()
        assert data["pick"]["forced"] is True
        assert data["pick"]["book"]["id"] == "series_a_2"
        assert data["pick"]["reason"] == 'Continuing "Series A" series (Book 2)'

    def test_complete_twice(self, client):
        complete(client, "standalone_1")

        response = complete(client, "standalone_1")

        assert response.status_code == 409
        assert response.json()["error_code"] == "ALREADY_COMPLETED"

    def test_complete_unknown(self, client):
        response = complete(client, "nope")

        assert response.status_code == 404
        assert response.json()["error_code"] == "BOOK_NOT_FOUND"

    def test_decision_without_pending(self, client):
        response = client.post(
            "/api/v1/series/Series A/decision", json={"decision": "continue"}
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "INVALID_TRANSITION"

    def test_unknown_decision(self, client):
        complete(client, "series_a_1")

        response = client.post("/api/v1/series/Series A/decision", json={"decision": "maybe"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_DECISION"

    def test_decision_body_required(self, client):
        response = client.post("/api/v1/series/Series A/decision")

        assert response.status_code == 400
        data = response.json()
        assert data["error_code"] == "VALIDATION_ERROR"
        assert data["details"]["errors"]

    def test_current_pick(self, client):
        response = client.put("/api/v1/current-pick", json={"book_id": "standalone_2"})

        assert response.status_code == 200
        assert response.json()["state"]["current_pick"]["title"] == "Standalone 2"

        response = client.put("/api/v1/current-pick", json={"book_id": None})
        assert response.json()["state"]["current_pick_id"] is None

    def test_current_pick_unknown(self, client):
        response = client.put("/api/v1/current-pick", json={"book_id": "nope"})
        assert response.status_code == 404

    def test_reset(self, client):
        complete(client, "standalone_1")

        response = client.post("/api/v1/state/reset")

        assert response.status_code == 200
        assert response.json()["changes"] == ["State reset"]
        assert client.get("/api/v1/state").json()["completed_book_ids"] == []


class TestSeriesControls:

    @pytest.fixture
    def locked(self, client):
        complete(client, "series_a_1")
        client.post("/api/v1/series/Series A/decision", json={"decision": "continue"})
        return client

    def test_pause_and_resume(self, locked):
        response = locked.post("/api/v1/series/Series A/pause")

        assert response.status_code == 200
        state = response.json()["state"]
        assert state["series_state"]["Series A"] == {"status": "paused", "next_order": 2}
        assert state["mode"]["mode"] == "random_draw"

        response = locked.post("/api/v1/series/Series A/resume")

        assert response.status_code == 200
        assert response.json()["state"]["mode"]["mode"] == "series_lock"

    def test_pause_unstarted(self, client):
        response = client.post("/api/v1/series/Series B/pause")

        assert response.status_code == 409
        assert response.json()["error_code"] == "INVALID_TRANSITION"

    def test_resume_unknown(self, client):
        response = client.post("/api/v1/series/Nope/resume")

        assert response.status_code == 404
        assert response.json()["error_code"] == "SERIES_NOT_FOUND"


class TestStateConflict:

    def test_conflict_after_retries(self, catalog):
        service = PickerService(catalog=catalog, store=AlwaysStaleStore(), max_retries=2)
        client = TestClient(create_app(service=service, settings=Settings()))

        response = complete(client, "standalone_1")

        assert response.status_code == 409
        data = response.json()
        assert data["error_code"] == "STATE_CONFLICT"
        assert data["details"] == {"expected_version": 1, "actual_version": 2}
