"""End-to-end tests for the /api/events routes."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from eventcal.domain.models import EventRecord, RecurrencePattern
from eventcal.main import app, event_repo


@pytest.fixture(autouse=True)
def _clear_repo():
    """Reset the in-memory store before each test."""
    event_repo._store.clear()
    yield
    event_repo._store.clear()


@pytest.fixture()
def client():
    return TestClient(app)


def _iso(day: int, hour: int, minute: int = 0) -> str:
    return datetime(2025, 1, day, hour, minute, tzinfo=timezone.utc).isoformat()


def _stored(title: str, day: int, start_hour: int, end_hour: int, **extra):
    event = EventRecord(
        title=title,
        start_time=datetime(2025, 1, day, start_hour, tzinfo=timezone.utc),
        end_time=datetime(2025, 1, day, end_hour, tzinfo=timezone.utc),
        **extra,
    )
    event_repo.add(event)
    return event


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


def test_create_event(client):
    resp = client.post(
        "/api/events",
        json={"title": "Planning", "start_time": _iso(6, 10), "end_time": _iso(6, 11)},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["title"] == "Planning"
    assert body["color"] == "#007bff"
    assert body["category"] == "Other"
    assert event_repo.get(body["id"]) is not None


def test_create_conflicting_event_returns_409(client):
    existing = _stored("Standup", 6, 10, 11)

    resp = client.post(
        "/api/events",
        json={
            "title": "Clash",
            "start_time": _iso(6, 10, 30),
            "end_time": _iso(6, 11, 30),
        },
    )
    assert resp.status_code == 409
    detail = resp.json()["detail"]
    assert detail["error"] == "Event conflicts with existing events"
    assert [c["id"] for c in detail["conflicts"]] == [existing.id]
    assert len(event_repo.list_all()) == 1


def test_create_touching_event_is_allowed(client):
    _stored("Standup", 6, 10, 11)

    resp = client.post(
        "/api/events",
        json={"title": "Next", "start_time": _iso(6, 11), "end_time": _iso(6, 12)},
    )
    assert resp.status_code == 201


def test_create_rejects_end_before_start(client):
    resp = client.post(
        "/api/events",
        json={"title": "Bad", "start_time": _iso(6, 11), "end_time": _iso(6, 10)},
    )
    assert resp.status_code == 422


def test_create_recurring_requires_pattern(client):
    resp = client.post(
        "/api/events",
        json={
            "title": "Series",
            "start_time": _iso(6, 9),
            "end_time": _iso(6, 10),
            "is_recurring": True,
        },
    )
    assert resp.status_code == 422


def test_create_rejects_unknown_recurrence_type(client):
    resp = client.post(
        "/api/events",
        json={
            "title": "Series",
            "start_time": _iso(6, 9),
            "end_time": _iso(6, 10),
            "is_recurring": True,
            "recurrence_pattern": {"type": "yearly"},
        },
    )
    assert resp.status_code == 422


def test_create_rejects_zero_interval(client):
    resp = client.post(
        "/api/events",
        json={
            "title": "Series",
            "start_time": _iso(6, 9),
            "end_time": _iso(6, 10),
            "is_recurring": True,
            "recurrence_pattern": {"type": "daily", "interval_value": 0},
        },
    )
    assert resp.status_code == 422


# ---------------------------------------------------------------------------
# List / expand
# ---------------------------------------------------------------------------


def test_list_expands_recurring_events(client):
    one_off = _stored("Dentist", 8, 14, 15)
    series = _stored(
        "Gym",
        1,
        7,
        8,
        is_recurring=True,
        recurrence_pattern=RecurrencePattern(type="weekly"),
    )

    resp = client.get(
        "/api/events",
        params={"start_date": _iso(5, 0), "end_date": _iso(15, 23)},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert [e["id"] for e in body] == [f"{series.id}_1", one_off.id, f"{series.id}_2"]
    assert body[0]["parent_event_id"] == series.id
    assert _parse(body[0]["start_time"]) == datetime(
        2025, 1, 8, 7, tzinfo=timezone.utc
    )
    assert "parent_event_id" not in body[1]


def test_list_requires_window(client):
    assert client.get("/api/events").status_code == 422


# ---------------------------------------------------------------------------
# Conflicts endpoint
# ---------------------------------------------------------------------------


def test_check_conflicts_endpoint(client):
    first = _stored("A", 6, 10, 11)
    second = _stored("B", 6, 11, 12)

    resp = client.get(
        "/api/events/conflicts",
        params={"start_date": _iso(6, 10, 30), "end_date": _iso(6, 11, 30)},
    )
    assert resp.status_code == 200
    assert [c["id"] for c in resp.json()["conflicts"]] == [first.id, second.id]

    resp = client.get(
        "/api/events/conflicts",
        params={
            "start_date": _iso(6, 10, 30),
            "end_date": _iso(6, 11, 30),
            "exclude_id": first.id,
        },
    )
    assert [c["id"] for c in resp.json()["conflicts"]] == [second.id]


# ---------------------------------------------------------------------------
# Get / update / delete / search
# ---------------------------------------------------------------------------


def test_get_missing_event_returns_404(client):
    assert client.get("/api/events/missing").status_code == 404


def test_update_does_not_conflict_with_itself(client):
    event = _stored("Review", 6, 10, 12)

    resp = client.put(
        f"/api/events/{event.id}",
        json={"start_time": _iso(6, 11), "end_time": _iso(6, 13)},
    )
    assert resp.status_code == 200
    assert _parse(resp.json()["end_time"]) == datetime(
        2025, 1, 6, 13, tzinfo=timezone.utc
    )


def test_update_onto_another_event_returns_409(client):
    event = _stored("Review", 6, 10, 11)
    other = _stored("Lunch", 6, 12, 13)

    resp = client.put(
        f"/api/events/{event.id}",
        json={"start_time": _iso(6, 12, 30), "end_time": _iso(6, 13, 30)},
    )
    assert resp.status_code == 409
    assert [c["id"] for c in resp.json()["detail"]["conflicts"]] == [other.id]
    assert event_repo.get(event.id).start_time == event.start_time


def test_update_title_only_skips_conflict_check(client):
    event = _stored("Review", 6, 10, 11)

    resp = client.put(f"/api/events/{event.id}", json={"title": "Retro"})
    assert resp.status_code == 200
    assert resp.json()["title"] == "Retro"


def test_update_with_inverted_interval_returns_400(client):
    event = _stored("Review", 6, 10, 11)

    resp = client.put(f"/api/events/{event.id}", json={"end_time": _iso(6, 9)})
    assert resp.status_code == 400


def test_update_missing_event_returns_404(client):
    resp = client.put("/api/events/missing", json={"title": "x"})
    assert resp.status_code == 404


def test_delete_event(client):
    event = _stored("Review", 6, 10, 11)

    resp = client.delete(f"/api/events/{event.id}")
    assert resp.status_code == 200
    assert resp.json()["event"]["id"] == event.id
    assert client.get(f"/api/events/{event.id}").status_code == 404
    assert client.delete(f"/api/events/{event.id}").status_code == 404


def test_search_events(client):
    _stored("Team sync", 7, 9, 10, category="Work")
    _stored("Dinner", 7, 19, 21, description="with the team", category="Social")
    _stored("Gym", 7, 7, 8)

    resp = client.get("/api/events/search", params={"q": "TEAM"})
    assert [e["title"] for e in resp.json()] == ["Team sync", "Dinner"]

    resp = client.get("/api/events/search", params={"q": "team", "category": "Social"})
    assert [e["title"] for e in resp.json()] == ["Dinner"]


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}
