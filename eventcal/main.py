"""FastAPI application — entry point for the event calendar service."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import FastAPI, HTTPException, Query

from eventcal.config import settings
from eventcal.domain.models import (
    ConflictCheckResponse,
    EventCreateRequest,
    EventRecord,
    EventUpdateRequest,
    Interval,
)
from eventcal.repos.memory import EventNotFoundError, create_event_repository
from eventcal.services.conflicts import find_conflicts
from eventcal.services.intervals import ensure_utc
from eventcal.services.recurrence import expand_events

logging.basicConfig(level=settings.log_level)
log = logging.getLogger(__name__)

app = FastAPI(title=settings.app_title)

# ── Singletons (created at import time for simplicity) ────────────────
event_repo = create_event_repository(seed=settings.seed_sample_data)


def _reject_conflicts(candidate: Interval, exclude_id: str | None = None) -> None:
    conflicts = find_conflicts(candidate, event_repo.list_all(), exclude_id)
    if not conflicts:
        return
    log.info(
        "Rejecting %s..%s: overlaps %s",
        candidate.start.isoformat(),
        candidate.end.isoformat(),
        [c.id for c in conflicts],
    )
    raise HTTPException(
        status_code=409,
        detail={
            "error": "Event conflicts with existing events",
            "conflicts": [c.model_dump(mode="json") for c in conflicts],
        },
    )


# ── Routes ────────────────────────────────────────────────────────────


@app.get("/healthz")
def health_check() -> dict:
    return {"status": "ok"}


@app.get("/api/events", response_model=None)
def list_events(start_date: datetime, end_date: datetime) -> list[EventRecord]:
    """Return events in the window, with recurring events expanded."""
    window_start = ensure_utc(start_date)
    window_end = ensure_utc(end_date)
    events = event_repo.list_in_range(window_start, window_end)
    return expand_events(events, window_start, window_end)


@app.get("/api/events/search", response_model=list[EventRecord])
def search_events(
    q: str = Query(min_length=1), category: str | None = None
) -> list[EventRecord]:
    return event_repo.search(q, category)


@app.get("/api/events/conflicts", response_model=ConflictCheckResponse)
def check_conflicts(
    start_date: datetime, end_date: datetime, exclude_id: str | None = None
) -> ConflictCheckResponse:
    """Report stored events overlapping the given span without changing anything."""
    candidate = Interval(start=start_date, end=end_date)
    return ConflictCheckResponse(
        conflicts=find_conflicts(candidate, event_repo.list_all(), exclude_id)
    )


@app.get("/api/events/{event_id}", response_model=EventRecord)
def get_event(event_id: str) -> EventRecord:
    """Return a single event by id."""
    event = event_repo.get(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@app.post("/api/events", response_model=EventRecord, status_code=201)
def create_event(payload: EventCreateRequest) -> EventRecord:
    """Store a new event unless it overlaps an existing one."""
    _reject_conflicts(Interval(start=payload.start_time, end=payload.end_time))

    event = EventRecord(
        title=payload.title,
        description=payload.description,
        start_time=payload.start_time,
        end_time=payload.end_time,
        color=payload.color or settings.default_color,
        category=payload.category or settings.default_category,
        is_recurring=payload.is_recurring,
        recurrence_pattern=(
            payload.recurrence_pattern if payload.is_recurring else None
        ),
    )
    event_repo.add(event)
    log.info("Created event %s (%s)", event.id, event.title)
    return event


@app.put("/api/events/{event_id}", response_model=EventRecord)
def update_event(event_id: str, payload: EventUpdateRequest) -> EventRecord:
    """Apply a partial update, re-checking conflicts when the time changes."""
    stored = event_repo.get(event_id)
    if stored is None:
        raise HTTPException(status_code=404, detail="Event not found")

    changes = {
        k: v
        for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None
    }
    start = changes.get("start_time", stored.start_time)
    end = changes.get("end_time", stored.end_time)
    if end <= start:
        raise HTTPException(
            status_code=400, detail="end_time must be after start_time"
        )
    if "start_time" in changes or "end_time" in changes:
        _reject_conflicts(Interval(start=start, end=end), exclude_id=event_id)

    try:
        return event_repo.update(event_id, changes)
    except EventNotFoundError:
        raise HTTPException(status_code=404, detail="Event not found")


@app.delete("/api/events/{event_id}")
def delete_event(event_id: str) -> dict:
    try:
        event = event_repo.delete(event_id)
    except EventNotFoundError:
        raise HTTPException(status_code=404, detail="Event not found")
    log.info("Deleted event %s", event_id)
    return {
        "message": "Event deleted successfully",
        "event": event.model_dump(mode="json"),
    }
