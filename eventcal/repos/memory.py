"""In-memory repository for calendar events."""

from __future__ import annotations

from datetime import datetime, timezone

from eventcal.domain.models import EventRecord
from eventcal.services.intervals import touches_window


class EventNotFoundError(LookupError):
    """Raised when an event id is not in the store."""

    def __init__(self, event_id: str) -> None:
        super().__init__(f"Event not found: {event_id}")
        self.event_id = event_id


class EventRepository:
    """Dict-backed store for EventRecord instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, EventRecord] = {}

    def add(self, event: EventRecord) -> None:
        self._store[event.id] = event

    def get(self, event_id: str) -> EventRecord | None:
        return self._store.get(event_id)

    def list_all(self) -> list[EventRecord]:
        return list(self._store.values())

    def list_in_range(
        self, window_start: datetime, window_end: datetime
    ) -> list[EventRecord]:
        """Return the records that can contribute to a window listing.

        One-off events must touch the window (boundaries inclusive). Recurring
        templates are returned whenever they start on or before the window
        end, since later occurrences may land inside it.
        """
        selected = []
        for event in self._store.values():
            if event.is_recurring:
                if event.start_time <= window_end:
                    selected.append(event)
            elif touches_window(
                event.start_time, event.end_time, window_start, window_end
            ):
                selected.append(event)
        return sorted(selected, key=lambda e: e.start_time)

    def update(self, event_id: str, changes: dict) -> EventRecord:
        """Apply *changes* to a stored event and return the new record."""
        current = self._store.get(event_id)
        if current is None:
            raise EventNotFoundError(event_id)
        updated = current.model_copy(
            update={**changes, "updated_at": datetime.now(timezone.utc)}
        )
        self._store[event_id] = updated
        return updated

    def delete(self, event_id: str) -> EventRecord:
        event = self._store.pop(event_id, None)
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    def search(self, term: str, category: str | None = None) -> list[EventRecord]:
        """Case-insensitive match on title or description, ordered by start."""
        needle = term.lower()
        matches = [
            e
            for e in self._store.values()
            if needle in e.title.lower() or needle in e.description.lower()
        ]
        if category:
            matches = [e for e in matches if e.category == category]
        return sorted(matches, key=lambda e: e.start_time)


# ---------------------------------------------------------------------------
# Seed data – a few sample events for local development
# ---------------------------------------------------------------------------


def _seed_events(repo: EventRepository) -> None:
    repo.add(
        EventRecord(
            title="Team Meeting",
            description="Weekly team standup meeting",
            start_time=datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc),
            end_time=datetime(2024, 1, 15, 11, 0, tzinfo=timezone.utc),
            color="#007bff",
            category="Work",
        )
    )
    repo.add(
        EventRecord(
            title="Doctor Appointment",
            description="Annual checkup",
            start_time=datetime(2024, 1, 16, 14, 30, tzinfo=timezone.utc),
            end_time=datetime(2024, 1, 16, 15, 30, tzinfo=timezone.utc),
            color="#dc3545",
            category="Health",
        )
    )
    repo.add(
        EventRecord(
            title="Birthday Party",
            description="John's birthday celebration",
            start_time=datetime(2024, 1, 20, 18, 0, tzinfo=timezone.utc),
            end_time=datetime(2024, 1, 20, 22, 0, tzinfo=timezone.utc),
            color="#28a745",
            category="Personal",
        )
    )


def create_event_repository(seed: bool = True) -> EventRepository:
    """Return an EventRepository, optionally pre-loaded with sample data."""
    repo = EventRepository()
    if seed:
        _seed_events(repo)
    return repo
