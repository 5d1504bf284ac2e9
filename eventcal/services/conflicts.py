"""Service for detecting scheduling conflicts between events."""

from __future__ import annotations

import logging

from eventcal.domain.models import EventRecord, Interval
from eventcal.services.intervals import overlaps

log = logging.getLogger(__name__)


def find_conflicts(
    candidate: Interval,
    existing_events: list[EventRecord],
    exclude_id: str | None = None,
) -> list[EventRecord]:
    """Return existing events that overlap with the candidate interval.

    Overlap rule: conflict if existing.start_time < candidate.end AND
    existing.end_time > candidate.start. Exact boundary touches (end == start)
    are NOT considered conflicts. The event with ``exclude_id`` (the one being
    edited) is skipped. Input order is preserved.
    """
    conflicts = [
        event
        for event in existing_events
        if event.id != exclude_id
        and overlaps(event.start_time, event.end_time, candidate.start, candidate.end)
    ]
    log.debug(
        "Checked %s..%s against %d events: %d conflicts",
        candidate.start.isoformat(),
        candidate.end.isoformat(),
        len(existing_events),
        len(conflicts),
    )
    return conflicts
