"""Service for expanding recurring events into concrete instances inside a
query window."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from eventcal.domain.models import (
    EventInstance,
    EventRecord,
    RecurrencePattern,
    RecurrenceType,
)
from eventcal.services.intervals import add_months, ensure_utc

log = logging.getLogger(__name__)

MAX_OCCURRENCES = 100  # hard ceiling per expansion call


def occurrence_start(
    anchor: datetime, pattern: RecurrencePattern, index: int
) -> datetime:
    """Return the start of the *index*-th occurrence of a series starting at *anchor*.

    Monthly occurrences are measured from the anchor rather than from the
    previous occurrence, so Jan 31 gives Feb 28 (or 29), then Mar 31.
    """
    step = max(pattern.interval_value, 1)
    if pattern.type == RecurrenceType.WEEKLY:
        return anchor + timedelta(days=7 * step * index)
    if pattern.type == RecurrenceType.MONTHLY:
        return add_months(anchor, step * index)
    # daily, and custom which has no rule of its own
    return anchor + timedelta(days=step * index)


def expand_recurrence(
    template: EventRecord,
    pattern: RecurrencePattern,
    window_start: datetime,
    window_end: datetime,
) -> list[EventInstance]:
    """Expand *template* into the instances starting inside the window.

    Both window bounds are inclusive. Expansion stops at the first of: the
    window end, ``max_occurrences`` (never more than ``MAX_OCCURRENCES``), or
    the first occurrence falling after ``recurrence_end_date``. Each instance
    keeps the template's duration and gets the id ``"<template id>_<index>"``.
    A template whose end is not after its start yields nothing.
    """
    window_start = ensure_utc(window_start)
    window_end = ensure_utc(window_end)
    if pattern.interval_value < 1:
        log.debug(
            "Event %s has interval %s, stepping by 1 instead",
            template.id,
            pattern.interval_value,
        )
    if pattern.type == RecurrenceType.CUSTOM:
        log.debug("Event %s uses custom recurrence, stepping daily", template.id)

    duration = template.end_time - template.start_time
    if duration <= timedelta(0):
        log.debug("Event %s has an empty or inverted span", template.id)
        return []

    limit = MAX_OCCURRENCES
    if pattern.max_occurrences is not None:
        limit = min(pattern.max_occurrences, MAX_OCCURRENCES)

    base = template.model_dump(
        exclude={
            "id",
            "start_time",
            "end_time",
            "parent_event_id",
            "recurrence_pattern",
        }
    )
    instances: list[EventInstance] = []
    cursor = template.start_time
    index = 0
    while cursor <= window_end and index < limit:
        if cursor >= window_start:
            instance = EventInstance(
                **base,
                id=f"{template.id}_{index}",
                start_time=cursor,
                end_time=cursor + duration,
                parent_event_id=template.id,
            )
            # carried over as-is, a stored pattern may predate validation
            instance.recurrence_pattern = template.recurrence_pattern
            instances.append(instance)
        index += 1
        cursor = occurrence_start(template.start_time, pattern, index)
        if (
            pattern.recurrence_end_date is not None
            and cursor > pattern.recurrence_end_date
        ):
            break

    log.debug(
        "Expanded event %s into %d instances over %d steps",
        template.id,
        len(instances),
        index,
    )
    return instances


def expand_events(
    events: list[EventRecord],
    window_start: datetime,
    window_end: datetime,
) -> list[EventRecord]:
    """Merge one-off events with the expanded instances of recurring ones.

    The result is ordered by start time.
    """
    merged: list[EventRecord] = []
    for event in events:
        if not event.is_recurring:
            merged.append(event)
            continue
        if event.recurrence_pattern is None:
            log.warning("Recurring event %s has no recurrence pattern", event.id)
            merged.append(event)
            continue
        merged.extend(
            expand_recurrence(
                event, event.recurrence_pattern, window_start, window_end
            )
        )
    return sorted(merged, key=lambda e: e.start_time)
