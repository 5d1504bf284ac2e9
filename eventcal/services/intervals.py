"""Date and interval helpers shared by conflict detection and recurrence."""

from __future__ import annotations

from datetime import datetime, timezone

from dateutil.relativedelta import relativedelta


def ensure_utc(value: datetime) -> datetime:
    """Return *value* as an aware UTC datetime.

    Naive datetimes are assumed to already be UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def overlaps(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """Strict overlap test: touching at a boundary is not an overlap.

    A degenerate span (end <= start) never overlaps anything.
    """
    return a_start < a_end and b_start < b_end and a_start < b_end and b_start < a_end


def touches_window(
    start: datetime, end: datetime, window_start: datetime, window_end: datetime
) -> bool:
    """Inclusive test used for window listing: boundaries count."""
    return (
        window_start <= start <= window_end
        or window_start <= end <= window_end
        or (start <= window_start and end >= window_end)
    )


def add_months(anchor: datetime, months: int) -> datetime:
    """Add calendar months, clamping to the last day of a short month."""
    return anchor + relativedelta(months=months)
