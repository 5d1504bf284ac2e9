"""Domain models for the event calendar."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator, model_validator

from eventcal.services.intervals import ensure_utc, overlaps


class RecurrenceType(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class Interval(BaseModel):
    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    def overlaps(self, other: Interval) -> bool:
        return overlaps(self.start, self.end, other.start, other.end)


class RecurrencePattern(BaseModel):
    type: RecurrenceType = RecurrenceType.DAILY
    interval_value: int = Field(default=1, ge=1)
    recurrence_end_date: datetime | None = None
    max_occurrences: int | None = Field(default=None, ge=1)

    @field_validator("recurrence_end_date")
    @classmethod
    def _end_to_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None


class EventRecord(BaseModel):
    """A stored calendar event.

    ``end_time <= start_time`` is not rejected here; such a record simply
    never conflicts and expands to no instances. Request DTOs are where
    invalid spans are refused.
    """

    id: str = Field(default_factory=_new_id)
    title: str
    description: str = ""
    start_time: datetime
    end_time: datetime
    color: str = "#007bff"
    category: str = "Other"
    is_recurring: bool = False
    recurrence_pattern: RecurrencePattern | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("start_time", "end_time", "created_at", "updated_at")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @property
    def interval(self) -> Interval:
        return Interval(start=self.start_time, end=self.end_time)


class EventInstance(EventRecord):
    """One materialized occurrence of a recurring EventRecord. Never stored."""

    parent_event_id: str


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class EventCreateRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    start_time: datetime
    end_time: datetime
    color: str | None = None
    category: str | None = None
    is_recurring: bool = False
    recurrence_pattern: RecurrencePattern | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def _check(self) -> EventCreateRequest:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if self.is_recurring and self.recurrence_pattern is None:
            raise ValueError("recurring events require a recurrence_pattern")
        return self


class EventUpdateRequest(BaseModel):
    """Partial update; omitted fields keep their stored value."""

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    color: str | None = None
    category: str | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def _to_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None


class ConflictCheckResponse(BaseModel):
    conflicts: list[EventRecord] = Field(default_factory=list)
