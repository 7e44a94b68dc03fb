from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from apps.core.contracts.errors import ScheduleValidationError

if TYPE_CHECKING:
    from apps.core.contracts.resources import EventRecord


def _is_aware(value: datetime) -> bool:
    return value.tzinfo is not None and value.utcoffset() is not None


@dataclass(frozen=True)
class Interval:
    """Half-open time window ``[start, end)``. Zero-length instants are allowed."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if not isinstance(self.start, datetime) or not isinstance(self.end, datetime):
            raise ScheduleValidationError("interval bounds must be datetimes")
        if _is_aware(self.start) != _is_aware(self.end):
            raise ScheduleValidationError("interval bounds must both be timezone-aware or both naive")
        if self.end < self.start:
            raise ScheduleValidationError("interval end must be at or after its start")

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: Interval) -> bool:
        return self.start < other.end and other.start < self.end


class EventTimeline:
    """Events of a single tour ordered by start, then end, then insertion order.

    Built per decision from whatever the persistence layer returned; events
    belonging to another tour are dropped so they are never compared.
    """

    def __init__(self, tour_id: str, events: Iterable[EventRecord]) -> None:
        self.tour_id = tour_id
        self._inserted: tuple[EventRecord, ...] = tuple(event for event in events if event.tour_id == tour_id)
        # sorted() is stable, so equal keys keep insertion order.
        self._events: tuple[EventRecord, ...] = tuple(
            sorted(self._inserted, key=lambda event: (event.interval.start, event.interval.end))
        )

    def __iter__(self) -> Iterator[EventRecord]:
        return iter(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def overlapping(self, candidate: Interval, exclude_event_id: str | None = None) -> tuple[EventRecord, ...]:
        return tuple(
            event
            for event in self._events
            if event.event_id != exclude_event_id and event.interval.overlaps(candidate)
        )

    def first_starting_after(self, moment: datetime) -> EventRecord | None:
        """Earliest event starting strictly after ``moment``; equal starts go to the first inserted."""
        found: EventRecord | None = None
        for event in self._inserted:
            if event.interval.start <= moment:
                continue
            if found is None or event.interval.start < found.interval.start:
                found = event
        return found
