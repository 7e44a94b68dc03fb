from __future__ import annotations

from apps.core.contracts.repositories import EventSource
from apps.core.contracts.resources import EventRecord
from apps.core.services.timeline import EventTimeline, Interval


class ConflictDetector:
    """Finds the events of a tour whose half-open interval overlaps a candidate.

    ``[s1, e1)`` and ``[s2, e2)`` overlap iff ``s1 < e2 and s2 < e1``, so events
    that merely touch, and instants sitting on another event's boundary, do
    not conflict. Results follow timeline order.
    """

    def __init__(self, events: EventSource) -> None:
        self._events = events

    def timeline(self, tour_id: str) -> EventTimeline:
        return EventTimeline(tour_id, self._events.events_for_tour(tour_id))

    def find_conflicts(
        self,
        tour_id: str,
        candidate: Interval,
        exclude_event_id: str | None = None,
    ) -> tuple[EventRecord, ...]:
        return self.timeline(tour_id).overlapping(candidate, exclude_event_id=exclude_event_id)
