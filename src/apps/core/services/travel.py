from __future__ import annotations

from datetime import timedelta

from apps.core.contracts.repositories import EventSource
from apps.core.contracts.resources import EventRecord
from apps.core.services.timeline import EventTimeline

SECONDS_PER_HOUR = 3600


class TravelGapCalculator:
    """Slack between an event's end and the start of the tour's next event."""

    def __init__(self, events: EventSource) -> None:
        self._events = events

    def next_event(self, tour_id: str, after_event: EventRecord) -> EventRecord | None:
        timeline = EventTimeline(tour_id, self._events.events_for_tour(tour_id))
        return timeline.first_starting_after(after_event.interval.end)

    def next_event_gap(self, tour_id: str, after_event: EventRecord) -> timedelta | None:
        upcoming = self.next_event(tour_id, after_event)
        if upcoming is None:
            return None
        return upcoming.interval.start - after_event.interval.end


def gap_in_hours(gap: timedelta | None) -> float | None:
    if gap is None:
        return None
    return gap.total_seconds() / SECONDS_PER_HOUR
