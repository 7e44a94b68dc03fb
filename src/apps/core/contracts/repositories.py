from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from apps.core.contracts.resources import EventRecord, TourRecord


class TourSource(Protocol):
    def get_tour(self, tour_id: str) -> TourRecord | None:
        ...


class EventSource(Protocol):
    def events_for_tour(self, tour_id: str) -> Iterable[EventRecord]:
        ...


class InMemoryTourSource:
    """Snapshot-backed sources for callers that already hold the records."""

    def __init__(self, tours: Iterable[TourRecord] = (), events: Iterable[EventRecord] = ()) -> None:
        self._tours = {tour.tour_id: tour for tour in tours}
        self._events = list(events)

    def get_tour(self, tour_id: str) -> TourRecord | None:
        return self._tours.get(tour_id)

    def events_for_tour(self, tour_id: str) -> list[EventRecord]:
        return [event for event in self._events if event.tour_id == tour_id]
