from __future__ import annotations

from datetime import datetime, timedelta

from apps.core.contracts.repositories import InMemoryTourSource
from apps.core.contracts.resources import EventRecord
from apps.core.services.timeline import Interval
from apps.core.services.travel import TravelGapCalculator, gap_in_hours


def _event(event_id: str, start: datetime, end: datetime, tour_id: str = "tour-1") -> EventRecord:
    return EventRecord(event_id=event_id, tour_id=tour_id, owner_id="tm@example.com", interval=Interval(start, end))


def test_gap_to_next_event_with_ties_resolved_by_insertion_order(at) -> None:
    show = _event("show", at("10:00"), at("12:00"))
    travel = _event("travel", at("14:00"), at("18:00"))
    press = _event("press", at("14:00"), at("14:30"))
    calculator = TravelGapCalculator(InMemoryTourSource(events=[show, travel, press]))

    assert calculator.next_event_gap("tour-1", show) == timedelta(hours=2)
    upcoming = calculator.next_event("tour-1", show)
    assert upcoming is not None
    assert upcoming.event_id == "travel"


def test_last_event_has_no_gap(at) -> None:
    show = _event("show", at("10:00"), at("12:00"))
    closing = _event("closing", at("20:00"), at("23:00"))
    calculator = TravelGapCalculator(InMemoryTourSource(events=[show, closing]))

    assert calculator.next_event_gap("tour-1", closing) is None
    assert calculator.next_event("tour-1", closing) is None


def test_next_event_must_start_strictly_after_the_end(at) -> None:
    show = _event("show", at("10:00"), at("12:00"))
    back_to_back = _event("meet-and-greet", at("12:00"), at("12:30"))
    overlapping = _event("interview", at("11:00"), at("11:30"))
    later = _event("bus", at("15:00"), at("16:00"))
    calculator = TravelGapCalculator(InMemoryTourSource(events=[show, back_to_back, overlapping, later]))

    upcoming = calculator.next_event("tour-1", show)
    assert upcoming is not None
    assert upcoming.event_id == "bus"
    assert calculator.next_event_gap("tour-1", show) == timedelta(hours=3)


def test_other_tours_do_not_count(at) -> None:
    show = _event("show", at("10:00"), at("12:00"))
    elsewhere = _event("elsewhere", at("13:00"), at("14:00"), tour_id="tour-2")
    next_day = _event("next-day", at("10:00", day=13), at("11:00", day=13))
    calculator = TravelGapCalculator(InMemoryTourSource(events=[show, elsewhere, next_day]))

    assert calculator.next_event_gap("tour-1", show) == timedelta(hours=22)


def test_gap_in_hours() -> None:
    assert gap_in_hours(timedelta(minutes=90)) == 1.5
    assert gap_in_hours(None) is None
