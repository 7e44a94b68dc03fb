from __future__ import annotations

# pyright: reportAttributeAccessIssue=false

from apps.core.contracts.resources import EventRecord, TourRecord, VenueRecord
from apps.core.services.membership import MembershipEntry, MembershipRegistry
from apps.core.services.timeline import Interval
from apps.tours.models import Event, Tour, TourMember, Venue


def member_to_entry(record: TourMember) -> MembershipEntry:
    return MembershipEntry(
        user_id=record.user_id,
        tour_role=record.tour_role,
        permissions=frozenset(record.permissions or ()),
    )


def tour_to_record(record: Tour) -> TourRecord:
    members = MembershipRegistry.from_entries(
        member_to_entry(member) for member in record.members.all().order_by("id")
    )
    return TourRecord(
        tour_id=record.tour_id,
        owner_id=record.created_by,
        members=members,
        name=record.name,
        start_date=record.start_date,
        end_date=record.end_date,
        status=record.status,
        description=record.description,
    )


def event_to_record(record: Event) -> EventRecord:
    return EventRecord(
        event_id=record.event_id,
        tour_id=record.tour.tour_id,
        owner_id=record.created_by,
        interval=Interval(record.start_at, record.end_at),
        title=record.title,
        event_type=record.event_type,
        status=record.status,
        venue_id=record.venue.venue_id if record.venue_id else None,
        notes=record.notes,
        version=record.version,
    )


def venue_to_record(record: Venue) -> VenueRecord:
    return VenueRecord(venue_id=record.venue_id, owner_id=record.created_by, name=record.name, city=record.city)


class DjangoTourRepository:
    """Materializes tour and timeline snapshots from the ORM for the engine."""

    def get_tour(self, tour_id: str) -> TourRecord | None:
        try:
            record = Tour.objects.get(tour_id=tour_id)
        except Tour.DoesNotExist:
            return None
        return tour_to_record(record)

    def events_for_tour(self, tour_id: str) -> list[EventRecord]:
        queryset = (
            Event.objects.filter(tour__tour_id=tour_id)
            .select_related("tour", "venue")
            .order_by("id")
        )
        return [event_to_record(record) for record in queryset]

    def get_event(self, event_id: str) -> EventRecord | None:
        try:
            record = Event.objects.select_related("tour", "venue").get(event_id=event_id)
        except Event.DoesNotExist:
            return None
        return event_to_record(record)

    def get_venue(self, venue_id: str) -> VenueRecord | None:
        try:
            record = Venue.objects.get(venue_id=venue_id)
        except Venue.DoesNotExist:
            return None
        return venue_to_record(record)
