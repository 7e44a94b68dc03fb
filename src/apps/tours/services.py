from __future__ import annotations

# pyright: reportAttributeAccessIssue=false

import logging
import uuid
from datetime import datetime
from typing import Any

from django.db import IntegrityError, transaction

from apps.core.contracts.errors import (
    AccessForbidden,
    AlreadyExists,
    ResourceNotFound,
    ScheduleConflict,
    ScheduleValidationError,
    StaleVersion,
)
from apps.core.contracts.identity import Identity
from apps.core.contracts.policy import Capability, PermissionDecision
from apps.core.contracts.resources import EventRecord, Resource, TourRecord, VenueRecord
from apps.core.observability import METRICS
from apps.core.services.authorization import AuthorizationResolver
from apps.core.services.conflicts import ConflictDetector
from apps.core.services.membership import MembershipEntry
from apps.core.services.timeline import EventTimeline, Interval
from apps.core.services.travel import TravelGapCalculator, gap_in_hours
from apps.tours.models import Event, Tour, TourMember, Venue
from apps.tours.repositories import DjangoTourRepository, event_to_record, tour_to_record, venue_to_record

LOGGER = logging.getLogger("tourdesk.tours")

REPOSITORY = DjangoTourRepository()


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def serialize_tour(record: TourRecord) -> dict[str, Any]:
    return {
        "tour_id": record.tour_id,
        "name": record.name,
        "owner_id": record.owner_id,
        "start_date": record.start_date.isoformat() if record.start_date else None,
        "end_date": record.end_date.isoformat() if record.end_date else None,
        "status": record.status,
        "description": record.description,
        "member_count": len(record.members),
    }


def serialize_member(entry: MembershipEntry) -> dict[str, Any]:
    return {
        "user_id": entry.user_id,
        "tour_role": entry.tour_role.value,
        "permissions": entry.sorted_permissions(),
    }


def serialize_event(record: EventRecord) -> dict[str, Any]:
    return {
        "event_id": record.event_id,
        "tour_id": record.tour_id,
        "owner_id": record.owner_id,
        "event_type": record.event_type,
        "title": record.title,
        "start_at": record.interval.start.isoformat(),
        "end_at": record.interval.end.isoformat(),
        "status": record.status,
        "venue_id": record.venue_id,
        "notes": record.notes,
        "version": record.version,
    }


def serialize_venue(record: VenueRecord) -> dict[str, Any]:
    return {
        "venue_id": record.venue_id,
        "name": record.name,
        "city": record.city,
        "owner_id": record.owner_id,
    }


def _authorize(identity: Identity, resource: Resource, capability: Capability) -> PermissionDecision:
    decision = AuthorizationResolver(REPOSITORY).decide(identity, resource, capability)
    METRICS.observe_decision("authorize", "allow" if decision.allowed else "deny")
    LOGGER.info(
        "authorization_decision user=%s capability=%s allowed=%s reason=%s",
        identity.user_id,
        capability.value,
        decision.allowed,
        decision.reason,
    )
    if not decision.allowed:
        raise AccessForbidden(f"Missing {capability.value} access: {decision.reason}")
    return decision


def _detect(tour_id: str, interval: Interval, exclude_event_id: str | None = None) -> None:
    conflicts = ConflictDetector(REPOSITORY).find_conflicts(tour_id, interval, exclude_event_id=exclude_event_id)
    METRICS.observe_decision("conflict_check", "conflict" if conflicts else "clear")
    if conflicts:
        LOGGER.info(
            "schedule_conflict tour_id=%s start=%s end=%s conflicts=%s",
            tour_id,
            interval.start.isoformat(),
            interval.end.isoformat(),
            ",".join(event.event_id for event in conflicts),
        )
        raise ScheduleConflict(
            f"{len(conflicts)} conflicting event(s) on tour {tour_id}",
            conflicts=[serialize_event(event) for event in conflicts],
        )


def load_tour(tour_id: str) -> TourRecord:
    record = REPOSITORY.get_tour(tour_id)
    if record is None:
        raise ResourceNotFound(f"tour {tour_id} not found")
    return record


def load_event(event_id: str) -> EventRecord:
    record = REPOSITORY.get_event(event_id)
    if record is None:
        raise ResourceNotFound(f"event {event_id} not found")
    return record


def _lock_tour(tour_id: str) -> Tour:
    """Lock the tour row so concurrent schedulers on the same tour serialize."""
    row = Tour.objects.select_for_update().filter(tour_id=tour_id).first()
    if row is None:
        raise ResourceNotFound(f"tour {tour_id} not found")
    return row


def _resolve_venue(venue_id: str | None) -> Venue | None:
    if not venue_id:
        return None
    try:
        return Venue.objects.get(venue_id=venue_id)
    except Venue.DoesNotExist as exc:
        raise ResourceNotFound(f"venue {venue_id} not found") from exc


# Tours


def create_tour(identity: Identity, data: dict[str, Any]) -> dict[str, Any]:
    tour_id = data.get("tour_id") or _new_id("tour")
    try:
        with transaction.atomic():
            row = Tour.objects.create(
                tour_id=tour_id,
                name=data["name"],
                start_date=data.get("start_date"),
                end_date=data.get("end_date"),
                description=data.get("description", ""),
                status=data.get("status", "planning"),
                created_by=identity.user_id,
            )
    except IntegrityError as exc:
        raise AlreadyExists(f"tour {tour_id} already exists") from exc
    LOGGER.info("tour_created tour_id=%s owner=%s", tour_id, identity.user_id)
    return serialize_tour(tour_to_record(row))


def get_tour(identity: Identity, tour_id: str) -> dict[str, Any]:
    tour = load_tour(tour_id)
    _authorize(identity, tour, Capability.READ)
    return serialize_tour(tour)


def update_tour(identity: Identity, tour_id: str, data: dict[str, Any]) -> dict[str, Any]:
    with transaction.atomic():
        row = _lock_tour(tour_id)
        _authorize(identity, tour_to_record(row), Capability.WRITE)
        for field_name in ["name", "start_date", "end_date", "description", "status"]:
            if field_name in data:
                setattr(row, field_name, data[field_name])
        if row.start_date and row.end_date and row.end_date < row.start_date:
            raise ScheduleValidationError("tour end_date must be on or after its start_date")
        row.save()
    return serialize_tour(tour_to_record(row))


# Membership


def list_members(identity: Identity, tour_id: str) -> list[dict[str, Any]]:
    tour = load_tour(tour_id)
    _authorize(identity, tour, Capability.READ)
    return [serialize_member(entry) for entry in tour.members]


def upsert_member(identity: Identity, tour_id: str, user_id: str, data: dict[str, Any]) -> tuple[dict[str, Any], bool]:
    with transaction.atomic():
        row = _lock_tour(tour_id)
        _authorize(identity, tour_to_record(row), Capability.ADMIN)
        entry = MembershipEntry(
            user_id=user_id,
            tour_role=data.get("tour_role", ""),
            permissions=frozenset(data.get("permissions") or ()),
        )
        _, created = TourMember.objects.update_or_create(
            tour=row,
            user_id=entry.user_id,
            defaults={
                "tour_role": entry.tour_role.value,
                "permissions": entry.sorted_permissions(),
                "granted_by": identity.user_id,
            },
        )
    LOGGER.info(
        "tour_member_saved tour_id=%s user=%s role=%s permissions=%s created=%s",
        tour_id,
        entry.user_id,
        entry.tour_role.value,
        ",".join(entry.sorted_permissions()),
        created,
    )
    return serialize_member(entry), created


def remove_member(identity: Identity, tour_id: str, user_id: str) -> None:
    with transaction.atomic():
        row = _lock_tour(tour_id)
        tour = tour_to_record(row)
        _authorize(identity, tour, Capability.ADMIN)
        if not tour.members.has(user_id):
            raise ResourceNotFound(f"{user_id} is not a member of tour {tour_id}")
        TourMember.objects.filter(tour=row, user_id=user_id).delete()
    LOGGER.info("tour_member_removed tour_id=%s user=%s", tour_id, user_id)


# Events


def list_events(identity: Identity, tour_id: str) -> list[dict[str, Any]]:
    tour = load_tour(tour_id)
    _authorize(identity, tour, Capability.READ)
    timeline = EventTimeline(tour_id, REPOSITORY.events_for_tour(tour_id))
    return [serialize_event(event) for event in timeline]


def check_conflicts(
    identity: Identity,
    tour_id: str,
    start_at: datetime,
    end_at: datetime,
    exclude_event_id: str | None = None,
) -> list[dict[str, Any]]:
    tour = load_tour(tour_id)
    _authorize(identity, tour, Capability.READ)
    interval = Interval(start_at, end_at)
    conflicts = ConflictDetector(REPOSITORY).find_conflicts(tour_id, interval, exclude_event_id=exclude_event_id)
    return [serialize_event(event) for event in conflicts]


def schedule_event(identity: Identity, tour_id: str, data: dict[str, Any]) -> dict[str, Any]:
    """Authorize, detect conflicts and commit a new event under the tour lock."""
    event_id = data.get("event_id") or _new_id("evt")
    with transaction.atomic():
        row = _lock_tour(tour_id)
        _authorize(identity, tour_to_record(row), Capability.WRITE)
        interval = Interval(data["start_at"], data["end_at"])
        _detect(tour_id, interval)
        venue = _resolve_venue(data.get("venue_id"))
        try:
            # Event ids are global; the tour lock does not cover another tour's insert.
            with transaction.atomic():
                created = Event.objects.create(
                    event_id=event_id,
                    tour=row,
                    event_type=data["event_type"],
                    title=data["title"],
                    start_at=interval.start,
                    end_at=interval.end,
                    venue=venue,
                    status=data.get("status", "pending"),
                    notes=data.get("notes", ""),
                    created_by=identity.user_id,
                )
        except IntegrityError as exc:
            raise AlreadyExists(f"event {event_id} already exists") from exc
    LOGGER.info("event_scheduled tour_id=%s event_id=%s owner=%s", tour_id, event_id, identity.user_id)
    return serialize_event(event_to_record(created))


def get_event(identity: Identity, event_id: str) -> dict[str, Any]:
    event = load_event(event_id)
    _authorize(identity, event, Capability.READ)
    return serialize_event(event)


def update_event(identity: Identity, event_id: str, data: dict[str, Any]) -> dict[str, Any]:
    """Re-validate an edited event against the rest of its tour, excluding itself."""
    with transaction.atomic():
        _lock_tour(load_event(event_id).tour_id)
        row = Event.objects.select_related("tour", "venue").filter(event_id=event_id).first()
        if row is None:
            raise ResourceNotFound(f"event {event_id} not found")
        current = event_to_record(row)
        _authorize(identity, current, Capability.WRITE)

        expected_version = data.get("version")
        if expected_version is not None and expected_version != row.version:
            raise StaleVersion(
                f"event {event_id} is at version {row.version}, not {expected_version}",
                conflicts=[serialize_event(current)],
            )

        interval = Interval(data.get("start_at", row.start_at), data.get("end_at", row.end_at))
        _detect(current.tour_id, interval, exclude_event_id=event_id)

        if "venue_id" in data:
            row.venue = _resolve_venue(data["venue_id"])
        for field_name in ["event_type", "title", "status", "notes"]:
            if field_name in data:
                setattr(row, field_name, data[field_name])
        row.start_at = interval.start
        row.end_at = interval.end
        row.version = row.version + 1
        row.save()
    LOGGER.info("event_updated event_id=%s version=%s by=%s", event_id, row.version, identity.user_id)
    return serialize_event(event_to_record(row))


def delete_event(identity: Identity, event_id: str) -> None:
    with transaction.atomic():
        event = load_event(event_id)
        _authorize(identity, event, Capability.WRITE)
        Event.objects.filter(event_id=event_id).delete()
    LOGGER.info("event_deleted event_id=%s by=%s", event_id, identity.user_id)


def next_event_gap(identity: Identity, event_id: str) -> dict[str, Any]:
    event = load_event(event_id)
    _authorize(identity, event, Capability.READ)
    calculator = TravelGapCalculator(REPOSITORY)
    upcoming = calculator.next_event(event.tour_id, event)
    gap = calculator.next_event_gap(event.tour_id, event)
    return {
        "event_id": event.event_id,
        "next_event": serialize_event(upcoming) if upcoming else None,
        "gap_seconds": int(gap.total_seconds()) if gap is not None else None,
        "gap_hours": gap_in_hours(gap),
    }


# Venues


def create_venue(identity: Identity, data: dict[str, Any]) -> dict[str, Any]:
    venue_id = data.get("venue_id") or _new_id("venue")
    try:
        with transaction.atomic():
            row = Venue.objects.create(
                venue_id=venue_id,
                name=data["name"],
                city=data.get("city", ""),
                created_by=identity.user_id,
            )
    except IntegrityError as exc:
        raise AlreadyExists(f"venue {venue_id} already exists") from exc
    return serialize_venue(venue_to_record(row))


def get_venue(venue_id: str) -> dict[str, Any]:
    record = REPOSITORY.get_venue(venue_id)
    if record is None:
        raise ResourceNotFound(f"venue {venue_id} not found")
    return serialize_venue(record)


def update_venue(identity: Identity, venue_id: str, data: dict[str, Any]) -> dict[str, Any]:
    with transaction.atomic():
        try:
            row = Venue.objects.select_for_update().get(venue_id=venue_id)
        except Venue.DoesNotExist as exc:
            raise ResourceNotFound(f"venue {venue_id} not found") from exc
        _authorize(identity, venue_to_record(row), Capability.WRITE)
        for field_name in ["name", "city"]:
            if field_name in data:
                setattr(row, field_name, data[field_name])
        row.save()
    return serialize_venue(venue_to_record(row))
