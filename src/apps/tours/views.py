from __future__ import annotations

from typing import Any

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
from rest_framework import serializers

from apps.core.contracts.errors import (
    AccessForbidden,
    AlreadyExists,
    ResourceNotFound,
    ScheduleConflict,
    ScheduleValidationError,
)
from apps.core.contracts.identity import Identity
from apps.core.responses import error_from_exception, parse_json_body
from apps.core.security import require_authenticated, with_identity
from apps.tours import services
from apps.tours.serializers import (
    ConflictCheckSerializer,
    EventInputSerializer,
    EventUpdateSerializer,
    MembershipInputSerializer,
    TourInputSerializer,
    VenueInputSerializer,
    VenueUpdateSerializer,
)

HANDLED_ERRORS = (ResourceNotFound, AccessForbidden, ScheduleValidationError, ScheduleConflict, AlreadyExists)


def _validated(request: HttpRequest, serializer_class: type[serializers.Serializer], *, partial: bool = False) -> dict[str, Any]:
    serializer = serializer_class(data=parse_json_body(request), partial=partial)
    if not serializer.is_valid():
        raise _InvalidBody(serializer.errors)
    return dict(serializer.validated_data)


def _flatten_messages(messages: Any) -> list[str]:
    if isinstance(messages, dict):
        return [text for nested in messages.values() for text in _flatten_messages(nested)]
    if isinstance(messages, (list, tuple)):
        return [text for nested in messages for text in _flatten_messages(nested)]
    return [str(messages)]


class _InvalidBody(ScheduleValidationError):
    def __init__(self, errors: dict[str, Any]) -> None:
        super().__init__("Request body failed validation")
        self.details = tuple(
            {"field": field, "errors": _flatten_messages(messages)} for field, messages in errors.items()
        )


def _failure(request: HttpRequest, exc: Exception) -> JsonResponse:
    if isinstance(exc, ScheduleConflict):
        return error_from_exception(request, exc, details=exc.conflicts)
    if isinstance(exc, _InvalidBody):
        return error_from_exception(request, exc, details=exc.details)
    return error_from_exception(request, exc)


@csrf_exempt
@require_http_methods(["POST"])
@require_authenticated
def tour_collection_endpoint(request: HttpRequest, *, identity: Identity) -> JsonResponse:
    try:
        data = _validated(request, TourInputSerializer)
        payload = services.create_tour(identity, data)
    except HANDLED_ERRORS as exc:
        return _failure(request, exc)
    return JsonResponse(payload, status=201)


@csrf_exempt
@require_http_methods(["GET", "PATCH"])
@with_identity
def tour_detail_endpoint(request: HttpRequest, tour_id: str, *, identity: Identity) -> JsonResponse:
    try:
        if request.method == "GET":
            return JsonResponse(services.get_tour(identity, tour_id))
        data = _validated(request, TourInputSerializer, partial=True)
        return JsonResponse(services.update_tour(identity, tour_id, data))
    except HANDLED_ERRORS as exc:
        return _failure(request, exc)


@require_http_methods(["GET"])
@with_identity
def tour_members_endpoint(request: HttpRequest, tour_id: str, *, identity: Identity) -> JsonResponse:
    try:
        items = services.list_members(identity, tour_id)
    except HANDLED_ERRORS as exc:
        return _failure(request, exc)
    return JsonResponse({"tour_id": tour_id, "items": items})


@csrf_exempt
@require_http_methods(["PUT", "DELETE"])
@with_identity
def tour_member_detail_endpoint(request: HttpRequest, tour_id: str, user_id: str, *, identity: Identity) -> HttpResponse:
    try:
        if request.method == "DELETE":
            services.remove_member(identity, tour_id, user_id)
            return HttpResponse(status=204)
        data = _validated(request, MembershipInputSerializer)
        payload, created = services.upsert_member(identity, tour_id, user_id, data)
    except HANDLED_ERRORS as exc:
        return _failure(request, exc)
    return JsonResponse(payload, status=201 if created else 200)


@csrf_exempt
@require_http_methods(["GET", "POST"])
@with_identity
def tour_events_endpoint(request: HttpRequest, tour_id: str, *, identity: Identity) -> JsonResponse:
    try:
        if request.method == "GET":
            return JsonResponse({"tour_id": tour_id, "items": services.list_events(identity, tour_id)})
        data = _validated(request, EventInputSerializer)
        payload = services.schedule_event(identity, tour_id, data)
    except HANDLED_ERRORS as exc:
        return _failure(request, exc)
    return JsonResponse(payload, status=201)


@csrf_exempt
@require_http_methods(["POST"])
@with_identity
def tour_conflicts_endpoint(request: HttpRequest, tour_id: str, *, identity: Identity) -> JsonResponse:
    try:
        data = _validated(request, ConflictCheckSerializer)
        conflicts = services.check_conflicts(
            identity,
            tour_id,
            data["start_at"],
            data["end_at"],
            exclude_event_id=data.get("exclude_event_id") or None,
        )
    except HANDLED_ERRORS as exc:
        return _failure(request, exc)
    return JsonResponse({"tour_id": tour_id, "schedulable": not conflicts, "conflicts": conflicts})


@csrf_exempt
@require_http_methods(["GET", "PATCH", "DELETE"])
@with_identity
def event_detail_endpoint(request: HttpRequest, event_id: str, *, identity: Identity) -> HttpResponse:
    try:
        if request.method == "GET":
            return JsonResponse(services.get_event(identity, event_id))
        if request.method == "DELETE":
            services.delete_event(identity, event_id)
            return HttpResponse(status=204)
        data = _validated(request, EventUpdateSerializer, partial=True)
        return JsonResponse(services.update_event(identity, event_id, data))
    except HANDLED_ERRORS as exc:
        return _failure(request, exc)


@require_http_methods(["GET"])
@with_identity
def event_next_gap_endpoint(request: HttpRequest, event_id: str, *, identity: Identity) -> JsonResponse:
    try:
        payload = services.next_event_gap(identity, event_id)
    except HANDLED_ERRORS as exc:
        return _failure(request, exc)
    return JsonResponse(payload)


@csrf_exempt
@require_http_methods(["POST"])
@require_authenticated
def venue_collection_endpoint(request: HttpRequest, *, identity: Identity) -> JsonResponse:
    try:
        data = _validated(request, VenueInputSerializer)
        payload = services.create_venue(identity, data)
    except HANDLED_ERRORS as exc:
        return _failure(request, exc)
    return JsonResponse(payload, status=201)


@csrf_exempt
@require_http_methods(["GET", "PATCH"])
@require_authenticated
def venue_detail_endpoint(request: HttpRequest, venue_id: str, *, identity: Identity) -> JsonResponse:
    try:
        if request.method == "GET":
            return JsonResponse(services.get_venue(venue_id))
        data = _validated(request, VenueUpdateSerializer, partial=True)
        return JsonResponse(services.update_venue(identity, venue_id, data))
    except HANDLED_ERRORS as exc:
        return _failure(request, exc)
