from __future__ import annotations

import logging
import re
import time
import uuid
from collections.abc import Callable

from django.http import HttpRequest, HttpResponse

from apps.core.contracts.identity import resolve_identity
from apps.core.observability import METRICS

LOGGER = logging.getLogger("tourdesk.api")

# Caller-supplied ids are echoed into headers and log lines.
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def _route_label(request: HttpRequest) -> str:
    """URL pattern of the matched view, so metrics are not keyed by tour or event id."""
    match = getattr(request, "resolver_match", None)
    return getattr(match, "route", "") or "unmatched"


class RequestIdMiddleware:
    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        supplied = str(request.headers.get("X-Request-ID", "")).strip()
        request.request_id = supplied if _REQUEST_ID_RE.fullmatch(supplied) else uuid.uuid4().hex
        response = self.get_response(request)
        response["X-Request-ID"] = request.request_id
        return response


class StructuredRequestLogMiddleware:
    """One key=value line and one metrics sample per request, tagged with the caller."""

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        started = time.perf_counter()
        response = self.get_response(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        route = _route_label(request)
        METRICS.observe_http(route, request.method or "", response.status_code, elapsed_ms)

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        LOGGER.log(
            level,
            "request_completed method=%s route=%s status=%s user=%s elapsed_ms=%.2f request_id=%s",
            request.method,
            route,
            response.status_code,
            resolve_identity(request).user_id,
            elapsed_ms,
            getattr(request, "request_id", ""),
        )
        return response
