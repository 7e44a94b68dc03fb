from __future__ import annotations

import logging

from django.db import DatabaseError, connection
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.http import require_http_methods

from apps.core.config.env import get_runtime_settings, validate_runtime_settings
from apps.core.contracts.identity import Identity
from apps.core.observability import METRICS
from apps.core.security import require_global_admin

LOGGER = logging.getLogger("tourdesk.api")
SERVICE_NAME = "tourdesk"


def _database_ok() -> bool:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError:
        LOGGER.warning("readiness_db_ping_failed", exc_info=True)
        return False
    return True


def _readiness_payload() -> tuple[dict[str, object], int]:
    settings = get_runtime_settings()
    config_issues = validate_runtime_settings(settings)
    db_ok = _database_ok() if not config_issues else False
    status = 200 if db_ok else 503
    return (
        {
            "ok": db_ok,
            "service": SERVICE_NAME,
            "status": "ready" if db_ok else "not_ready",
            "env": settings.env,
            "config_issues": config_issues,
        },
        status,
    )


@require_http_methods(["GET"])
def health_live(request: HttpRequest) -> JsonResponse:
    return JsonResponse({"ok": True, "service": SERVICE_NAME, "status": "live"})


@require_http_methods(["GET"])
def health_ready(request: HttpRequest) -> JsonResponse:
    payload, status = _readiness_payload()
    return JsonResponse(payload, status=status)


@require_http_methods(["GET"])
def health(request: HttpRequest) -> JsonResponse:
    payload, status = _readiness_payload()
    payload["status"] = "healthy" if payload["ok"] else "degraded"
    return JsonResponse(payload, status=status)


@require_http_methods(["GET"])
@require_global_admin
def metrics_payload(request: HttpRequest, *, identity: Identity) -> HttpResponse:
    return HttpResponse(
        METRICS.render_prometheus(),
        content_type="text/plain; version=0.0.4; charset=utf-8",
        status=200,
    )
