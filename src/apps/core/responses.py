from __future__ import annotations

import json
from typing import Any

from django.http import HttpRequest, JsonResponse

from apps.core.contracts.errors import (
    AccessForbidden,
    AlreadyExists,
    ApiErrorPayload,
    ResourceNotFound,
    ScheduleConflict,
    ScheduleValidationError,
)

ERROR_STATUS: tuple[tuple[type[Exception], int], ...] = (
    (ResourceNotFound, 404),
    (AccessForbidden, 403),
    (ScheduleValidationError, 400),
    (ScheduleConflict, 409),
    (AlreadyExists, 409),
)


def parse_json_body(request: HttpRequest) -> dict[str, Any]:
    try:
        raw = request.body.decode("utf-8") if request.body else ""
    except UnicodeDecodeError as exc:
        raise ScheduleValidationError("request body is not valid UTF-8") from exc
    if not raw.strip():
        return {}
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ScheduleValidationError(f"request body is not valid JSON: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise ScheduleValidationError("JSON body must be an object")
    return payload


def api_error(
    request: HttpRequest,
    *,
    code: str,
    message: str,
    status: int,
    details: tuple[Any, ...] = (),
) -> JsonResponse:
    request_id = str(getattr(request, "request_id", ""))
    payload = ApiErrorPayload(code=code, message=message, request_id=request_id, details=details)
    return JsonResponse(payload.to_dict(), status=status)


def error_from_exception(request: HttpRequest, exc: Exception, details: tuple[Any, ...] = ()) -> JsonResponse:
    for error_type, status in ERROR_STATUS:
        if isinstance(exc, error_type):
            return api_error(
                request,
                code=getattr(exc, "code", "error"),
                message=str(exc),
                status=status,
                details=details,
            )
    raise exc
