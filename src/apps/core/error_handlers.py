from __future__ import annotations

import logging
from collections.abc import Callable

from django.http import HttpRequest, HttpResponse

from apps.core.responses import api_error

LOGGER = logging.getLogger("tourdesk.api")


class UnifiedErrorMiddleware:
    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        return self.get_response(request)

    def process_exception(self, request: HttpRequest, exception: Exception) -> HttpResponse:
        request_id = str(getattr(request, "request_id", ""))
        LOGGER.exception("request_failed request_id=%s path=%s", request_id, request.path)
        return api_error(
            request,
            code="internal_error",
            message="An internal error occurred.",
            status=500,
        )
