"""View decorators that resolve the caller's Identity and pass it explicitly."""

from __future__ import annotations

import functools
from typing import Any, Callable

from django.http import HttpRequest, HttpResponse

from apps.core.contracts.identity import resolve_identity
from apps.core.responses import api_error


def with_identity(view_func: Callable) -> Callable:
    """
    Resolve the Identity and hand it to the view as the ``identity`` keyword.

    Usage:
        @with_identity
        def tour_detail_endpoint(request, tour_id, *, identity):
            ...
    """

    @functools.wraps(view_func)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
        kwargs["identity"] = resolve_identity(request)
        return view_func(request, *args, **kwargs)

    return wrapper


def require_authenticated(view_func: Callable) -> Callable:
    """Like ``with_identity`` but rejects anonymous callers with 403."""

    @functools.wraps(view_func)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
        identity = resolve_identity(request)
        if identity.is_anonymous:
            return api_error(
                request,
                code="authentication_required",
                message="An authenticated identity is required",
                status=403,
            )
        kwargs["identity"] = identity
        return view_func(request, *args, **kwargs)

    return wrapper


def require_global_admin(view_func: Callable) -> Callable:
    @functools.wraps(view_func)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
        identity = resolve_identity(request)
        if not identity.is_admin:
            return api_error(
                request,
                code="forbidden",
                message="Global admin role required",
                status=403,
            )
        kwargs["identity"] = identity
        return view_func(request, *args, **kwargs)

    return wrapper
