from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class ApiErrorPayload:
    code: str
    message: str
    request_id: str
    details: tuple[Any, ...] = ()

    def to_dict(self) -> dict[str, object]:
        payload = asdict(self)
        payload["details"] = list(self.details)
        return payload


class ResourceNotFound(LookupError):
    """The resource, or the tour it belongs to, does not exist."""

    code = "not_found"


class AccessForbidden(PermissionError):
    code = "forbidden"


class ScheduleValidationError(ValueError):
    """Malformed interval or membership input."""

    code = "validation_error"


class ScheduleConflict(Exception):
    """The proposed interval overlaps events already on the tour timeline."""

    code = "schedule_conflict"

    def __init__(self, message: str, conflicts: Sequence[Any] = ()) -> None:
        super().__init__(message)
        self.conflicts = tuple(conflicts)


class StaleVersion(ScheduleConflict):
    code = "stale_version"


class AlreadyExists(Exception):
    code = "already_exists"
