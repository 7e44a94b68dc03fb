from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Capability(str, Enum):
    READ = "read"
    WRITE = "write"
    ADMIN = "admin"

    @classmethod
    def parse(cls, raw: str) -> Capability:
        value = str(raw or "").strip().lower()
        for item in cls:
            if item.value == value:
                return item
        raise ValueError(f"capability must be one of: {', '.join(c.value for c in cls)}")


# admin covers write, write covers read.
CAPABILITY_RANK: dict[Capability, int] = {
    Capability.READ: 1,
    Capability.WRITE: 2,
    Capability.ADMIN: 3,
}


class GlobalRole(str, Enum):
    MEMBER = "member"
    ADMIN = "admin"


class TourRole(str, Enum):
    TOUR_MANAGER = "tour_manager"
    BAND_MEMBER = "band_member"
    CREW = "crew"
    AGENT = "agent"


@dataclass(frozen=True)
class PermissionDecision:
    allowed: bool
    capability: Capability
    reason: str
