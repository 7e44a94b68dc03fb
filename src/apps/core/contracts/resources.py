from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Protocol

from apps.core.services.membership import MembershipRegistry
from apps.core.services.timeline import Interval

EVENT_TYPES = ["show", "travel", "day_off", "press", "other"]
EVENT_STATUSES = ["confirmed", "pending", "cancelled"]
TOUR_STATUSES = ["planning", "active", "completed", "cancelled"]


class Resource(Protocol):
    """What the authorization resolver needs from any resource kind."""

    @property
    def owner_id(self) -> str:
        ...

    @property
    def parent_tour_id(self) -> str | None:
        ...


@dataclass(frozen=True)
class TourRecord:
    tour_id: str
    owner_id: str
    members: MembershipRegistry = field(default_factory=MembershipRegistry, compare=False)
    name: str = ""
    start_date: date | None = None
    end_date: date | None = None
    status: str = "planning"
    description: str = ""

    @property
    def parent_tour_id(self) -> str | None:
        return self.tour_id


@dataclass(frozen=True)
class EventRecord:
    event_id: str
    tour_id: str
    owner_id: str
    interval: Interval
    title: str = ""
    event_type: str = "other"
    status: str = "pending"
    venue_id: str | None = None
    notes: str = ""
    version: int = 1

    @property
    def parent_tour_id(self) -> str | None:
        return self.tour_id


@dataclass(frozen=True)
class VenueRecord:
    venue_id: str
    owner_id: str
    name: str = ""
    city: str = ""

    @property
    def parent_tour_id(self) -> str | None:
        return None


@dataclass(frozen=True)
class ExpenseRecord:
    expense_id: str
    tour_id: str
    owner_id: str
    amount: Decimal = Decimal("0")
    category: str = ""

    @property
    def parent_tour_id(self) -> str | None:
        return self.tour_id


@dataclass(frozen=True)
class RevenueRecord:
    revenue_id: str
    tour_id: str
    owner_id: str
    amount: Decimal = Decimal("0")
    source: str = ""

    @property
    def parent_tour_id(self) -> str | None:
        return self.tour_id
