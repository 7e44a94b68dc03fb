from __future__ import annotations

from apps.core.contracts.policy import TourRole
from apps.core.contracts.resources import EVENT_STATUSES, EVENT_TYPES, TOUR_STATUSES

EVENT_TYPE_CHOICES = [(value, value.replace("_", " ").title()) for value in EVENT_TYPES]
EVENT_STATUS_CHOICES = [(value, value.title()) for value in EVENT_STATUSES]
TOUR_STATUS_CHOICES = [(value, value.title()) for value in TOUR_STATUSES]
TOUR_ROLE_CHOICES = [(role.value, role.value.replace("_", " ").title()) for role in TourRole]
