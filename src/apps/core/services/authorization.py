from __future__ import annotations

from apps.core.contracts.errors import AccessForbidden, ResourceNotFound
from apps.core.contracts.identity import Identity
from apps.core.contracts.policy import Capability, PermissionDecision
from apps.core.contracts.repositories import TourSource
from apps.core.contracts.resources import Resource, TourRecord


class AuthorizationResolver:
    """Decides whether a subject may exercise a capability on a resource.

    Rules are checked in order and the first match wins: global admin, then
    resource owner, then the membership of the tour the resource belongs to.
    Anything else is denied.
    """

    def __init__(self, tours: TourSource) -> None:
        self._tours = tours

    def _parent_tour(self, resource: Resource) -> TourRecord | None:
        tour_id = resource.parent_tour_id
        if tour_id is None:
            return None
        if isinstance(resource, TourRecord):
            return resource
        tour = self._tours.get_tour(tour_id)
        if tour is None:
            raise ResourceNotFound(f"tour {tour_id} not found")
        return tour

    def decide(self, subject: Identity, resource: Resource, capability: Capability) -> PermissionDecision:
        if subject.is_admin:
            return PermissionDecision(True, capability, "granted by global_role=admin")

        if resource.owner_id == subject.user_id:
            return PermissionDecision(True, capability, "granted by ownership")

        tour = self._parent_tour(resource)
        if tour is None:
            return PermissionDecision(False, capability, "not owner and resource is not tour-scoped")

        entry = tour.members.get(subject.user_id)
        if entry is None:
            return PermissionDecision(False, capability, f"not a member of tour {tour.tour_id}")
        if entry.grants(capability):
            return PermissionDecision(True, capability, f"granted by tour membership role={entry.tour_role.value}")
        return PermissionDecision(False, capability, "membership does not grant capability")

    def authorize(self, subject: Identity, resource: Resource, capability: Capability) -> bool:
        return self.decide(subject, resource, capability).allowed

    def require(self, subject: Identity, resource: Resource, capability: Capability) -> PermissionDecision:
        decision = self.decide(subject, resource, capability)
        if not decision.allowed:
            raise AccessForbidden(f"missing {capability.value} access: {decision.reason}")
        return decision
