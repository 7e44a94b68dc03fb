"""Per-tour membership: who collaborates on a tour and with which permissions."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from apps.core.contracts.errors import ScheduleValidationError
from apps.core.contracts.policy import CAPABILITY_RANK, Capability, TourRole

# An entry created without permissions is read-only. This is the only place
# that default is applied.
DEFAULT_PERMISSIONS: frozenset[Capability] = frozenset({Capability.READ})


def _parse_role(raw: TourRole | str) -> TourRole:
    if isinstance(raw, TourRole):
        return raw
    value = str(raw or "").strip().lower()
    try:
        return TourRole(value)
    except ValueError as exc:
        allowed = ", ".join(role.value for role in TourRole)
        raise ScheduleValidationError(f"tour_role must be one of: {allowed}") from exc


def _parse_permissions(raw: Iterable[Capability | str] | None) -> frozenset[Capability]:
    parsed: set[Capability] = set()
    for item in raw or ():
        if isinstance(item, Capability):
            parsed.add(item)
            continue
        try:
            parsed.add(Capability.parse(item))
        except ValueError as exc:
            raise ScheduleValidationError(str(exc)) from exc
    return frozenset(parsed) or DEFAULT_PERMISSIONS


@dataclass(frozen=True)
class MembershipEntry:
    user_id: str
    tour_role: TourRole
    permissions: frozenset[Capability] = field(default=DEFAULT_PERMISSIONS)

    def __post_init__(self) -> None:
        user_id = str(self.user_id or "").strip()
        if not user_id:
            raise ScheduleValidationError("membership entry requires a user_id")
        object.__setattr__(self, "user_id", user_id)
        object.__setattr__(self, "tour_role", _parse_role(self.tour_role))
        object.__setattr__(self, "permissions", _parse_permissions(self.permissions))

    @property
    def highest_rank(self) -> int:
        return max(CAPABILITY_RANK[permission] for permission in self.permissions)

    def grants(self, capability: Capability) -> bool:
        return self.highest_rank >= CAPABILITY_RANK[capability]

    def sorted_permissions(self) -> list[str]:
        return [item.value for item in sorted(self.permissions, key=CAPABILITY_RANK.__getitem__)]


class MembershipRegistry:
    """Mapping of user id to MembershipEntry, kept in insertion order.

    Adding an entry for a user that is already present replaces it in place;
    membership is a mapping, not a log.
    """

    def __init__(self, entries: Iterable[MembershipEntry] = ()) -> None:
        self._entries: dict[str, MembershipEntry] = {}
        for entry in entries:
            self.add(entry)

    @classmethod
    def from_entries(cls, entries: Iterable[MembershipEntry]) -> MembershipRegistry:
        registry = cls()
        for entry in entries:
            if registry.has(entry.user_id):
                raise ScheduleValidationError(f"duplicate membership entry for {entry.user_id}")
            registry.add(entry)
        return registry

    def add(self, entry: MembershipEntry) -> None:
        self._entries[entry.user_id] = entry

    def remove(self, user_id: str) -> bool:
        return self._entries.pop(str(user_id or "").strip(), None) is not None

    def get(self, user_id: str) -> MembershipEntry | None:
        return self._entries.get(str(user_id or "").strip())

    def has(self, user_id: str) -> bool:
        return str(user_id or "").strip() in self._entries

    def __iter__(self) -> Iterator[MembershipEntry]:
        return iter(tuple(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)
