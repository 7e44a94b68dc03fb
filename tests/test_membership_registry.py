from __future__ import annotations

import pytest

from apps.core.contracts.errors import ScheduleValidationError
from apps.core.contracts.policy import Capability, TourRole
from apps.core.services.membership import DEFAULT_PERMISSIONS, MembershipEntry, MembershipRegistry


def test_entry_without_permissions_defaults_to_read_only() -> None:
    entry = MembershipEntry(user_id="crew@example.com", tour_role="crew", permissions=frozenset())
    assert entry.permissions == DEFAULT_PERMISSIONS == frozenset({Capability.READ})
    assert entry.tour_role is TourRole.CREW

    implicit = MembershipEntry(user_id="agent@example.com", tour_role=TourRole.AGENT)
    assert implicit.permissions == frozenset({Capability.READ})


def test_entry_parses_string_permissions_and_strips_user_id() -> None:
    entry = MembershipEntry(user_id="  tm@example.com ", tour_role="tour_manager", permissions=["write", "READ"])
    assert entry.user_id == "tm@example.com"
    assert entry.permissions == frozenset({Capability.READ, Capability.WRITE})
    assert entry.sorted_permissions() == ["read", "write"]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"user_id": "", "tour_role": "crew"},
        {"user_id": "x@example.com", "tour_role": "roadie"},
        {"user_id": "x@example.com", "tour_role": "crew", "permissions": ["delete"]},
    ],
)
def test_entry_rejects_malformed_input(kwargs: dict) -> None:
    with pytest.raises(ScheduleValidationError):
        MembershipEntry(**kwargs)


def test_add_replaces_existing_entry_in_place() -> None:
    registry = MembershipRegistry()
    registry.add(MembershipEntry("a@example.com", "crew"))
    registry.add(MembershipEntry("b@example.com", "agent"))
    registry.add(MembershipEntry("a@example.com", "tour_manager", frozenset({Capability.ADMIN})))

    assert len(registry) == 2
    assert [entry.user_id for entry in registry] == ["a@example.com", "b@example.com"]
    replaced = registry.get("a@example.com")
    assert replaced is not None
    assert replaced.tour_role is TourRole.TOUR_MANAGER
    assert replaced.permissions == frozenset({Capability.ADMIN})


def test_get_has_and_remove() -> None:
    registry = MembershipRegistry([MembershipEntry("a@example.com", "band_member")])
    assert registry.has("a@example.com") is True
    assert registry.get("missing@example.com") is None
    assert registry.has("missing@example.com") is False

    assert registry.remove("a@example.com") is True
    assert registry.remove("a@example.com") is False
    assert len(registry) == 0


def test_from_entries_rejects_duplicate_users() -> None:
    with pytest.raises(ScheduleValidationError):
        MembershipRegistry.from_entries(
            [MembershipEntry("a@example.com", "crew"), MembershipEntry("a@example.com", "agent")]
        )


def test_grants_follows_subsumption_order() -> None:
    admin = MembershipEntry("a@example.com", "tour_manager", frozenset({Capability.ADMIN}))
    writer = MembershipEntry("w@example.com", "crew", frozenset({Capability.WRITE}))
    reader = MembershipEntry("r@example.com", "agent")

    assert all(admin.grants(capability) for capability in Capability)
    assert writer.grants(Capability.READ) and writer.grants(Capability.WRITE)
    assert not writer.grants(Capability.ADMIN)
    assert reader.grants(Capability.READ)
    assert not reader.grants(Capability.WRITE)
