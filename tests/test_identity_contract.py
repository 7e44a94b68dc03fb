from __future__ import annotations

import pytest
from django.test import RequestFactory

from apps.core.contracts.identity import ANONYMOUS_PRINCIPAL, resolve_identity
from apps.core.contracts.policy import GlobalRole


@pytest.fixture()
def rf() -> RequestFactory:
    return RequestFactory()


@pytest.fixture(autouse=True)
def _clean_identity_env(monkeypatch) -> None:
    for name in [
        "TD_ENV",
        "TD_ADMIN_GROUPS",
        "TD_DEV_IDENTITY_ENABLED",
        "TD_DEV_USER",
        "TD_DEV_EMAIL",
        "TD_DEV_NAME",
        "TD_DEV_GROUPS",
    ]:
        monkeypatch.delenv(name, raising=False)


def test_preferred_username_wins_over_email_and_user(rf) -> None:
    request = rf.get(
        "/",
        HTTP_X_FORWARDED_PREFERRED_USERNAME="tm.jones",
        HTTP_X_FORWARDED_EMAIL="jones@example.com",
        HTTP_X_FORWARDED_USER="jones",
    )
    identity = resolve_identity(request)
    assert identity.user_id == "tm.jones"
    assert identity.auth_source == "forwarded_preferred_username"
    assert identity.is_anonymous is False


def test_email_is_used_when_username_is_missing(rf) -> None:
    identity = resolve_identity(rf.get("/", HTTP_X_FORWARDED_EMAIL="crew@example.com"))
    assert identity.user_id == "crew@example.com"
    assert identity.display_name == "crew"
    assert identity.auth_source == "forwarded_email"


def test_admin_group_maps_to_global_admin(rf) -> None:
    request = rf.get("/", HTTP_X_FORWARDED_USER="ops@example.com", HTTP_X_FORWARDED_GROUPS="crew, Admin")
    identity = resolve_identity(request)
    assert identity.global_role is GlobalRole.ADMIN
    assert identity.is_admin is True
    assert identity.groups == ("crew", "Admin")


def test_custom_admin_groups(rf, monkeypatch) -> None:
    monkeypatch.setenv("TD_ADMIN_GROUPS", "tour-ops")
    request = rf.get("/", HTTP_X_FORWARDED_USER="ops@example.com", HTTP_X_FORWARDED_GROUPS="admin")
    assert resolve_identity(request).is_admin is False

    request = rf.get("/", HTTP_X_FORWARDED_USER="ops@example.com", HTTP_X_FORWARDED_GROUPS="tour-ops")
    assert resolve_identity(request).is_admin is True


def test_missing_headers_resolve_to_anonymous_member(rf) -> None:
    identity = resolve_identity(rf.get("/", HTTP_X_FORWARDED_GROUPS="admin"))
    assert identity.user_id == ANONYMOUS_PRINCIPAL
    assert identity.is_anonymous is True
    assert identity.global_role is GlobalRole.MEMBER
    assert identity.groups == ()


def test_invalid_principal_is_ignored(rf) -> None:
    identity = resolve_identity(rf.get("/", HTTP_X_FORWARDED_USER="a b"))
    assert identity.is_anonymous is True


def test_dev_override_applies_only_when_enabled_in_dev(rf, monkeypatch) -> None:
    monkeypatch.setenv("TD_DEV_USER", "dev.user")
    monkeypatch.setenv("TD_DEV_GROUPS", "admin")
    monkeypatch.setenv("TD_ENV", "dev")

    assert resolve_identity(rf.get("/")).is_anonymous is True

    monkeypatch.setenv("TD_DEV_IDENTITY_ENABLED", "true")
    identity = resolve_identity(rf.get("/"))
    assert identity.user_id == "dev.user"
    assert identity.auth_source == "dev_env_override"
    assert identity.is_admin is True

    monkeypatch.setenv("TD_ENV", "prod")
    assert resolve_identity(rf.get("/")).is_anonymous is True


def test_forwarded_headers_take_precedence_over_dev_override(rf, monkeypatch) -> None:
    monkeypatch.setenv("TD_DEV_IDENTITY_ENABLED", "1")
    monkeypatch.setenv("TD_DEV_USER", "dev.user")
    identity = resolve_identity(rf.get("/", HTTP_X_FORWARDED_USER="real.user"))
    assert identity.user_id == "real.user"
    assert identity.auth_source == "forwarded_user"
