from __future__ import annotations

from dataclasses import replace

import pytest

from apps.core.config.env import DEFAULT_SECRET_KEY, get_runtime_settings, validate_runtime_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for name in [
        "TD_ENV",
        "TD_DEBUG",
        "TD_SECRET_KEY",
        "TD_ALLOWED_HOSTS",
        "TD_DB_PATH",
        "TD_ADMIN_GROUPS",
        "TD_DEV_IDENTITY_ENABLED",
    ]:
        monkeypatch.delenv(name, raising=False)


def test_defaults_target_local_development() -> None:
    settings = get_runtime_settings()
    assert settings.env == "dev"
    assert settings.debug is True
    assert settings.secret_key == DEFAULT_SECRET_KEY
    assert "testserver" in settings.allowed_hosts
    assert settings.admin_groups == ("admin",)
    assert settings.dev_identity_enabled is False
    assert validate_runtime_settings(settings) == []


def test_prod_disables_debug_by_default(monkeypatch) -> None:
    monkeypatch.setenv("TD_ENV", "PROD")
    settings = get_runtime_settings()
    assert settings.env == "prod"
    assert settings.debug is False


def test_admin_groups_are_normalized(monkeypatch) -> None:
    monkeypatch.setenv("TD_ADMIN_GROUPS", " Tour-Ops , ,Admins ")
    assert get_runtime_settings().admin_groups == ("tour-ops", "admins")


def test_validation_flags_unsafe_prod_configuration(monkeypatch) -> None:
    monkeypatch.setenv("TD_ENV", "prod")
    monkeypatch.setenv("TD_DEV_IDENTITY_ENABLED", "yes")
    monkeypatch.setenv("TD_ADMIN_GROUPS", "")
    issues = validate_runtime_settings(get_runtime_settings())
    assert issues == [
        "TD_SECRET_KEY must be set to a non-default value in prod",
        "TD_ADMIN_GROUPS must name at least one group",
        "TD_DEV_IDENTITY_ENABLED must be off in prod",
    ]


def test_prod_with_real_secret_is_valid() -> None:
    settings = replace(get_runtime_settings(), env="prod", secret_key="s3cr3t-value", dev_identity_enabled=False)
    assert validate_runtime_settings(settings) == []
