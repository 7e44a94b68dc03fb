from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class RuntimeSettings:
    env: str
    debug: bool
    secret_key: str
    allowed_hosts: tuple[str, ...]
    db_path: str
    admin_groups: tuple[str, ...]
    dev_identity_enabled: bool
    dev_user: str
    dev_email: str
    dev_name: str
    dev_groups: str


TRUE_VALUES = {"1", "true", "yes", "y", "on"}
DEFAULT_SECRET_KEY = "dev-not-secure-change-me"
DEV_ENVS = {"local", "dev", "development"}


def _env(name: str, default: str = "") -> str:
    return str(os.getenv(name, default)).strip()


def _env_bool(name: str, default: bool) -> bool:
    raw = _env(name, "1" if default else "0").lower()
    return raw in TRUE_VALUES


def _csv(raw: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def get_runtime_settings() -> RuntimeSettings:
    env = _env("TD_ENV", "dev").lower()

    return RuntimeSettings(
        env=env,
        debug=_env_bool("TD_DEBUG", env != "prod"),
        secret_key=_env("TD_SECRET_KEY", DEFAULT_SECRET_KEY),
        allowed_hosts=_csv(_env("TD_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver")),
        db_path=_env("TD_DB_PATH", ""),
        admin_groups=tuple(group.lower() for group in _csv(_env("TD_ADMIN_GROUPS", "admin"))),
        dev_identity_enabled=_env_bool("TD_DEV_IDENTITY_ENABLED", False),
        dev_user=_env("TD_DEV_USER", ""),
        dev_email=_env("TD_DEV_EMAIL", ""),
        dev_name=_env("TD_DEV_NAME", ""),
        dev_groups=_env("TD_DEV_GROUPS", ""),
    )


def validate_runtime_settings(settings: RuntimeSettings) -> list[str]:
    issues: list[str] = []
    if settings.env == "prod" and (not settings.secret_key or settings.secret_key == DEFAULT_SECRET_KEY):
        issues.append("TD_SECRET_KEY must be set to a non-default value in prod")

    if not settings.admin_groups:
        issues.append("TD_ADMIN_GROUPS must name at least one group")

    if settings.env == "prod" and settings.dev_identity_enabled:
        issues.append("TD_DEV_IDENTITY_ENABLED must be off in prod")

    return issues
