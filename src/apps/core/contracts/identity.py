from __future__ import annotations

import re
from dataclasses import dataclass

from django.http import HttpRequest

from apps.core.config.env import DEV_ENVS, get_runtime_settings
from apps.core.contracts.policy import GlobalRole

ANONYMOUS_PRINCIPAL = "anonymous@example.local"
_PRINCIPAL_RE = re.compile(r"^[A-Za-z0-9._@\\-]{3,255}$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_GROUP_RE = re.compile(r"^[A-Za-z0-9:_./-]{1,128}$")


@dataclass(frozen=True)
class Identity:
    user_id: str
    global_role: GlobalRole = GlobalRole.MEMBER
    display_name: str = ""
    groups: tuple[str, ...] = ()
    auth_source: str = "explicit"
    is_anonymous: bool = False

    @property
    def is_admin(self) -> bool:
        return self.global_role is GlobalRole.ADMIN


def _is_valid_principal(value: str) -> bool:
    return bool(_PRINCIPAL_RE.fullmatch(value))


def _is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.fullmatch(value))


def _parse_groups(raw: str) -> tuple[str, ...]:
    groups: list[str] = []
    for item in raw.split(","):
        candidate = item.strip()
        if candidate and _GROUP_RE.fullmatch(candidate):
            groups.append(candidate)
    return tuple(groups)


def _derive_display_name(principal: str, supplied_name: str) -> str:
    if supplied_name:
        return supplied_name
    if "@" in principal:
        return principal.split("@", 1)[0]
    return principal


def _global_role(groups: tuple[str, ...], admin_groups: tuple[str, ...]) -> GlobalRole:
    if any(group.lower() in admin_groups for group in groups):
        return GlobalRole.ADMIN
    return GlobalRole.MEMBER


def resolve_identity(request: HttpRequest) -> Identity:
    """Build the request's Identity from headers set by the authenticating proxy.

    Tokens are verified upstream; this only picks the principal and maps
    forwarded groups onto the global role.
    """
    settings = get_runtime_settings()

    preferred = str(request.headers.get("X-Forwarded-Preferred-Username", "")).strip()
    email = str(request.headers.get("X-Forwarded-Email", "")).strip()
    fallback = str(request.headers.get("X-Forwarded-User", "")).strip()
    display_name_header = str(request.headers.get("X-Forwarded-Name", "")).strip()
    groups_raw = str(request.headers.get("X-Forwarded-Groups", "")).strip()

    principal = ANONYMOUS_PRINCIPAL
    auth_source = "anonymous_fallback"

    if preferred and _is_valid_principal(preferred):
        principal = preferred
        auth_source = "forwarded_preferred_username"
    elif email and _is_valid_email(email):
        principal = email
        auth_source = "forwarded_email"
    elif fallback and _is_valid_principal(fallback):
        principal = fallback
        auth_source = "forwarded_user"

    if principal == ANONYMOUS_PRINCIPAL and settings.dev_identity_enabled and settings.env in DEV_ENVS:
        dev_principal = ""
        if settings.dev_user and _is_valid_principal(settings.dev_user):
            dev_principal = settings.dev_user
        elif settings.dev_email and _is_valid_email(settings.dev_email):
            dev_principal = settings.dev_email

        if dev_principal:
            dev_groups = _parse_groups(settings.dev_groups)
            return Identity(
                user_id=dev_principal,
                global_role=_global_role(dev_groups, settings.admin_groups),
                display_name=_derive_display_name(dev_principal, settings.dev_name),
                groups=dev_groups,
                auth_source="dev_env_override",
                is_anonymous=False,
            )

    if principal == ANONYMOUS_PRINCIPAL:
        # Group headers without a principal are not trusted.
        return Identity(
            user_id=ANONYMOUS_PRINCIPAL,
            display_name=_derive_display_name(principal, display_name_header),
            auth_source=auth_source,
            is_anonymous=True,
        )

    groups = _parse_groups(groups_raw)
    return Identity(
        user_id=principal,
        global_role=_global_role(groups, settings.admin_groups),
        display_name=_derive_display_name(principal, display_name_header),
        groups=groups,
        auth_source=auth_source,
        is_anonymous=False,
    )
