"""Security module with identity-resolving view decorators."""

from apps.core.security.rbac import require_authenticated, require_global_admin, with_identity

__all__ = ["with_identity", "require_authenticated", "require_global_admin"]
