# Overview: Utility functions for permission lookups.

from .roles import DEFAULT_ROLE_PERMISSIONS, parse_role


def get_role_permissions(role) -> set[str]:
    """Permission codes granted to a role (empty for unknown roles)."""
    parsed = parse_role(role)
    if parsed is None:
        return set()
    return set(DEFAULT_ROLE_PERMISSIONS.get(parsed, ()))


def role_has_permission(role, permission_code: str) -> bool:
    return permission_code in get_role_permissions(role)
