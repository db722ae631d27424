# Overview: Closed role enum and the role -> permission table.

from __future__ import annotations

from ..constants import ValueSet
from .definitions import PERMISSION_DEFINITIONS


class Role(ValueSet):
    ADMIN = "admin"
    EMPLOYEE = "employee"
    OFFICE_BOY = "office_boy"


_ALL_CODES = frozenset(perm[0] for perm in PERMISSION_DEFINITIONS)

DEFAULT_ROLE_PERMISSIONS: dict[Role, frozenset[str]] = {
    # Admin has every permission
    Role.ADMIN: _ALL_CODES,
    Role.OFFICE_BOY: frozenset({
        "VIEW_BEVERAGES",
        "VIEW_INVENTORY",
        "PLACE_ORDER",
        "VIEW_ALL_ORDERS",
        "FULFILL_ORDERS",
        "RATE_BEVERAGES",
        "MANAGE_FAVORITES",
    }),
    Role.EMPLOYEE: frozenset({
        "VIEW_BEVERAGES",
        "PLACE_ORDER",
        "RATE_BEVERAGES",
        "MANAGE_FAVORITES",
    }),
}


def parse_role(value) -> Role | None:
    """Return the Role for a stored string, or None if unknown."""
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        return None
