# Overview: Permission system package.
# Re-exports the role enum, permission table and lookup helpers.

from .categories import PermissionCategory
from .definitions import (
    PERMISSION_DEFINITIONS,
    CATALOG_PERMISSIONS,
    INVENTORY_PERMISSIONS,
    ORDER_PERMISSIONS,
    USER_PERMISSIONS,
    REPORT_PERMISSIONS,
    FEEDBACK_PERMISSIONS,
    SYSTEM_PERMISSIONS,
)
from .roles import Role, DEFAULT_ROLE_PERMISSIONS, parse_role
from .helpers import get_role_permissions, role_has_permission

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "CATALOG_PERMISSIONS",
    "INVENTORY_PERMISSIONS",
    "ORDER_PERMISSIONS",
    "USER_PERMISSIONS",
    "REPORT_PERMISSIONS",
    "FEEDBACK_PERMISSIONS",
    "SYSTEM_PERMISSIONS",
    "Role",
    "DEFAULT_ROLE_PERMISSIONS",
    "parse_role",
    "get_role_permissions",
    "role_has_permission",
]
