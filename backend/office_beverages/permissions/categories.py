# Overview: Permission category constants for grouping related permissions.


class PermissionCategory:
    """Permission categories for organization and UI display."""
    CATALOG = "CATALOG"
    INVENTORY = "INVENTORY"
    ORDERS = "ORDERS"
    USERS = "USERS"
    REPORTS = "REPORTS"
    FEEDBACK = "FEEDBACK"
    SYSTEM = "SYSTEM"
