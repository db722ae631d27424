# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


# -- CATALOG --

CATALOG_PERMISSIONS = [
    (
        "VIEW_BEVERAGES",
        "View Beverages",
        "Browse the beverage menu",
        PermissionCategory.CATALOG,
    ),
    (
        "MANAGE_BEVERAGES",
        "Manage Beverages",
        "Create, edit and delete beverages",
        PermissionCategory.CATALOG,
    ),
]


# -- INVENTORY --

INVENTORY_PERMISSIONS = [
    (
        "VIEW_INVENTORY",
        "View Inventory",
        "View stock levels and inventory transactions",
        PermissionCategory.INVENTORY,
    ),
    (
        "ADJUST_INVENTORY",
        "Adjust Inventory",
        "Record stock in / stock out movements",
        PermissionCategory.INVENTORY,
    ),
]


# -- ORDERS --

ORDER_PERMISSIONS = [
    (
        "PLACE_ORDER",
        "Place Order",
        "Order beverages and view own orders",
        PermissionCategory.ORDERS,
    ),
    (
        "VIEW_ALL_ORDERS",
        "View All Orders",
        "View every employee's orders",
        PermissionCategory.ORDERS,
    ),
    (
        "FULFILL_ORDERS",
        "Fulfill Orders",
        "Fulfill or cancel any pending order",
        PermissionCategory.ORDERS,
    ),
]


# -- USERS --

USER_PERMISSIONS = [
    (
        "MANAGE_USERS",
        "Manage Users",
        "Create, edit, deactivate and delete users",
        PermissionCategory.USERS,
    ),
]


# -- REPORTS --

REPORT_PERMISSIONS = [
    (
        "VIEW_REPORTS",
        "View Reports",
        "View dashboards and analytics",
        PermissionCategory.REPORTS,
    ),
    (
        "EXPORT_REPORTS",
        "Export Reports",
        "Download PDF and spreadsheet reports",
        PermissionCategory.REPORTS,
    ),
]


# -- FEEDBACK --

FEEDBACK_PERMISSIONS = [
    (
        "RATE_BEVERAGES",
        "Rate Beverages",
        "Submit and manage own beverage ratings",
        PermissionCategory.FEEDBACK,
    ),
    (
        "MANAGE_FAVORITES",
        "Manage Favorites",
        "Maintain a personal favorites list",
        PermissionCategory.FEEDBACK,
    ),
]


# -- SYSTEM --

SYSTEM_PERMISSIONS = [
    (
        "VIEW_NOTIFICATION_STATUS",
        "View Notification Status",
        "See connected notification subscribers",
        PermissionCategory.SYSTEM,
    ),
]


PERMISSION_DEFINITIONS = (
    CATALOG_PERMISSIONS
    + INVENTORY_PERMISSIONS
    + ORDER_PERMISSIONS
    + USER_PERMISSIONS
    + REPORT_PERMISSIONS
    + FEEDBACK_PERMISSIONS
    + SYSTEM_PERMISSIONS
)
