"""Role to permission mapping used by route guards."""

from typing import Dict, FrozenSet

USER_CREATE = "user:create"
USER_READ = "user:read"
USER_UPDATE = "user:update"

INVENTORY_CREATE = "inventory:create"
INVENTORY_READ = "inventory:read"
INVENTORY_UPDATE = "inventory:update"
INVENTORY_DELETE = "inventory:delete"

CONSUMPTION_CREATE = "consumption:create"
CONSUMPTION_READ = "consumption:read"

REPORT_GENERATE = "report:generate"
REPORT_EXPORT = "report:export"

LOCATION_CREATE = "location:create"
LOCATION_READ = "location:read"

ALL_PERMISSIONS: FrozenSet[str] = frozenset({
    USER_CREATE, USER_READ, USER_UPDATE,
    INVENTORY_CREATE, INVENTORY_READ, INVENTORY_UPDATE, INVENTORY_DELETE,
    CONSUMPTION_CREATE, CONSUMPTION_READ,
    REPORT_GENERATE, REPORT_EXPORT,
    LOCATION_CREATE, LOCATION_READ,
})

ROLES = ("admin", "manager", "user")

ROLE_PERMISSIONS: Dict[str, FrozenSet[str]] = {
    "admin": ALL_PERMISSIONS,
    "manager": frozenset({
        USER_READ,
        INVENTORY_CREATE, INVENTORY_READ, INVENTORY_UPDATE, INVENTORY_DELETE,
        CONSUMPTION_CREATE, CONSUMPTION_READ,
        REPORT_GENERATE, REPORT_EXPORT,
        LOCATION_CREATE, LOCATION_READ,
    }),
    "user": frozenset({
        INVENTORY_READ,
        CONSUMPTION_CREATE, CONSUMPTION_READ,
        REPORT_GENERATE,
        LOCATION_READ,
    }),
}


def has_permission(role: str, permission: str) -> bool:
    return permission in ROLE_PERMISSIONS.get(role, frozenset())
