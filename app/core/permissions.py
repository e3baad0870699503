from enum import Enum
from typing import Iterable, List


class AdminRole(str, Enum):
    SUPER_ADMIN = "super-admin"
    ADMIN = "admin"
    MODERATOR = "moderator"


class AdminPermission(str, Enum):
    VERIFY_SELLERS = "verify-sellers"
    MANAGE_MEMBERSHIP = "manage-membership"
    VIEW_ANALYTICS = "view-analytics"
    MANAGE_PRODUCTS = "manage-products"
    SUPPORT_TICKETS = "support-tickets"


# Defaults granted when an admin is created without an explicit list
ROLE_PERMISSIONS = {
    AdminRole.SUPER_ADMIN: list(AdminPermission),
    AdminRole.ADMIN: [
        AdminPermission.VERIFY_SELLERS,
        AdminPermission.MANAGE_MEMBERSHIP,
        AdminPermission.VIEW_ANALYTICS,
        AdminPermission.SUPPORT_TICKETS,
    ],
    AdminRole.MODERATOR: [
        AdminPermission.VERIFY_SELLERS,
        AdminPermission.SUPPORT_TICKETS,
    ],
}


def has_permission(role: AdminRole, granted: Iterable[str], permission: AdminPermission) -> bool:
    """Super admins pass every check; everyone else needs the permission granted explicitly."""
    if role == AdminRole.SUPER_ADMIN:
        return True
    return permission.value in {AdminPermission(p).value for p in (granted or [])}


def get_role_permissions(role: AdminRole) -> List[AdminPermission]:
    return ROLE_PERMISSIONS.get(role, [])
