"""
Capability catalog.

Routes declare their requirement with a `PermissionName` member rather
than a bare string literal, so a typo is an AttributeError at import
time instead of a silent permanent 403.  The member's value is the
canonical wire-level name stored in `permissions.name`.

The set is extensible: permissions created at runtime through the API
are plain rows and can still be checked by their string name.
"""

import enum


class PermissionName(str, enum.Enum):
    # User management
    VIEW_USERS = "view_users"
    CREATE_USERS = "create_users"
    EDIT_USERS = "edit_users"
    DELETE_USERS = "delete_users"
    MANAGE_USERS = "manage_users"

    # Role management
    VIEW_ROLES = "view_roles"
    CREATE_ROLES = "create_roles"
    EDIT_ROLES = "edit_roles"
    DELETE_ROLES = "delete_roles"
    ASSIGN_PERMISSIONS = "assign_permissions"
    MANAGE_ROLES = "manage_roles"

    # Permission management
    VIEW_PERMISSIONS = "view_permissions"
    CREATE_PERMISSIONS = "create_permissions"
    EDIT_PERMISSIONS = "edit_permissions"
    DELETE_PERMISSIONS = "delete_permissions"
    MANAGE_PERMISSIONS = "manage_permissions"

    # Misc
    VIEW_DASHBOARD = "view_dashboard"
    MANAGE_ACCOUNT = "manage_account"

    def __str__(self) -> str:
        return self.value


def permission_key(permission: PermissionName | str) -> str:
    """Canonical name for a required permission (enum member or raw name)."""
    if isinstance(permission, PermissionName):
        return permission.value
    return permission
