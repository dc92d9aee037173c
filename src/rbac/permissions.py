# src/rbac/permissions.py
WILDCARD = "*"


def permission_name(resource: str, action: str) -> str:
    """Build the canonical ``<action>_<resource>`` permission name."""
    return f"{action}_{resource}"


CORE_PERMISSIONS = [
    # Ticket management
    {"resource": "tickets", "action": "read", "description": "List and view tickets"},
    {"resource": "tickets", "action": "create", "description": "Open new tickets"},
    {"resource": "tickets", "action": "update", "description": "Edit tickets"},
    {"resource": "tickets", "action": "delete", "description": "Delete tickets"},
    {"resource": "tickets", "action": "assign", "description": "Assign tickets"},
    # Tenant structure
    {
        "resource": "organizations",
        "action": "read",
        "description": "View organizations",
    },
    {
        "resource": "departments",
        "action": "read",
        "description": "View departments",
    },
    # User management
    {"resource": "users", "action": "read", "description": "View users"},
    # Role management
    {"resource": "roles", "action": "read", "description": "View roles"},
    {"resource": "roles", "action": "create", "description": "Create roles"},
    {"resource": "roles", "action": "update", "description": "Edit roles"},
    {"resource": "roles", "action": "delete", "description": "Delete roles"},
    # Permission management
    {"resource": "permissions", "action": "read", "description": "View permissions"},
    {
        "resource": "permissions",
        "action": "create",
        "description": "Register new permissions",
    },
    {
        "resource": "role_permissions",
        "action": "manage",
        "description": "Grant and remove permissions on roles",
    },
    {
        "resource": "user_roles",
        "action": "manage",
        "description": "Assign and revoke user roles",
    },
]
