# src/rbac/roles.py
from .permissions import CORE_PERMISSIONS, WILDCARD, permission_name

ALL_CORE_PERMISSIONS = [
    permission_name(p["resource"], p["action"]) for p in CORE_PERMISSIONS
]

SUPER_ADMIN_ROLE = "Super Admin"

# Default roles to seed on first run.
# Super Admin carries the wildcard and is the only immutable system role.
DEFAULT_ROLES = [
    {
        "name": SUPER_ADMIN_ROLE,
        "is_system": True,
        "description": "Grants every permission across all organizations.",
        "permissions": [WILDCARD],
    },
    {
        "name": "Administrator",
        "is_system": False,
        "description": "Manages tickets, roles and assignments.",
        "permissions": ALL_CORE_PERMISSIONS,
    },
    {
        "name": "Supervisor",
        "is_system": False,
        "description": "Oversees agents and ticket assignment.",
        "permissions": [
            "read_tickets",
            "create_tickets",
            "update_tickets",
            "assign_tickets",
            "read_departments",
            "read_users",
        ],
    },
    {
        "name": "Agent",
        "is_system": False,
        "description": "Works and resolves tickets.",
        "permissions": [
            "read_tickets",
            "create_tickets",
            "update_tickets",
            "read_departments",
        ],
    },
    {
        "name": "Client User",
        "is_system": False,
        "description": "Opens and follows tickets through the client portal.",
        "permissions": ["read_tickets", "create_tickets"],
    },
]
