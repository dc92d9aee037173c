# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Database models package."""

from src.models.base import Base, TimestampMixin
from src.models.department import Department
from src.models.enums import (
    OrganizationType,
    TicketPriority,
    TicketStatus,
    TicketType,
    UserRoleTier,
)
from src.models.organization import Organization
from src.models.permission import WILDCARD_PERMISSION, Permission
from src.models.role import Role
from src.models.role_permission import RolePermission
from src.models.session import Session
from src.models.ticket import Ticket
from src.models.user import User
from src.models.user_role import UserRole

__all__ = [
    "WILDCARD_PERMISSION",
    "Base",
    "Department",
    "Organization",
    "OrganizationType",
    "Permission",
    "Role",
    "RolePermission",
    "Session",
    "Ticket",
    "TicketPriority",
    "TicketStatus",
    "TicketType",
    "TimestampMixin",
    "User",
    "UserRole",
    "UserRoleTier",
]
