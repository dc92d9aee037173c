# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Enumeration types for database models."""

from enum import Enum


class UserRoleTier(str, Enum):
    """Role tier stored on every user.

    The tier decides the capability flags of a principal; fine-grained
    permissions come from role assignments.
    """

    SUPER_ADMIN = "super_admin"
    SYSTEM_ADMIN = "system_admin"
    SYSTEM_AGENT = "system_agent"
    COMPANY_ADMIN = "company_admin"
    COMPANY_MANAGER = "company_manager"
    COMPANY_AGENT = "company_agent"
    COMPANY_USER = "company_user"


class OrganizationType(str, Enum):
    """Organization type enumeration."""

    SYSTEM_OWNER = "system_owner"
    CLIENT_COMPANY = "client_company"


class TicketStatus(str, Enum):
    """Ticket status enumeration."""

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    WAITING_CUSTOMER = "waiting_customer"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketPriority(str, Enum):
    """Ticket priority enumeration."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TicketType(str, Enum):
    """Ticket type enumeration."""

    SUPPORT = "support"
    INCIDENT = "incident"
    OPTIMIZATION = "optimization"
    FEATURE_REQUEST = "feature_request"
