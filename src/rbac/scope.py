# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tenant visibility tiers.

``build_scope`` maps a principal to exactly one tier, checked in this order:

1. unrestricted        super user or may cross organizations
2. organization-wide   may cross departments and has an organization
3. department          has a department
4. self-owned          creator, assignee or client responsible

The first tier that applies wins. Explicit filters are ANDed onto the tier
predicate by the data layer and can only narrow it.
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from src.rbac.exceptions import AuthorizationDenied
from src.rbac.principal import Principal


class ScopeTier(str, Enum):
    """Visibility tier, highest first."""

    UNRESTRICTED = "unrestricted"
    ORGANIZATION = "organization"
    DEPARTMENT = "department"
    SELF = "self"


class ScopedRecord(Protocol):
    """Attributes a record needs to be placed in a tenant scope."""

    organization_id: uuid.UUID | None
    department_id: uuid.UUID | None
    created_by_id: uuid.UUID | None
    assignee_id: uuid.UUID | None
    client_responsible_id: uuid.UUID | None


@dataclass(frozen=True)
class TicketFilters:
    """Caller-supplied narrowing filters plus pagination."""

    status: str | None = None
    priority: str | None = None
    customer_id: int | None = None
    assignee_id: uuid.UUID | None = None
    ids: tuple[uuid.UUID, ...] | None = None
    organization_id: uuid.UUID | None = None
    department_id: uuid.UUID | None = None
    page: int = 1
    limit: int = 20

    @property
    def offset(self) -> int:
        return (max(self.page, 1) - 1) * self.limit

    def matches(self, record: Any) -> bool:
        """Evaluate the attribute filters (not the tenant ones) in memory."""
        if self.status is not None and _value(record.status) != _value(self.status):
            return False
        if self.priority is not None and _value(record.priority) != _value(
            self.priority
        ):
            return False
        if self.customer_id is not None and record.customer_id != self.customer_id:
            return False
        if self.assignee_id is not None and record.assignee_id != self.assignee_id:
            return False
        if self.ids is not None and record.id not in self.ids:
            return False
        return True


def _value(raw: Any) -> Any:
    return raw.value if isinstance(raw, Enum) else raw


@dataclass(frozen=True)
class Unrestricted:
    """Every record, optionally narrowed to one organization/department."""

    organization_id: uuid.UUID | None = None
    department_id: uuid.UUID | None = None
    tier = ScopeTier.UNRESTRICTED

    def matches(self, record: ScopedRecord) -> bool:
        if (
            self.organization_id is not None
            and record.organization_id != self.organization_id
        ):
            return False
        if self.department_id is not None and record.department_id != self.department_id:
            return False
        return True


@dataclass(frozen=True)
class OrganizationWide:
    """Records of one organization, optionally one of its departments.

    ``requested_organization_id`` holds an explicit organization filter; when
    it differs from the principal's organization nothing matches.
    """

    organization_id: uuid.UUID
    department_id: uuid.UUID | None = None
    requested_organization_id: uuid.UUID | None = None
    tier = ScopeTier.ORGANIZATION

    @property
    def is_empty(self) -> bool:
        return (
            self.requested_organization_id is not None
            and self.requested_organization_id != self.organization_id
        )

    def matches(self, record: ScopedRecord) -> bool:
        if self.is_empty:
            return False
        if record.organization_id != self.organization_id:
            return False
        if self.department_id is not None and record.department_id != self.department_id:
            return False
        return True


@dataclass(frozen=True)
class DepartmentOnly:
    """Records of the principal's own department."""

    department_id: uuid.UUID
    tier = ScopeTier.DEPARTMENT

    def matches(self, record: ScopedRecord) -> bool:
        return record.department_id == self.department_id


@dataclass(frozen=True)
class SelfOwned:
    """Records the user created, is assigned to, or is client responsible for."""

    user_id: uuid.UUID
    tier = ScopeTier.SELF

    def matches(self, record: ScopedRecord) -> bool:
        return self.user_id in (
            record.created_by_id,
            record.assignee_id,
            record.client_responsible_id,
        )


ScopePredicate = Unrestricted | OrganizationWide | DepartmentOnly | SelfOwned


def build_scope(
    principal: Principal, filters: TicketFilters | None = None
) -> ScopePredicate:
    """Select the visibility tier of ``principal``."""
    filters = filters or TicketFilters()

    if principal.is_super_user or principal.can_cross_organizations:
        return Unrestricted(
            organization_id=filters.organization_id,
            department_id=filters.department_id,
        )

    if principal.can_cross_departments and principal.organization_id is not None:
        return OrganizationWide(
            organization_id=principal.organization_id,
            department_id=filters.department_id,
            requested_organization_id=filters.organization_id,
        )

    # Explicit organization/department filters are ignored below this point;
    # the principal is pinned to its own department or its own records.
    if principal.department_id is not None:
        return DepartmentOnly(department_id=principal.department_id)

    return SelfOwned(user_id=principal.user_id)


def can_access_record(principal: Principal, record: ScopedRecord) -> bool:
    """Check a single record against the principal's tier."""
    return build_scope(principal).matches(record)


def check_ticket_placement(
    principal: Principal,
    organization_id: uuid.UUID | None = None,
    department_id: uuid.UUID | None = None,
) -> tuple[uuid.UUID | None, uuid.UUID | None]:
    """Resolve where a new ticket lands and make sure the principal may put it there.

    Missing values default to the principal's own organization/department.
    Returns the ``(organization_id, department_id)`` pair to store.
    """
    target_org = organization_id if organization_id is not None else principal.organization_id
    target_dept = department_id if department_id is not None else principal.department_id

    if principal.is_super_user or principal.can_cross_organizations:
        return target_org, target_dept

    if target_org is not None and target_org != principal.organization_id:
        raise AuthorizationDenied("Cannot create ticket for a different organization")

    if not principal.can_cross_departments:
        if target_dept is not None and target_dept != principal.department_id:
            raise AuthorizationDenied("Cannot create ticket for a different department")

    return target_org, target_dept
