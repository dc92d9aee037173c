# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for visibility tiers and ticket placement."""

import uuid
from types import SimpleNamespace

import pytest

from src.models.enums import TicketStatus, UserRoleTier
from src.rbac.exceptions import AuthorizationDenied
from src.rbac.principal import build_principal
from src.rbac.scope import (
    DepartmentOnly,
    OrganizationWide,
    ScopeTier,
    SelfOwned,
    TicketFilters,
    Unrestricted,
    build_scope,
    can_access_record,
    check_ticket_placement,
)

ORG_A = uuid.uuid4()
ORG_B = uuid.uuid4()
DEPT_A1 = uuid.uuid4()
DEPT_A2 = uuid.uuid4()
DEPT_B1 = uuid.uuid4()


def principal(role, organization_id=None, department_id=None, user_id=None):
    return build_principal(
        user_id=user_id or uuid.uuid4(),
        role=role,
        permissions=set(),
        organization_id=organization_id,
        department_id=department_id,
    )


def record(organization_id=None, department_id=None, **kwargs):
    values = {
        "id": uuid.uuid4(),
        "organization_id": organization_id,
        "department_id": department_id,
        "created_by_id": None,
        "assignee_id": None,
        "client_responsible_id": None,
        "status": TicketStatus.OPEN,
        "priority": "medium",
        "customer_id": None,
    }
    values.update(kwargs)
    return SimpleNamespace(**values)


@pytest.mark.parametrize(
    ("role", "org", "dept", "tier"),
    [
        (UserRoleTier.SUPER_ADMIN, None, None, ScopeTier.UNRESTRICTED),
        (UserRoleTier.SYSTEM_ADMIN, ORG_A, DEPT_A1, ScopeTier.UNRESTRICTED),
        (UserRoleTier.COMPANY_ADMIN, ORG_A, DEPT_A1, ScopeTier.ORGANIZATION),
        (UserRoleTier.COMPANY_MANAGER, ORG_A, None, ScopeTier.ORGANIZATION),
        (UserRoleTier.COMPANY_AGENT, ORG_A, DEPT_A1, ScopeTier.DEPARTMENT),
        (UserRoleTier.SYSTEM_AGENT, None, DEPT_A1, ScopeTier.DEPARTMENT),
        (UserRoleTier.COMPANY_USER, ORG_A, None, ScopeTier.SELF),
        (UserRoleTier.COMPANY_USER, None, None, ScopeTier.SELF),
    ],
)
def test_tier_selection(role, org, dept, tier):
    assert build_scope(principal(role, org, dept)).tier == tier


def test_company_admin_without_organization_falls_through():
    scope = build_scope(principal(UserRoleTier.COMPANY_ADMIN, None, DEPT_A1))
    assert scope == DepartmentOnly(department_id=DEPT_A1)


def test_unrestricted_honours_explicit_filters():
    filters = TicketFilters(organization_id=ORG_B, department_id=DEPT_B1)
    scope = build_scope(principal(UserRoleTier.SUPER_ADMIN), filters)

    assert scope == Unrestricted(organization_id=ORG_B, department_id=DEPT_B1)
    assert scope.matches(record(ORG_B, DEPT_B1))
    assert not scope.matches(record(ORG_A, DEPT_A1))


def test_organization_wide_narrows_to_department():
    filters = TicketFilters(department_id=DEPT_A2)
    scope = build_scope(principal(UserRoleTier.COMPANY_ADMIN, ORG_A, DEPT_A1), filters)

    assert scope.matches(record(ORG_A, DEPT_A2))
    assert not scope.matches(record(ORG_A, DEPT_A1))


def test_organization_wide_with_foreign_org_filter_matches_nothing():
    filters = TicketFilters(organization_id=ORG_B)
    scope = build_scope(principal(UserRoleTier.COMPANY_ADMIN, ORG_A, DEPT_A1), filters)

    assert isinstance(scope, OrganizationWide)
    assert scope.is_empty
    assert not scope.matches(record(ORG_B, DEPT_B1))
    assert not scope.matches(record(ORG_A, DEPT_A1))


def test_department_tier_ignores_cross_tenant_filters():
    filters = TicketFilters(organization_id=ORG_B, department_id=DEPT_B1)
    scope = build_scope(principal(UserRoleTier.COMPANY_AGENT, ORG_A, DEPT_A1), filters)

    assert scope == DepartmentOnly(department_id=DEPT_A1)
    assert not scope.matches(record(ORG_B, DEPT_B1))


def test_self_owned_matches_any_of_three_links():
    user_id = uuid.uuid4()
    scope = build_scope(principal(UserRoleTier.COMPANY_USER, user_id=user_id))

    assert scope == SelfOwned(user_id=user_id)
    assert scope.matches(record(created_by_id=user_id))
    assert scope.matches(record(assignee_id=user_id))
    assert scope.matches(record(client_responsible_id=user_id))
    assert not scope.matches(record(ORG_A, DEPT_A1))


def test_multi_tenant_scenario():
    """Agents see their department, admins their organization, supers everything."""
    records = [
        record(ORG_A, DEPT_A1),
        record(ORG_A, DEPT_A2),
        record(ORG_B, DEPT_B1),
    ]
    agent = principal(UserRoleTier.COMPANY_AGENT, ORG_A, DEPT_A1)
    admin = principal(UserRoleTier.COMPANY_ADMIN, ORG_A, DEPT_A1)
    super_admin = principal(UserRoleTier.SUPER_ADMIN)

    def visible(p):
        return [r for r in records if can_access_record(p, r)]

    assert visible(agent) == records[:1]
    assert visible(admin) == records[:2]
    assert visible(super_admin) == records


def test_orphan_ticket_visible_only_to_unrestricted_or_owner():
    creator = uuid.uuid4()
    orphan = record(created_by_id=creator)

    assert can_access_record(principal(UserRoleTier.SYSTEM_ADMIN), orphan)
    assert not can_access_record(
        principal(UserRoleTier.COMPANY_ADMIN, ORG_A, DEPT_A1), orphan
    )
    assert can_access_record(principal(UserRoleTier.COMPANY_USER, user_id=creator), orphan)


def test_filters_only_narrow():
    p = principal(UserRoleTier.COMPANY_AGENT, ORG_A, DEPT_A1)
    candidates = [
        record(ORG_A, DEPT_A1, status=TicketStatus.OPEN),
        record(ORG_A, DEPT_A1, status=TicketStatus.CLOSED),
        record(ORG_B, DEPT_B1, status=TicketStatus.OPEN),
    ]
    filters = TicketFilters(status="open")
    scope = build_scope(p, filters)

    unfiltered = [r for r in candidates if build_scope(p).matches(r)]
    filtered = [r for r in candidates if scope.matches(r) and filters.matches(r)]

    assert filtered == candidates[:1]
    assert set(map(id, filtered)) <= set(map(id, unfiltered))


def test_filter_offset():
    assert TicketFilters(page=3, limit=20).offset == 40
    assert TicketFilters(page=0, limit=20).offset == 0


class TestTicketPlacement:
    def test_defaults_to_principal_placement(self):
        p = principal(UserRoleTier.COMPANY_AGENT, ORG_A, DEPT_A1)
        assert check_ticket_placement(p) == (ORG_A, DEPT_A1)

    def test_agent_cannot_target_other_department(self):
        p = principal(UserRoleTier.COMPANY_AGENT, ORG_A, DEPT_A1)
        with pytest.raises(AuthorizationDenied):
            check_ticket_placement(p, ORG_A, DEPT_A2)

    def test_company_admin_may_target_other_department(self):
        p = principal(UserRoleTier.COMPANY_ADMIN, ORG_A, DEPT_A1)
        assert check_ticket_placement(p, None, DEPT_A2) == (ORG_A, DEPT_A2)

    def test_company_admin_cannot_target_other_organization(self):
        p = principal(UserRoleTier.COMPANY_ADMIN, ORG_A, DEPT_A1)
        with pytest.raises(AuthorizationDenied):
            check_ticket_placement(p, ORG_B, DEPT_B1)

    def test_system_admin_may_target_anywhere(self):
        p = principal(UserRoleTier.SYSTEM_ADMIN, ORG_A)
        assert check_ticket_placement(p, ORG_B, DEPT_B1) == (ORG_B, DEPT_B1)
