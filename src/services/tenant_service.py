# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Organizations and departments: visibility and administration."""

import logging
import uuid

from sqlalchemy.orm import Session

from src.models import Department, Organization, User
from src.models.enums import OrganizationType, UserRoleTier
from src.rbac.exceptions import AuthorizationDenied
from src.rbac.principal import Principal, has_role
from src.schemas.tenant import (
    DepartmentCreate,
    DepartmentUpdate,
    OrganizationCreate,
    OrganizationUpdate,
)
from src.services import principal_service

logger = logging.getLogger(__name__)

# Departments every new client company starts with
DEFAULT_CLIENT_DEPARTMENTS = [
    ("Administration", "General administration"),
    ("IT", "Information technology"),
    ("Support", "User support"),
]


class TenantServiceError(Exception):
    """Base exception for tenant service errors."""


class OrganizationNotFoundError(TenantServiceError):
    """Organization does not exist."""


class DepartmentNotFoundError(TenantServiceError):
    """Department does not exist."""


class UserNotFoundError(TenantServiceError):
    """User does not exist."""


def _crosses_organizations(principal: Principal) -> bool:
    return principal.is_super_user or principal.can_cross_organizations


def accessible_organizations(db: Session, principal: Principal) -> list[Organization]:
    """Get the organizations a principal may work in.

    Cross-organization principals see all of them, everyone else only their own.
    """
    query = db.query(Organization)
    if not _crosses_organizations(principal):
        if principal.organization_id is None:
            return []
        query = query.filter(Organization.id == principal.organization_id)
    return query.order_by(Organization.name).all()


def accessible_organization_ids(db: Session, principal: Principal) -> list[uuid.UUID]:
    """Get the IDs of the organizations a principal may work in."""
    return [org.id for org in accessible_organizations(db, principal)]


def accessible_departments(
    db: Session, principal: Principal, organization_id: uuid.UUID | None = None
) -> list[Department]:
    """Get the departments a principal may work in, using the ticket tier ladder."""
    query = db.query(Department)

    if _crosses_organizations(principal):
        if organization_id is not None:
            query = query.filter(Department.organization_id == organization_id)
    elif principal.can_cross_departments and principal.organization_id is not None:
        if organization_id is not None and organization_id != principal.organization_id:
            return []
        query = query.filter(Department.organization_id == principal.organization_id)
    elif principal.department_id is not None:
        query = query.filter(Department.id == principal.department_id)
    else:
        return []

    return query.order_by(Department.name).all()


# Organizations


def get_organization(
    db: Session, principal: Principal, organization_id: uuid.UUID
) -> Organization:
    """Get an organization the principal belongs to or may cross into."""
    if not _crosses_organizations(principal) and principal.organization_id != organization_id:
        raise AuthorizationDenied("Access denied to this organization")

    organization = db.query(Organization).filter(Organization.id == organization_id).first()
    if not organization:
        raise OrganizationNotFoundError("Organization not found")
    return organization


def create_organization(
    db: Session, principal: Principal, data: OrganizationCreate
) -> Organization:
    """Create an organization. Client companies get the default departments."""
    if not has_role(principal, UserRoleTier.SYSTEM_ADMIN):
        raise AuthorizationDenied("Only system administrators can create organizations")

    organization = Organization(**data.model_dump(), is_active=True)
    db.add(organization)
    db.flush()

    if organization.type == OrganizationType.CLIENT_COMPANY:
        for name, description in DEFAULT_CLIENT_DEPARTMENTS:
            db.add(
                Department(
                    name=name,
                    description=description,
                    organization_id=organization.id,
                )
            )

    db.commit()
    db.refresh(organization)
    logger.info("Organization %s created by %s", organization.id, principal.user_id)
    return organization


def update_organization(
    db: Session,
    principal: Principal,
    organization_id: uuid.UUID,
    data: OrganizationUpdate,
) -> Organization:
    """Update an organization.

    System administrators may edit any organization, company admins only
    their own.
    """
    can_edit = has_role(principal, UserRoleTier.SYSTEM_ADMIN) or (
        principal.role == UserRoleTier.COMPANY_ADMIN
        and principal.organization_id == organization_id
    )
    if not can_edit:
        raise AuthorizationDenied("Insufficient permissions to edit this organization")

    organization = db.query(Organization).filter(Organization.id == organization_id).first()
    if not organization:
        raise OrganizationNotFoundError("Organization not found")

    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(organization, key, value)

    db.commit()
    db.refresh(organization)
    return organization


# Departments


def _can_manage_departments(principal: Principal, organization_id: uuid.UUID) -> bool:
    """System admins everywhere; company admins and managers in their organization."""
    if has_role(principal, UserRoleTier.SYSTEM_ADMIN):
        return True
    return principal.organization_id == organization_id and principal.role in (
        UserRoleTier.COMPANY_ADMIN,
        UserRoleTier.COMPANY_MANAGER,
    )


def _get_department(db: Session, department_id: uuid.UUID) -> Department:
    department = db.query(Department).filter(Department.id == department_id).first()
    if not department:
        raise DepartmentNotFoundError("Department not found")
    return department


def get_department(
    db: Session, principal: Principal, department_id: uuid.UUID
) -> Department:
    """Get a department the principal may work in."""
    department = _get_department(db, department_id)

    has_access = (
        _crosses_organizations(principal)
        or (
            principal.can_cross_departments
            and principal.organization_id == department.organization_id
        )
        or principal.department_id == department.id
    )
    if not has_access:
        raise AuthorizationDenied("Access denied to this department")
    return department


def create_department(
    db: Session, principal: Principal, data: DepartmentCreate
) -> Department:
    """Create a department inside an existing organization."""
    if not _can_manage_departments(principal, data.organization_id):
        raise AuthorizationDenied("Insufficient permissions to create department")

    if not db.query(Organization).filter(Organization.id == data.organization_id).first():
        raise OrganizationNotFoundError("Organization not found")

    department = Department(**data.model_dump(), is_active=True)
    db.add(department)
    db.commit()
    db.refresh(department)
    logger.info("Department %s created by %s", department.id, principal.user_id)
    return department


def update_department(
    db: Session,
    principal: Principal,
    department_id: uuid.UUID,
    data: DepartmentUpdate,
) -> Department:
    """Update a department. Its organization cannot change."""
    department = _get_department(db, department_id)
    if not _can_manage_departments(principal, department.organization_id):
        raise AuthorizationDenied("Insufficient permissions to edit this department")

    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(department, key, value)

    db.commit()
    db.refresh(department)
    return department


def assign_user_to_department(
    db: Session, principal: Principal, department_id: uuid.UUID, user_id: uuid.UUID
) -> User:
    """Move a user into a department, and with it into its organization.

    The user's scope changes, so their cached principal is dropped.
    """
    department = _get_department(db, department_id)
    if not _can_manage_departments(principal, department.organization_id):
        raise AuthorizationDenied("Insufficient permissions to assign users")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UserNotFoundError("User not found")
    if (
        not _crosses_organizations(principal)
        and user.organization_id != department.organization_id
    ):
        raise AuthorizationDenied("User belongs to a different organization")

    user.department_id = department.id
    user.organization_id = department.organization_id
    db.commit()
    db.refresh(user)

    principal_service.invalidate_user(user.id)
    logger.info(
        "User %s assigned to department %s by %s",
        user.id,
        department.id,
        principal.user_id,
    )
    return user
