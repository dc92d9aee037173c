# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Organization and department API endpoints."""

import uuid
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from src.api.deps import get_db, require_permission, require_role
from src.models.enums import UserRoleTier
from src.rbac.principal import Principal
from src.schemas.common import MessageResponse
from src.schemas.tenant import (
    DepartmentCreate,
    DepartmentResponse,
    DepartmentUpdate,
    DepartmentUserAssignment,
    OrganizationCreate,
    OrganizationResponse,
    OrganizationUpdate,
)
from src.services import tenant_service
from src.services.tenant_service import TenantServiceError

router = APIRouter()

# Tiers that may administer departments; the service narrows company tiers
# to their own organization.
DEPARTMENT_ADMINS = (
    UserRoleTier.SYSTEM_ADMIN,
    UserRoleTier.COMPANY_ADMIN,
    UserRoleTier.COMPANY_MANAGER,
)


def _raise_http(exc: TenantServiceError) -> NoReturn:
    # Every tenant service error is a missing record
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("/organizations", response_model=list[OrganizationResponse])
def list_organizations(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("organizations", "read")),
) -> list[OrganizationResponse]:
    """List organizations the caller may work in."""
    organizations = tenant_service.accessible_organizations(db, principal)
    return [OrganizationResponse.model_validate(o) for o in organizations]


@router.post(
    "/organizations",
    response_model=OrganizationResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_organization(
    data: OrganizationCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role(UserRoleTier.SYSTEM_ADMIN)),
) -> OrganizationResponse:
    """Create an organization (system administrators only)."""
    organization = tenant_service.create_organization(db, principal, data)
    return OrganizationResponse.model_validate(organization)


@router.get("/organizations/{organization_id}", response_model=OrganizationResponse)
def get_organization(
    organization_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("organizations", "read")),
) -> OrganizationResponse:
    """Get a specific organization."""
    try:
        organization = tenant_service.get_organization(db, principal, organization_id)
    except TenantServiceError as exc:
        _raise_http(exc)
    return OrganizationResponse.model_validate(organization)


@router.put("/organizations/{organization_id}", response_model=OrganizationResponse)
def update_organization(
    organization_id: uuid.UUID,
    data: OrganizationUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(
        require_role(UserRoleTier.SYSTEM_ADMIN, UserRoleTier.COMPANY_ADMIN)
    ),
) -> OrganizationResponse:
    """Update an organization."""
    try:
        organization = tenant_service.update_organization(
            db, principal, organization_id, data
        )
    except TenantServiceError as exc:
        _raise_http(exc)
    return OrganizationResponse.model_validate(organization)


@router.get("/departments", response_model=list[DepartmentResponse])
def list_departments(
    organization_id: uuid.UUID | None = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("departments", "read")),
) -> list[DepartmentResponse]:
    """List departments the caller may work in."""
    departments = tenant_service.accessible_departments(db, principal, organization_id)
    return [DepartmentResponse.model_validate(d) for d in departments]


@router.post(
    "/departments",
    response_model=DepartmentResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_department(
    data: DepartmentCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role(*DEPARTMENT_ADMINS)),
) -> DepartmentResponse:
    """Create a department."""
    try:
        department = tenant_service.create_department(db, principal, data)
    except TenantServiceError as exc:
        _raise_http(exc)
    return DepartmentResponse.model_validate(department)


@router.get("/departments/{department_id}", response_model=DepartmentResponse)
def get_department(
    department_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("departments", "read")),
) -> DepartmentResponse:
    """Get a specific department."""
    try:
        department = tenant_service.get_department(db, principal, department_id)
    except TenantServiceError as exc:
        _raise_http(exc)
    return DepartmentResponse.model_validate(department)


@router.put("/departments/{department_id}", response_model=DepartmentResponse)
def update_department(
    department_id: uuid.UUID,
    data: DepartmentUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role(*DEPARTMENT_ADMINS)),
) -> DepartmentResponse:
    """Update a department."""
    try:
        department = tenant_service.update_department(db, principal, department_id, data)
    except TenantServiceError as exc:
        _raise_http(exc)
    return DepartmentResponse.model_validate(department)


@router.post("/departments/{department_id}/users", response_model=MessageResponse)
def assign_user_to_department(
    department_id: uuid.UUID,
    assignment: DepartmentUserAssignment,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role(*DEPARTMENT_ADMINS)),
) -> MessageResponse:
    """Move a user into a department."""
    try:
        tenant_service.assign_user_to_department(
            db, principal, department_id, assignment.user_id
        )
    except TenantServiceError as exc:
        _raise_http(exc)
    return MessageResponse(message="User assigned to department successfully")
