# src/api/v1/rbac.py
import uuid
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from src.api.deps import get_db, get_principal, require_permission
from src.api.v1.auth import build_principal_response
from src.rbac.principal import Principal
from src.schemas.auth import PrincipalResponse
from src.schemas.rbac import (
    PermissionCreateSchema,
    PermissionSchema,
    RoleCreateSchema,
    RolePermissionAssignmentSchema,
    RoleSchema,
    RoleUpdateSchema,
    RoleWithPermissionsSchema,
    UserRoleAssignmentSchema,
    UserRoleSchema,
)
from src.services import rbac_service
from src.services.rbac_service import (
    AssignmentNotFoundError,
    RbacServiceError,
    RoleInUseError,
    RoleNotFoundError,
    SystemRoleError,
    UserNotFoundError,
)

router = APIRouter()


def _raise_http(exc: RbacServiceError) -> NoReturn:
    if isinstance(
        exc,
        RoleNotFoundError | UserNotFoundError | AssignmentNotFoundError,
    ):
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    if isinstance(exc, SystemRoleError):
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    if isinstance(exc, RoleInUseError):
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    # DuplicateError, PermissionNotFoundError
    raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/rbac/permissions", response_model=list[PermissionSchema], summary="List all available permissions")
def list_permissions(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("permissions", "read")),
):
    """Retrieve a list of all available permissions in the system.
    Requires read_permissions.
    """
    return rbac_service.list_permissions(db)


@router.get("/rbac/permissions/{permission_id}", response_model=PermissionSchema, summary="Get a permission by ID")
def get_permission(
    permission_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("permissions", "read")),
):
    """Retrieve a specific permission by its ID.
    Requires read_permissions.
    """
    permission = rbac_service.get_permission(db, permission_id)
    if not permission:
        raise HTTPException(status_code=404, detail="Permission not found")
    return permission


@router.post("/rbac/permissions", response_model=PermissionSchema, status_code=status.HTTP_201_CREATED, summary="Register a new permission")
def create_permission(
    permission_in: PermissionCreateSchema,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """Register a new ``<action>_<resource>`` permission.
    Requires create_permissions.
    """
    try:
        return rbac_service.create_permission(
            db,
            principal,
            resource=permission_in.resource,
            action=permission_in.action,
            description=permission_in.description,
        )
    except RbacServiceError as exc:
        _raise_http(exc)


@router.get("/rbac/roles", response_model=list[RoleSchema], summary="List all roles")
def list_roles(
    organization_id: uuid.UUID | None = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("roles", "read")),
):
    """Retrieve roles, optionally system-wide plus one organization's.
    Requires read_roles.
    """
    return rbac_service.list_roles(db, organization_id)


@router.get("/rbac/roles/{role_id}", response_model=RoleWithPermissionsSchema, summary="Get a role by ID with its permissions")
def get_role(
    role_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("roles", "read")),
):
    """Retrieve a specific role by its ID, including all associated permissions.
    Requires read_roles.
    """
    role = rbac_service.get_role(db, role_id)
    if not role:
        raise HTTPException(status_code=404, detail="Role not found")

    permissions = rbac_service.get_role_permissions(db, role_id)
    return RoleWithPermissionsSchema(
        **RoleSchema.model_validate(role).model_dump(),
        permissions=[PermissionSchema.model_validate(p) for p in permissions],
    )


@router.post("/rbac/roles", response_model=RoleSchema, status_code=status.HTTP_201_CREATED, summary="Create a new custom role")
def create_role(
    role_in: RoleCreateSchema,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """Create a new custom role with specified permissions.
    Requires create_roles.
    """
    try:
        return rbac_service.create_role(
            db,
            principal,
            name=role_in.name,
            description=role_in.description,
            organization_id=role_in.organization_id,
            permissions=role_in.permissions,
        )
    except RbacServiceError as exc:
        _raise_http(exc)


@router.put("/rbac/roles/{role_id}", response_model=RoleSchema, summary="Update an existing role")
def update_role(
    role_id: uuid.UUID,
    role_in: RoleUpdateSchema,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """Update an existing custom role's name, description, state and permissions.
    System roles cannot be modified.
    Requires update_roles.
    """
    try:
        return rbac_service.update_role(
            db,
            principal,
            role_id,
            name=role_in.name,
            description=role_in.description,
            is_active=role_in.is_active,
            permissions=role_in.permissions,
        )
    except RbacServiceError as exc:
        _raise_http(exc)


@router.delete("/rbac/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a custom role")
def delete_role(
    role_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """Delete a custom role. System roles cannot be deleted.
    Requires delete_roles.
    """
    try:
        rbac_service.delete_role(db, principal, role_id)
    except RbacServiceError as exc:
        _raise_http(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/rbac/roles/{role_id}/permissions", response_model=RoleWithPermissionsSchema, summary="Grant a permission to a role")
def add_role_permission(
    role_id: uuid.UUID,
    assignment: RolePermissionAssignmentSchema,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """Link a permission to a role.
    Requires manage_role_permissions.
    """
    try:
        rbac_service.add_permission_to_role(
            db, principal, role_id, assignment.permission_id
        )
    except RbacServiceError as exc:
        _raise_http(exc)

    role = rbac_service.get_role(db, role_id)
    permissions = rbac_service.get_role_permissions(db, role_id)
    return RoleWithPermissionsSchema(
        **RoleSchema.model_validate(role).model_dump(),
        permissions=[PermissionSchema.model_validate(p) for p in permissions],
    )


@router.delete("/rbac/roles/{role_id}/permissions/{permission_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Remove a permission from a role")
def remove_role_permission(
    role_id: uuid.UUID,
    permission_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """Delete the link between a role and a permission.
    Requires manage_role_permissions.
    """
    try:
        removed = rbac_service.remove_permission_from_role(
            db, principal, role_id, permission_id
        )
    except RbacServiceError as exc:
        _raise_http(exc)
    if not removed:
        raise HTTPException(status_code=404, detail="Role permission not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/rbac/users/{user_id}/roles", response_model=list[UserRoleSchema], summary="Get a user's role assignments")
def get_user_role_assignments(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """Retrieve all role assignments for a specific user, revoked ones included.
    Requires manage_user_roles.
    """
    try:
        return rbac_service.get_user_role_assignments(db, principal, user_id)
    except RbacServiceError as exc:
        _raise_http(exc)


@router.post("/rbac/users/{user_id}/roles", response_model=UserRoleSchema, status_code=status.HTTP_201_CREATED, summary="Assign a role to a user")
def assign_role_to_user_api(
    user_id: uuid.UUID,
    assignment: UserRoleAssignmentSchema,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """Assign a role to a user, optionally until ``expires_at``.
    Requires manage_user_roles.
    """
    try:
        return rbac_service.assign_role_to_user(
            db,
            principal,
            user_id=user_id,
            role_id=assignment.role_id,
            expires_at=assignment.expires_at,
        )
    except RbacServiceError as exc:
        _raise_http(exc)


@router.delete("/rbac/users/{user_id}/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Revoke a role from a user")
def revoke_role_from_user_api(
    user_id: uuid.UUID,
    role_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """Deactivate a user's role assignment. Revoking twice is not an error.
    Requires manage_user_roles.
    """
    try:
        rbac_service.revoke_role_from_user(db, principal, user_id, role_id)
    except RbacServiceError as exc:
        _raise_http(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/rbac/me/permissions", response_model=PrincipalResponse, summary="Get current user's effective permissions")
def get_my_permissions(principal: Principal = Depends(get_principal)):
    """Retrieve the current principal's effective permissions and capability flags."""
    return build_principal_response(principal)
