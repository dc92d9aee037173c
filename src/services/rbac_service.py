# src/services/rbac_service.py
import logging
import uuid
from datetime import datetime

from sqlalchemy.orm import Session, joinedload

from src.models import Permission, Role, RolePermission, User, UserRole
from src.rbac.exceptions import AuthorizationDenied
from src.rbac.permissions import WILDCARD, permission_name
from src.rbac.principal import Principal, has_permission
from src.services import principal_service

logger = logging.getLogger(__name__)


class RbacServiceError(Exception):
    """Base exception for role and permission management errors."""


class RoleNotFoundError(RbacServiceError):
    """Role does not exist."""


class PermissionNotFoundError(RbacServiceError):
    """Permission does not exist."""


class UserNotFoundError(RbacServiceError):
    """User does not exist."""


class AssignmentNotFoundError(RbacServiceError):
    """No assignment ever existed for the user and role."""


class DuplicateError(RbacServiceError):
    """Name already taken."""


class SystemRoleError(RbacServiceError):
    """System roles are immutable."""


class RoleInUseError(RbacServiceError):
    """Role still has assignment history."""


def authorize(actor: Principal, resource: str, action: str) -> None:
    """Raise AuthorizationDenied unless ``actor`` holds the permission."""
    if not has_permission(actor, resource, action):
        logger.warning(
            "Denied %s on %s for user %s", action, resource, actor.user_id
        )
        raise AuthorizationDenied(
            f"Permission denied: {permission_name(resource, action)}"
        )


def check_organization(actor: Principal, organization_id: uuid.UUID | None) -> None:
    """Keep actors that cannot cross organizations inside their own.

    ``None`` stands for system-wide data, which only cross-organization
    actors may touch.
    """
    if actor.is_super_user or actor.can_cross_organizations:
        return
    if organization_id is None or organization_id != actor.organization_id:
        logger.warning(
            "Denied cross-organization access to %s for user %s",
            organization_id,
            actor.user_id,
        )
        raise AuthorizationDenied("Access denied to this organization")


def _get_user(db: Session, actor: Principal, user_id: uuid.UUID) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UserNotFoundError("User not found")
    check_organization(actor, user.organization_id)
    return user


# Roles


def get_role(db: Session, role_id: uuid.UUID) -> Role | None:
    """Get a role by its ID."""
    return db.query(Role).filter(Role.id == role_id).first()


def get_role_by_name(
    db: Session, name: str, organization_id: uuid.UUID | None = None
) -> Role | None:
    """Get a role by its name within an organization (None = system-wide)."""
    query = db.query(Role).filter(Role.name == name)
    if organization_id is None:
        query = query.filter(Role.organization_id.is_(None))
    else:
        query = query.filter(Role.organization_id == organization_id)
    return query.first()


def list_roles(db: Session, organization_id: uuid.UUID | None = None) -> list[Role]:
    """List roles, optionally only system-wide ones plus one organization's."""
    query = db.query(Role)
    if organization_id is not None:
        query = query.filter(
            (Role.organization_id.is_(None)) | (Role.organization_id == organization_id)
        )
    return query.order_by(Role.name).all()


def get_role_permissions(db: Session, role_id: uuid.UUID) -> list[Permission]:
    """Get the permissions linked to a role."""
    return (
        db.query(Permission)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .filter(RolePermission.role_id == role_id)
        .order_by(Permission.name)
        .all()
    )


def _resolve_permissions(db: Session, names: list[str]) -> list[Permission]:
    permissions = []
    for name in names:
        permission = get_permission_by_name(db, name)
        if not permission:
            raise PermissionNotFoundError(f"Permission '{name}' not found")
        permissions.append(permission)
    return permissions


def create_role(
    db: Session,
    actor: Principal,
    name: str,
    description: str | None = None,
    organization_id: uuid.UUID | None = None,
    permissions: list[str] | None = None,
) -> Role:
    """Create a custom role with the given permission names."""
    authorize(actor, "roles", "create")
    check_organization(actor, organization_id)

    if get_role_by_name(db, name, organization_id):
        raise DuplicateError("Role with this name already exists")
    linked = _resolve_permissions(db, permissions or [])

    role = Role(
        name=name,
        description=description,
        organization_id=organization_id,
        is_system=False,
    )
    db.add(role)
    db.flush()

    for permission in linked:
        db.add(RolePermission(role_id=role.id, permission_id=permission.id))

    db.commit()
    db.refresh(role)
    logger.info("Role %s created by %s", role.name, actor.user_id)
    return role


def update_role(
    db: Session,
    actor: Principal,
    role_id: uuid.UUID,
    name: str | None = None,
    description: str | None = None,
    is_active: bool | None = None,
    permissions: list[str] | None = None,
) -> Role:
    """Update a custom role. ``permissions`` replaces the whole set when given."""
    authorize(actor, "roles", "update")

    role = get_role(db, role_id)
    if not role:
        raise RoleNotFoundError("Role not found")
    check_organization(actor, role.organization_id)
    if role.is_system:
        raise SystemRoleError("System roles cannot be modified")

    if name:
        existing = get_role_by_name(db, name, role.organization_id)
        if existing and existing.id != role_id:
            raise DuplicateError("Role with this name already exists")
        role.name = name

    if description is not None:
        role.description = description

    if is_active is not None:
        role.is_active = is_active

    if permissions is not None:
        linked = _resolve_permissions(db, permissions)
        db.query(RolePermission).filter(RolePermission.role_id == role_id).delete()
        db.flush()
        for permission in linked:
            db.add(RolePermission(role_id=role.id, permission_id=permission.id))

    db.commit()
    db.refresh(role)
    principal_service.invalidate_all()
    return role


def delete_role(db: Session, actor: Principal, role_id: uuid.UUID) -> None:
    """Delete a custom role and its permission links.

    Assignment rows are audit history, so a role that was ever assigned
    cannot be deleted; deactivate it with ``update_role`` instead.
    """
    authorize(actor, "roles", "delete")

    role = get_role(db, role_id)
    if not role:
        raise RoleNotFoundError("Role not found")
    check_organization(actor, role.organization_id)
    if role.is_system:
        raise SystemRoleError("System roles cannot be deleted")
    if db.query(UserRole).filter(UserRole.role_id == role_id).first():
        raise RoleInUseError("Role has assignments; deactivate it instead")

    db.delete(role)
    db.commit()
    principal_service.invalidate_all()
    logger.info("Role %s deleted by %s", role_id, actor.user_id)


# Permissions


def get_permission(db: Session, permission_id: uuid.UUID) -> Permission | None:
    """Get a permission by its ID."""
    return db.query(Permission).filter(Permission.id == permission_id).first()


def get_permission_by_name(db: Session, name: str) -> Permission | None:
    """Get a permission by its unique name."""
    return db.query(Permission).filter(Permission.name == name).first()


def list_permissions(db: Session) -> list[Permission]:
    """List every registered permission."""
    return db.query(Permission).order_by(Permission.resource, Permission.action).all()


def register_permission(
    db: Session, resource: str, action: str, description: str | None = None
) -> Permission:
    """Register a permission if it does not already exist."""
    name = WILDCARD if resource == action == WILDCARD else permission_name(resource, action)
    permission = get_permission_by_name(db, name)
    if not permission:
        permission = Permission(
            name=name, resource=resource, action=action, description=description
        )
        db.add(permission)
        db.commit()
    return permission


def create_permission(
    db: Session,
    actor: Principal,
    resource: str,
    action: str,
    description: str | None = None,
) -> Permission:
    """Create a new named permission. Duplicates are rejected."""
    authorize(actor, "permissions", "create")

    if WILDCARD in (resource, action):
        raise DuplicateError("The wildcard permission is reserved")
    if get_permission_by_name(db, permission_name(resource, action)):
        raise DuplicateError("Permission already exists")
    return register_permission(db, resource, action, description)


# Role-permission links


def add_permission_to_role(
    db: Session, actor: Principal, role_id: uuid.UUID, permission_id: uuid.UUID
) -> RolePermission:
    """Link a permission to a role. Linking twice returns the existing link."""
    authorize(actor, "role_permissions", "manage")

    role = get_role(db, role_id)
    if not role:
        raise RoleNotFoundError("Role not found")
    check_organization(actor, role.organization_id)
    if role.is_system:
        raise SystemRoleError("System roles cannot be modified")
    if not get_permission(db, permission_id):
        raise PermissionNotFoundError("Permission not found")

    link = (
        db.query(RolePermission)
        .filter(
            RolePermission.role_id == role_id,
            RolePermission.permission_id == permission_id,
        )
        .first()
    )
    if link:
        return link

    link = RolePermission(role_id=role_id, permission_id=permission_id)
    db.add(link)
    db.commit()
    principal_service.invalidate_all()
    return link


def remove_permission_from_role(
    db: Session, actor: Principal, role_id: uuid.UUID, permission_id: uuid.UUID
) -> bool:
    """Hard-delete a role-permission link. Returns False if it did not exist."""
    authorize(actor, "role_permissions", "manage")

    role = get_role(db, role_id)
    if role:
        check_organization(actor, role.organization_id)
        if role.is_system:
            raise SystemRoleError("System roles cannot be modified")

    deleted = (
        db.query(RolePermission)
        .filter(
            RolePermission.role_id == role_id,
            RolePermission.permission_id == permission_id,
        )
        .delete()
    )
    db.commit()
    if deleted:
        principal_service.invalidate_all()
    return deleted > 0


# User-role assignments


def get_user_role_assignments(
    db: Session, actor: Principal, user_id: uuid.UUID
) -> list[UserRole]:
    """Get every assignment row of a user, revoked ones included."""
    authorize(actor, "user_roles", "manage")
    _get_user(db, actor, user_id)

    return (
        db.query(UserRole)
        .filter(UserRole.user_id == user_id)
        .options(joinedload(UserRole.role))
        .order_by(UserRole.assigned_at.desc())
        .all()
    )


def assign_role_to_user(
    db: Session,
    actor: Principal,
    user_id: uuid.UUID,
    role_id: uuid.UUID,
    expires_at: datetime | None = None,
) -> UserRole:
    """Assign a role to a user.

    An existing active, unexpired assignment for the same role is returned
    unchanged. Otherwise a new row is written; revoked rows stay as history.
    """
    authorize(actor, "user_roles", "manage")

    user = _get_user(db, actor, user_id)
    role = get_role(db, role_id)
    if not role:
        raise RoleNotFoundError("Role not found")
    if role.is_system and not actor.is_super_user:
        raise AuthorizationDenied("Only super users may assign system roles")
    if role.organization_id is not None and role.organization_id != user.organization_id:
        raise AuthorizationDenied("Role belongs to a different organization")

    now = datetime.utcnow()
    for existing in (
        db.query(UserRole)
        .filter(
            UserRole.user_id == user_id,
            UserRole.role_id == role_id,
            UserRole.is_active.is_(True),
        )
        .all()
    ):
        if existing.is_effective(now):
            return existing

    user_role = UserRole(
        user_id=user_id,
        role_id=role_id,
        assigned_by_id=actor.user_id,
        assigned_at=now,
        expires_at=expires_at,
        is_active=True,
    )
    db.add(user_role)
    db.commit()
    db.refresh(user_role)
    principal_service.invalidate_user(user_id)
    logger.info("Role %s assigned to user %s by %s", role_id, user_id, actor.user_id)
    return user_role


def revoke_role_from_user(
    db: Session, actor: Principal, user_id: uuid.UUID, role_id: uuid.UUID
) -> int:
    """Soft-revoke a role from a user.

    Every active row for the pair is deactivated. Revoking an already
    revoked assignment is a no-op returning 0. Raises AssignmentNotFoundError
    only if the pair never had an assignment.
    """
    authorize(actor, "user_roles", "manage")
    _get_user(db, actor, user_id)

    rows = (
        db.query(UserRole)
        .filter(UserRole.user_id == user_id, UserRole.role_id == role_id)
        .all()
    )
    if not rows:
        raise AssignmentNotFoundError("Role assignment not found")

    revoked = 0
    for row in rows:
        if row.is_active:
            row.is_active = False
            revoked += 1

    if revoked:
        db.commit()
        principal_service.invalidate_user(user_id)
        logger.info(
            "Role %s revoked from user %s by %s", role_id, user_id, actor.user_id
        )
    return revoked
