# src/services/rbac_seed_service.py
import logging

from sqlalchemy.orm import Session

from src.models import Role, RolePermission
from src.rbac.permissions import CORE_PERMISSIONS, WILDCARD
from src.rbac.roles import DEFAULT_ROLES

from . import rbac_service

logger = logging.getLogger(__name__)


def seed_rbac_data(db: Session) -> None:
    """Seeds the database with core permissions and default roles.

    This function is idempotent.
    @param db: SQLAlchemy Session object
    """
    rbac_service.register_permission(
        db, WILDCARD, WILDCARD, description="Grants every permission"
    )
    for perm_data in CORE_PERMISSIONS:
        rbac_service.register_permission(db, **perm_data)

    created = 0
    for role_data in DEFAULT_ROLES:
        role = rbac_service.get_role_by_name(db, role_data["name"])
        if role:
            continue

        role = Role(
            name=role_data["name"],
            is_system=role_data["is_system"],
            description=role_data["description"],
        )
        db.add(role)
        db.flush()  # Flush to get the role ID

        for name in role_data["permissions"]:
            permission = rbac_service.get_permission_by_name(db, name)
            if permission:
                db.add(RolePermission(role_id=role.id, permission_id=permission.id))
        created += 1
    db.commit()

    if created:
        logger.info("Seeded %d default roles", created)
