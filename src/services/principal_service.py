# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Resolve request credentials into a fully populated principal."""

import logging
import time
import uuid
from datetime import datetime
from typing import Protocol

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from src.config import Settings, settings
from src.models import Role, RolePermission, User, UserRole
from src.models.enums import UserRoleTier
from src.rbac.exceptions import InternalLookupError, Unauthenticated
from src.rbac.permissions import WILDCARD
from src.rbac.principal import Principal, build_principal
from src.services import auth_service

logger = logging.getLogger(__name__)

DEV_PRINCIPAL_ID = uuid.uuid5(uuid.NAMESPACE_DNS, "dev-admin.tenantdesk.local")


class PrincipalCache:
    """Short-lived in-memory cache of resolved principals, keyed by user id.

    Concurrent writers for the same user store equal values, so there is no
    locking; the last write wins.
    """

    def __init__(self, ttl_seconds: int = 300, max_size: int = 1000) -> None:
        self._ttl = ttl_seconds
        self._max_size = max_size
        self._entries: dict[uuid.UUID, tuple[Principal, float]] = {}

    def get(self, user_id: uuid.UUID) -> Principal | None:
        """Return the cached principal, or None if missing or expired."""
        entry = self._entries.get(user_id)
        if entry is None:
            logger.debug("Principal cache miss for %s", user_id)
            return None
        principal, expires_at = entry
        if time.monotonic() >= expires_at:
            self._entries.pop(user_id, None)
            logger.debug("Principal cache entry expired for %s", user_id)
            return None
        logger.debug("Principal cache hit for %s", user_id)
        return principal

    def set(self, principal: Principal) -> None:
        """Store a principal for the configured TTL."""
        if len(self._entries) >= self._max_size:
            self._evict()
        self._entries[principal.user_id] = (principal, time.monotonic() + self._ttl)

    def invalidate(self, user_id: uuid.UUID) -> None:
        """Drop one user's cached principal."""
        if self._entries.pop(user_id, None) is not None:
            logger.info("Invalidated cached principal for %s", user_id)

    def clear(self) -> None:
        """Drop every cached principal."""
        self._entries.clear()
        logger.info("Principal cache cleared")

    def __len__(self) -> int:
        return len(self._entries)

    def _evict(self) -> None:
        now = time.monotonic()
        expired = [key for key, (_, exp) in self._entries.items() if exp <= now]
        for key in expired:
            del self._entries[key]
        if len(self._entries) >= self._max_size:
            # Still full: drop the entry closest to expiry
            oldest = min(self._entries, key=lambda key: self._entries[key][1])
            del self._entries[oldest]


principal_cache = PrincipalCache(
    ttl_seconds=settings.principal_cache_ttl_seconds,
    max_size=settings.principal_cache_max_size,
)


def find_active_role_assignments(
    db: Session, user_id: uuid.UUID, now: datetime | None = None
) -> list[UserRole]:
    """Get the assignments that currently grant permissions to a user.

    Only active, unexpired rows pointing at active roles qualify. Revoking
    one row does not affect another active row for the same role.
    """
    now = now or datetime.utcnow()
    return (
        db.query(UserRole)
        .join(Role, UserRole.role_id == Role.id)
        .filter(
            UserRole.user_id == user_id,
            UserRole.is_active.is_(True),
            sa.or_(UserRole.expires_at.is_(None), UserRole.expires_at > now),
            Role.is_active.is_(True),
        )
        .options(
            joinedload(UserRole.role)
            .joinedload(Role.permissions)
            .joinedload(RolePermission.permission)
        )
        .all()
    )


def collect_permissions(assignments: list[UserRole]) -> set[str]:
    """Union of permission names reachable through the given assignments."""
    names: set[str] = set()
    for assignment in assignments:
        for role_permission in assignment.role.permissions:
            names.add(role_permission.permission.name)
    return names


def principal_from_user(db: Session, user: User) -> Principal:
    """Build a principal for a loaded user from its current assignments."""
    assignments = find_active_role_assignments(db, user.id)
    return build_principal(
        user_id=user.id,
        role=user.role,
        permissions=collect_permissions(assignments),
        organization_id=user.organization_id,
        department_id=user.department_id,
        username=user.username,
        email=user.email,
    )


def load_principal(db: Session, user_id: uuid.UUID) -> Principal:
    """Get the principal for a user id, from cache when fresh."""
    cached = principal_cache.get(user_id)
    if cached is not None:
        return cached

    user = auth_service.get_user_by_id(db, user_id)
    if not user or not user.is_active:
        raise Unauthenticated("User not found or inactive")

    principal = principal_from_user(db, user)
    principal_cache.set(principal)
    return principal


def reload_principal(db: Session, user_id: uuid.UUID) -> Principal:
    """Drop the cached principal of a user and load it again from the store."""
    invalidate_user(user_id)
    try:
        return load_principal(db, user_id)
    except (SQLAlchemyError, LookupError, ValueError) as exc:
        logger.exception(
            "Principal lookup failed (user_id=%s, operation=reload)", user_id
        )
        raise InternalLookupError("Identity store unavailable") from exc


def invalidate_user(user_id: uuid.UUID) -> None:
    """Forget the cached principal of one user."""
    principal_cache.invalidate(user_id)


def invalidate_all() -> None:
    """Forget every cached principal."""
    principal_cache.clear()


class IdentityProvider(Protocol):
    """Turns the request's session token into a principal."""

    def resolve(self, db: Session, token: str | None) -> Principal: ...


class SessionIdentityProvider:
    """Production provider backed by the session and role tables."""

    def resolve(self, db: Session, token: str | None) -> Principal:
        if not token:
            raise Unauthenticated("Not authenticated")

        user_id = None
        try:
            session = auth_service.get_session(db, token)
            if not session:
                raise Unauthenticated("Invalid or expired session")
            user_id = session.user_id
            return load_principal(db, user_id)
        except (SQLAlchemyError, LookupError, ValueError) as exc:
            logger.exception(
                "Principal lookup failed (user_id=%s, operation=resolve)", user_id
            )
            raise InternalLookupError("Identity store unavailable") from exc


class DevIdentityProvider:
    """Development provider that always returns a fixed super admin.

    Only ever selected by ``build_identity_provider`` outside production.
    """

    def __init__(self, principal: Principal | None = None) -> None:
        self.principal = principal or build_principal(
            user_id=DEV_PRINCIPAL_ID,
            role=UserRoleTier.SUPER_ADMIN,
            permissions={WILDCARD},
            username="dev-admin",
            email="dev-admin@localhost",
        )

    def resolve(self, db: Session, token: str | None) -> Principal:
        return self.principal


def build_identity_provider(config: Settings) -> IdentityProvider:
    """Pick the identity provider once, at application startup."""
    if config.dev_auth_bypass and not config.is_production:
        logger.warning(
            "Development authentication bypass is active (environment=%s)",
            config.environment,
        )
        return DevIdentityProvider()
    return SessionIdentityProvider()
