# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""API dependencies for dependency injection."""

import logging
from collections.abc import Callable

from fastapi import Cookie, Depends, Request
from sqlalchemy.orm import Session

from src.database import get_db
from src.models.enums import UserRoleTier
from src.rbac.exceptions import AuthorizationDenied
from src.rbac.permissions import permission_name
from src.rbac.principal import Principal, has_permission, has_role
from src.services.principal_service import IdentityProvider, SessionIdentityProvider

logger = logging.getLogger(__name__)

__all__ = [
    "get_db",
    "get_identity_provider",
    "get_principal",
    "require_permission",
    "require_role",
]

SESSION_COOKIE = "session"


def get_identity_provider(request: Request) -> IdentityProvider:
    """Return the provider chosen at startup."""
    provider = getattr(request.app.state, "identity_provider", None)
    if provider is None:
        # Fail closed to the production provider
        return SessionIdentityProvider()
    return provider


def get_principal(
    request: Request,
    db: Session = Depends(get_db),
    session: str | None = Cookie(default=None),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> Principal:
    """Resolve the calling principal and attach it to the request."""
    principal = getattr(request.state, "principal", None)
    if principal is not None:
        return principal

    principal = provider.resolve(db, session)
    request.state.principal = principal
    return principal


def require_permission(resource: str, action: str) -> Callable[..., Principal]:
    """Dependency for permission-based authorization."""

    def dependency(principal: Principal = Depends(get_principal)) -> Principal:
        if not has_permission(principal, resource, action):
            logger.info(
                "Denied %s to user %s",
                permission_name(resource, action),
                principal.user_id,
            )
            raise AuthorizationDenied(
                f"Permission denied: {permission_name(resource, action)}"
            )
        return principal

    return dependency


def require_role(*tiers: UserRoleTier) -> Callable[..., Principal]:
    """Dependency that admits super users and the listed role tiers."""

    def dependency(principal: Principal = Depends(get_principal)) -> Principal:
        if not has_role(principal, *tiers):
            raise AuthorizationDenied("Insufficient role permissions")
        return principal

    return dependency
