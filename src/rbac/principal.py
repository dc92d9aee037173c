# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Resolved principal and permission evaluation."""

import uuid
from dataclasses import dataclass, field

from src.models.enums import UserRoleTier
from src.rbac.permissions import WILDCARD, permission_name


@dataclass(frozen=True)
class TierCapabilities:
    """Capability flags granted by a role tier."""

    is_super_user: bool
    can_cross_organizations: bool
    can_cross_departments: bool


# Every tier must appear here; build_principal refuses unknown tiers.
TIER_CAPABILITIES: dict[UserRoleTier, TierCapabilities] = {
    UserRoleTier.SUPER_ADMIN: TierCapabilities(True, True, True),
    UserRoleTier.SYSTEM_ADMIN: TierCapabilities(False, True, True),
    UserRoleTier.SYSTEM_AGENT: TierCapabilities(False, False, False),
    UserRoleTier.COMPANY_ADMIN: TierCapabilities(False, False, True),
    UserRoleTier.COMPANY_MANAGER: TierCapabilities(False, False, True),
    UserRoleTier.COMPANY_AGENT: TierCapabilities(False, False, False),
    UserRoleTier.COMPANY_USER: TierCapabilities(False, False, False),
}


def capabilities_for(role: UserRoleTier) -> TierCapabilities:
    """Return the capability flags of a role tier."""
    try:
        return TIER_CAPABILITIES[UserRoleTier(role)]
    except (KeyError, ValueError) as exc:
        raise ValueError(f"Unknown role tier: {role!r}") from exc


@dataclass(frozen=True)
class Principal:
    """The authenticated actor of one request.

    Built once per request (or taken from the short-lived cache) and passed
    explicitly to everything that makes an access decision.
    """

    user_id: uuid.UUID
    role: UserRoleTier
    organization_id: uuid.UUID | None = None
    department_id: uuid.UUID | None = None
    username: str | None = None
    email: str | None = None
    is_super_user: bool = False
    can_cross_organizations: bool = False
    can_cross_departments: bool = False
    permissions: frozenset[str] = field(default_factory=frozenset)


def build_principal(
    user_id: uuid.UUID,
    role: UserRoleTier,
    permissions: set[str] | frozenset[str],
    organization_id: uuid.UUID | None = None,
    department_id: uuid.UUID | None = None,
    username: str | None = None,
    email: str | None = None,
) -> Principal:
    """Create a principal, deriving the capability flags from its tier."""
    caps = capabilities_for(role)
    return Principal(
        user_id=user_id,
        role=UserRoleTier(role),
        organization_id=organization_id,
        department_id=department_id,
        username=username,
        email=email,
        is_super_user=caps.is_super_user,
        can_cross_organizations=caps.can_cross_organizations,
        can_cross_departments=caps.can_cross_departments,
        permissions=frozenset(permissions),
    )


def has_permission(principal: Principal, resource: str, action: str) -> bool:
    """Check whether a principal may perform ``action`` on ``resource``.

    Super users and holders of the wildcard pass unconditionally. Everyone
    else needs the exact ``<action>_<resource>`` name; no prefix matching.
    """
    if principal.is_super_user or WILDCARD in principal.permissions:
        return True
    return permission_name(resource, action) in principal.permissions


def has_role(principal: Principal, *tiers: UserRoleTier) -> bool:
    """Check whether the principal's tier is one of ``tiers``."""
    return principal.is_super_user or principal.role in tiers
