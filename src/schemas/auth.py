# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Authentication schemas."""
import uuid

from pydantic import BaseModel, Field

from src.models.enums import UserRoleTier


class LoginRequest(BaseModel):
    """Schema for login request."""

    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)


class PrincipalResponse(BaseModel):
    """The caller's resolved identity and capabilities."""

    model_config = {"from_attributes": True}

    user_id: uuid.UUID
    username: str | None = None
    email: str | None = None
    role: UserRoleTier
    organization_id: uuid.UUID | None = None
    department_id: uuid.UUID | None = None
    is_super_user: bool
    can_cross_organizations: bool
    can_cross_departments: bool
    permissions: list[str]


class AuthResponse(BaseModel):
    """Schema for auth response with principal."""

    principal: PrincipalResponse
