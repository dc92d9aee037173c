# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Organization and department schemas."""
import uuid

from pydantic import BaseModel, Field, field_validator

from src.models.enums import OrganizationType


class OrganizationCreate(BaseModel):
    """Schema for creating an organization."""

    name: str = Field(..., min_length=1, max_length=255)
    type: OrganizationType = OrganizationType.CLIENT_COMPANY
    email: str | None = Field(None, max_length=255)


class OrganizationUpdate(BaseModel):
    """Schema for updating an organization. The type is fixed."""

    name: str | None = Field(None, min_length=1, max_length=255)
    email: str | None = Field(None, max_length=255)
    is_active: bool | None = None

    @field_validator("name", "is_active")
    @classmethod
    def validate_not_null(cls, v):
        """Reject explicit nulls; omit the field to leave it unchanged."""
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class OrganizationResponse(BaseModel):
    """Schema for organization response."""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    name: str
    type: OrganizationType
    email: str | None = None
    is_active: bool


class DepartmentCreate(BaseModel):
    """Schema for creating a department."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    organization_id: uuid.UUID


class DepartmentUpdate(BaseModel):
    """Schema for updating a department."""

    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    is_active: bool | None = None

    @field_validator("name", "is_active")
    @classmethod
    def validate_not_null(cls, v):
        """Reject explicit nulls; omit the field to leave it unchanged."""
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class DepartmentUserAssignment(BaseModel):
    """Schema for moving a user into a department."""

    user_id: uuid.UUID


class DepartmentResponse(BaseModel):
    """Schema for department response."""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    name: str
    description: str | None = None
    organization_id: uuid.UUID
    is_active: bool
