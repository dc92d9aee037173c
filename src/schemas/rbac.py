# src/schemas/rbac.py
import datetime
import uuid

from pydantic import BaseModel, ConfigDict, Field


class PermissionSchema(BaseModel):
    """Schema representing a permission."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    resource: str
    action: str
    description: str | None = None


class PermissionCreateSchema(BaseModel):
    """Schema for registering a permission."""

    resource: str = Field(..., min_length=1, max_length=50, pattern=r"^[a-z_]+$")
    action: str = Field(..., min_length=1, max_length=50, pattern=r"^[a-z_]+$")
    description: str | None = None


class RoleSchema(BaseModel):
    """Schema representing a role."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: str | None = None
    organization_id: uuid.UUID | None = None
    is_system: bool
    is_active: bool


class RoleWithPermissionsSchema(RoleSchema):
    """Schema representing a role along with its permissions."""

    permissions: list[PermissionSchema]


class RoleCreateSchema(BaseModel):
    """Schema for creating a new role."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    organization_id: uuid.UUID | None = None
    permissions: list[str] = []  # List of permission names


class RoleUpdateSchema(BaseModel):
    """Schema for updating a role."""

    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    is_active: bool | None = None
    permissions: list[str] | None = None


class RolePermissionAssignmentSchema(BaseModel):
    """Schema for linking a permission to a role."""

    permission_id: uuid.UUID


class UserRoleSchema(BaseModel):
    """Schema representing one role assignment row."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    role_id: uuid.UUID
    assigned_by_id: uuid.UUID | None = None
    assigned_at: datetime.datetime
    expires_at: datetime.datetime | None = None
    is_active: bool
    role: RoleSchema


class UserRoleAssignmentSchema(BaseModel):
    """Schema for assigning a role to a user."""

    role_id: uuid.UUID
    expires_at: datetime.datetime | None = None
