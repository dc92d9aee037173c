# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Ticket schemas."""
import datetime
import uuid

from pydantic import BaseModel, Field, field_validator

from src.models.enums import TicketPriority, TicketStatus, TicketType


class TicketBase(BaseModel):
    """Base ticket schema."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    priority: TicketPriority = TicketPriority.MEDIUM
    type: TicketType = TicketType.SUPPORT
    customer_id: int | None = None
    assignee_id: uuid.UUID | None = None
    client_responsible_id: uuid.UUID | None = None
    due_date: datetime.datetime | None = None


class TicketCreate(TicketBase):
    """Schema for creating a ticket.

    Organization and department default to the caller's own.
    """

    organization_id: uuid.UUID | None = None
    department_id: uuid.UUID | None = None


class TicketUpdate(BaseModel):
    """Schema for updating a ticket. The organization cannot change."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    status: TicketStatus | None = None
    priority: TicketPriority | None = None
    type: TicketType | None = None
    department_id: uuid.UUID | None = None
    assignee_id: uuid.UUID | None = None
    client_responsible_id: uuid.UUID | None = None
    due_date: datetime.datetime | None = None

    @field_validator("title", "status", "priority", "type")
    @classmethod
    def validate_not_null(cls, v):
        """Reject explicit nulls; omit the field to leave it unchanged."""
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class TicketResponse(TicketBase):
    """Schema for ticket response."""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    status: TicketStatus
    organization_id: uuid.UUID | None = None
    department_id: uuid.UUID | None = None
    created_by_id: uuid.UUID | None = None
    resolved_at: datetime.datetime | None = None
    created_at: datetime.datetime
    updated_at: datetime.datetime
