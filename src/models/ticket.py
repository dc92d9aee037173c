# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Ticket model, the protected resource of the help desk."""

from __future__ import annotations

import uuid as uuid_lib
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, TimestampMixin
from src.models.enums import TicketPriority, TicketStatus, TicketType

if TYPE_CHECKING:
    from src.models.department import Department
    from src.models.organization import Organization
    from src.models.user import User


class Ticket(Base, TimestampMixin):
    """Support ticket.

    Belongs to at most one organization and one department. Who may see it
    is derived from the viewer's principal, never stored on the row.
    """

    __tablename__ = "tickets"

    id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid_lib.uuid4,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[TicketStatus] = mapped_column(
        Enum(TicketStatus), default=TicketStatus.OPEN, nullable=False, index=True
    )
    priority: Mapped[TicketPriority] = mapped_column(
        Enum(TicketPriority), default=TicketPriority.MEDIUM, nullable=False
    )
    type: Mapped[TicketType] = mapped_column(
        Enum(TicketType), default=TicketType.SUPPORT, nullable=False
    )
    organization_id: Mapped[uuid_lib.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    department_id: Mapped[uuid_lib.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("departments.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    # Customers live outside this service
    customer_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_by_id: Mapped[uuid_lib.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    assignee_id: Mapped[uuid_lib.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    client_responsible_id: Mapped[uuid_lib.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    due_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    __table_args__ = (Index("ix_tickets_created_at", "created_at"),)

    # Relationships
    organization: Mapped[Organization | None] = relationship("Organization")
    department: Mapped[Department | None] = relationship("Department")
    created_by: Mapped[User | None] = relationship(
        "User", foreign_keys=[created_by_id]
    )
    assignee: Mapped[User | None] = relationship("User", foreign_keys=[assignee_id])
    client_responsible: Mapped[User | None] = relationship(
        "User", foreign_keys=[client_responsible_id]
    )
