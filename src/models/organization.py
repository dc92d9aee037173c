# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Organization model, the tenant boundary."""

from __future__ import annotations

import uuid as uuid_lib
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Enum, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, TimestampMixin
from src.models.enums import OrganizationType

if TYPE_CHECKING:
    from src.models.department import Department
    from src.models.user import User


class Organization(Base, TimestampMixin):
    """A tenant. Users, departments and tickets belong to at most one."""

    __tablename__ = "organizations"

    id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid_lib.uuid4,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[OrganizationType] = mapped_column(
        Enum(OrganizationType),
        nullable=False,
        default=OrganizationType.CLIENT_COMPANY,
    )
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    departments: Mapped[list[Department]] = relationship(
        "Department",
        back_populates="organization",
        cascade="all, delete-orphan",
    )
    users: Mapped[list[User]] = relationship("User", back_populates="organization")
