# src/models/user_role.py
import datetime
import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship

from src.models.base import Base


class UserRole(Base):
    """Assignment of a role to a user, including audit metadata.

    Revoking sets ``is_active`` to False; rows are never deleted, so the same
    (user, role) pair may appear several times over its history.
    """

    __tablename__ = "user_roles"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role_id = Column(
        Uuid(as_uuid=True), ForeignKey("roles.id", ondelete="CASCADE"), nullable=False
    )
    assigned_by_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    assigned_at = Column(DateTime, default=datetime.datetime.utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (Index("ix_user_roles_user_active", "user_id", "is_active"),)

    user = relationship("User", back_populates="user_roles", foreign_keys=[user_id])
    role = relationship("Role", back_populates="user_roles")
    assigned_by = relationship("User", foreign_keys=[assigned_by_id])

    def is_effective(self, now: datetime.datetime | None = None) -> bool:
        """Check if this assignment currently grants its role's permissions."""
        if not self.is_active:
            return False
        if self.expires_at is None:
            return True
        return self.expires_at > (now or datetime.datetime.utcnow())
