# src/models/role_permission.py
import datetime
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from src.models.base import Base


class RolePermission(Base):
    """Association table mapping roles to their granted permissions.

    Links are hard-deleted on removal; only user-role history is audited.
    """

    __tablename__ = "role_permissions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    role_id = Column(
        Uuid(as_uuid=True), ForeignKey("roles.id", ondelete="CASCADE"), nullable=False
    )
    permission_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("permissions.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at = Column(DateTime, default=datetime.datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("role_id", "permission_id", name="_role_permission_uc"),
    )

    role = relationship("Role", back_populates="permissions")
    permission = relationship("Permission")
