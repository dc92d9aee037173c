# src/models/permission.py
import datetime
import uuid

from sqlalchemy import Column, DateTime, String, Text, UniqueConstraint, Uuid

from src.models.base import Base

WILDCARD_PERMISSION = "*"


class Permission(Base):
    """A (resource, action) pair identified by a globally unique name.

    Names follow ``<action>_<resource>``; the name ``*`` grants everything.
    """

    __tablename__ = "permissions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), unique=True, nullable=False)
    resource = Column(String(50), nullable=False)
    action = Column(String(50), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("resource", "action", name="_permission_resource_action_uc"),
    )

    @property
    def is_wildcard(self) -> bool:
        """Check if this permission grants everything."""
        return self.name == WILDCARD_PERMISSION
