"""ActivityLog and Notification models.

ActivityLog records state-changing record operations for accountability.
Notification is a per-user inbox entry.
"""

import uuid
from enum import Enum

from sqlalchemy import Column, Index, String, Text, Integer, Boolean, DateTime
from ..database import Base, utcnow


class ActivityType(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    APPROVE = "approve"
    REJECT = "reject"


class ResourceType(str, Enum):
    RECORD = "record"


class ActivityLog(Base):
    """Immutable record of a state-changing operation.

    Written after the primary transaction commits, never modified or deleted.
    """

    __tablename__ = "activity_log"
    __table_args__ = (
        Index("ix_activity_log_resource", "resource_type", "resource_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), nullable=True)
    action = Column(String(50), nullable=False)
    resource_type = Column(String(50), nullable=False)
    resource_id = Column(String(255), nullable=True)
    resource_name = Column(String(255), nullable=True)
    details = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class Notification(Base):
    """Inbox entry for one user."""

    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_id", "user_id"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(50), nullable=False)
    entity_type = Column(String(50), nullable=True)
    entity_id = Column(String(255), nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
