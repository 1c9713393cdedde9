"""Activity logging service: records state-changing record operations.

Entries are immutable. The service provides a write-only interface for the
record services and a read interface for activity feeds.

Usage in service layer:
    activity_service.log(db, user_id="abc", action=ActivityType.UPDATE,
                         resource_type=ResourceType.RECORD, resource_id="rec-1",
                         resource_name="Invoice 42", details="Record updated")
"""

import logging
from typing import Optional

import sqlalchemy.exc
from sqlalchemy.orm import Session

from ..models.activity import ActivityLog, ActivityType, ResourceType

logger = logging.getLogger(__name__)


def log(
    db: Session,
    user_id: Optional[str],
    action: ActivityType,
    resource_type: ResourceType,
    resource_id: Optional[str] = None,
    resource_name: Optional[str] = None,
    details: Optional[str] = None,
) -> None:
    """Write an activity entry. Never raises: failures are logged and the entry is dropped."""
    try:
        entry = ActivityLog(
            user_id=user_id,
            action=ActivityType(action).value,
            resource_type=ResourceType(resource_type).value,
            resource_id=resource_id,
            resource_name=resource_name,
            details=details,
        )
        db.add(entry)
        db.commit()
    except sqlalchemy.exc.SQLAlchemyError as e:
        logger.warning("Failed to write activity log: %s", e)
        db.rollback()


def get_by_resource(db: Session, resource_type: ResourceType, resource_id: str, limit: int = 100) -> list[ActivityLog]:
    """Get activity entries for a specific resource, newest first."""
    return (
        db.query(ActivityLog)
        .filter(
            ActivityLog.resource_type == ResourceType(resource_type).value,
            ActivityLog.resource_id == resource_id,
        )
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(limit)
        .all()
    )


def get_by_user(db: Session, user_id: str, limit: int = 100) -> list[ActivityLog]:
    """Get activity entries performed by a specific user, newest first."""
    return (
        db.query(ActivityLog)
        .filter(ActivityLog.user_id == user_id)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(limit)
        .all()
    )
