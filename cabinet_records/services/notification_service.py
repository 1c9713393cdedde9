"""Notification dispatch for record events.

Notifications are persisted inbox entries. Dispatch never raises: a failed
insert is logged and dropped so the record operation that triggered it is
unaffected.
"""

import logging
from typing import Optional

import sqlalchemy.exc
from sqlalchemy.orm import Session

from ..models.activity import Notification

logger = logging.getLogger(__name__)

RECORD_ENTITY = "record"


def notify(
    db: Session,
    user_id: str,
    title: str,
    message: str,
    type: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
) -> Optional[Notification]:
    """Create one notification. Returns None when the insert failed."""
    try:
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            entity_type=entity_type,
            entity_id=entity_id,
        )
        db.add(notification)
        db.commit()
        return notification
    except sqlalchemy.exc.SQLAlchemyError as e:
        logger.warning("Failed to create notification for user %s: %s", user_id, e)
        db.rollback()
        return None


def notify_record_approved(db: Session, user_id: str, record_id: str, record_title: str) -> Optional[Notification]:
    return notify(
        db,
        user_id=user_id,
        title="Record Approved",
        message=f'Your record "{record_title}" has been approved.',
        type="record_approval",
        entity_type=RECORD_ENTITY,
        entity_id=record_id,
    )


def notify_record_rejected(
    db: Session, user_id: str, record_id: str, record_title: str, reason: str = ""
) -> Optional[Notification]:
    message = f'Your record "{record_title}" has been rejected.'
    if reason:
        message += f" Reason: {reason}"
    return notify(
        db,
        user_id=user_id,
        title="Record Rejected",
        message=message,
        type="record_rejection",
        entity_type=RECORD_ENTITY,
        entity_id=record_id,
    )


def get_for_user(db: Session, user_id: str, unread_only: bool = False, limit: int = 50) -> list[Notification]:
    """Get a user's notifications, newest first."""
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc()).limit(limit).all()
