import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session, Query

from app.models.communication import Notification

logger = logging.getLogger(__name__)


def notify(
    db: Session,
    title: str,
    message: str,
    notification_type: str = "general",
    user_id: Optional[UUID] = None,
) -> Notification:
    """Queue a notification on the session; the caller commits."""
    notification = Notification(
        user_id=user_id,
        title=title,
        message=message,
        notification_type=notification_type,
        is_read=False,
    )
    db.add(notification)
    return notification


def notify_safely(
    db: Session,
    title: str,
    message: str,
    notification_type: str = "general",
    user_id: Optional[UUID] = None,
) -> Optional[Notification]:
    """Write a notification inside a savepoint so a failure leaves the
    surrounding transaction usable."""
    try:
        with db.begin_nested():
            notification = notify(db, title, message, notification_type, user_id)
        return notification
    except Exception:
        logger.warning("Notification error: could not record %r", title, exc_info=True)
        return None


def visible_to(db: Session, user_id: UUID) -> Query:
    """Notifications addressed to the user plus broadcasts."""
    return db.query(Notification).filter(
        or_(Notification.user_id.is_(None), Notification.user_id == user_id)
    )
