from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api import deps
from app.core.database import get_db
from app.models import Notification, User
from app.schemas.communication import NotificationCreate, NotificationResponse
from app.services.notifications import notify, visible_to

router = APIRouter()


@router.get("/", response_model=List[NotificationResponse])
def get_notifications(
    limit: int = Query(50, ge=1, le=200),
    unread_only: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
):
    query = visible_to(db, current_user.id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc()).limit(limit).all()


@router.get("/unread-count")
def get_unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
):
    count = visible_to(db, current_user.id).filter(Notification.is_read.is_(False)).count()
    return {"count": count}


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
def mark_as_read(
    notification_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
):
    notification = visible_to(db, current_user.id).filter(Notification.id == notification_id).first()
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification


@router.post("/read-all")
def mark_all_as_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
):
    updated = (
        visible_to(db, current_user.id)
        .filter(Notification.is_read.is_(False))
        .update({"is_read": True}, synchronize_session=False)
    )
    db.commit()
    return {"message": "All notifications marked as read", "updated": updated}


@router.post("/", response_model=NotificationResponse, status_code=201)
def create_notification(
    notification_in: NotificationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_admin),
):
    if notification_in.user_id:
        if not db.query(User).filter(User.id == notification_in.user_id).first():
            raise HTTPException(status_code=404, detail="User not found")
    notification = notify(db, **notification_in.model_dump())
    db.commit()
    db.refresh(notification)
    return notification
