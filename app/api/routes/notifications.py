"""
Notification inbox and announcements
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.services.moderation_service import ModerationService
from app.services.notification_service import NotificationService

router = APIRouter()
announcements_router = APIRouter()


@router.get("")
def list_notifications(
    unread: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"ok": True, "notifications": NotificationService(db).list_mine(current_user, unread_only=unread)}


# Declared before /{notification_id}/read so "read-all" is never parsed as an id
@router.patch("/read-all")
def mark_all_read(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return {"ok": True, **NotificationService(db).mark_all_read(current_user)}


@router.patch("/{notification_id}/read")
def mark_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"ok": True, **NotificationService(db).mark_read(current_user, notification_id)}


@announcements_router.get("")
def list_announcements(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return {"ok": True, "announcements": ModerationService(db).list_announcements(current_user)}
