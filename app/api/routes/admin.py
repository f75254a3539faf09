"""
Admin Portal Routes - Moderation
User approval, listing approval, media moderation, audit logs, announcements

Admin-only access is enforced inside ModerationService once the target is
known to exist, so a missing entity answers 404 before a non-admin gets 403.
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.models.property import ApprovalStatus
from app.models.user import User, UserRole, UserStatus
from app.schemas.admin import AnnouncementCreate, RejectReason
from app.services.events import EventDispatcher
from app.services.moderation_service import ModerationService

router = APIRouter()


# ==================== USER MANAGEMENT ====================

@router.get("/users")
def list_users(
    status: Optional[UserStatus] = None,
    role: Optional[UserRole] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return {"ok": True, "users": ModerationService(db).list_users(current_user, status, role)}


@router.patch("/users/{user_id}/approve")
def approve_user(user_id: int, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    outcome = ModerationService(db).approve_user(current_user, user_id)
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}


@router.patch("/users/{user_id}/reject")
def reject_user(
    user_id: int,
    payload: RejectReason,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    outcome = ModerationService(db).reject_user(current_user, user_id, payload.reason)
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}


# ==================== PROPERTY MANAGEMENT ====================

@router.get("/properties")
def list_properties(
    approval_status: Optional[ApprovalStatus] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return {"ok": True, "properties": ModerationService(db).list_properties(current_user, approval_status)}


@router.patch("/properties/{property_id}/approve")
def approve_property(property_id: int, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    outcome = ModerationService(db).approve_property(current_user, property_id)
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}


@router.patch("/properties/{property_id}/reject")
def reject_property(
    property_id: int,
    payload: RejectReason,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    outcome = ModerationService(db).reject_property(current_user, property_id, payload.reason)
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}


# ==================== MEDIA MODERATION ====================

@router.get("/media")
def list_media(
    status: Optional[ApprovalStatus] = None,
    property_id: Optional[int] = Query(None, alias="propertyId"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return {"ok": True, "media": ModerationService(db).list_media(current_user, status, property_id)}


@router.patch("/media/{media_id}/approve")
def approve_media(media_id: int, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    outcome = ModerationService(db).approve_media(current_user, media_id)
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}


@router.patch("/media/{media_id}/reject")
def reject_media(
    media_id: int,
    payload: RejectReason,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    outcome = ModerationService(db).reject_media(current_user, media_id, payload.reason)
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}


# ==================== AUDIT & ANNOUNCEMENTS ====================

@router.get("/audit-logs")
def audit_logs(
    actor_id: Optional[int] = Query(None, alias="actorId"),
    action: Optional[str] = None,
    date_from: Optional[datetime] = Query(None, alias="from"),
    date_to: Optional[datetime] = Query(None, alias="to"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    logs = ModerationService(db).list_audit_logs(current_user, actor_id, action, date_from, date_to)
    return {"ok": True, "logs": logs}


@router.post("/announcements", status_code=status.HTTP_201_CREATED)
def create_announcement(
    payload: AnnouncementCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    outcome = ModerationService(db).create_announcement(
        current_user, payload.title, payload.message, payload.audience, payload.expires_at
    )
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}
