"""
Admin Moderation Service
User and listing approval, media moderation (delegated to MediaService),
audit log reads and announcements.

User and property approvals may be re-run in either direction; every run
writes an audit entry and notifies the affected party.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import NotFound, ValidationError
from app.core.policy import Action, ResourceDescriptor, ensure_allowed, describe_property
from app.models.audit_log import AuditLog
from app.models.notification import Announcement
from app.models.property import Property, ApprovalStatus
from app.models.user import User, UserRole, UserStatus
from app.db.base import utcnow
from app.services.events import AuditEvent, Outcome, notify_many
from app.services.media_service import MediaService
from app.services.property_service import get_live_property

logger = logging.getLogger(__name__)

USER_LIST_LIMIT = 300
PROPERTY_LIST_LIMIT = 300
AUDIT_LIST_LIMIT = 500

AUDIENCE_TAGS = frozenset({"all", "customer", "broker", "owner", "photographer"})

# Admin-only actions carry no ownership, an empty descriptor is enough
_NO_RESOURCE = ResourceDescriptor()


def serialize_user(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "role": user.role,
        "status": user.status,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "created_at": user.created_at,
    }


class ModerationService:
    def __init__(self, db: Session, media: Optional[MediaService] = None):
        self.db = db
        self.media = media or MediaService(db)

    # ── Users ────────────────────────────────────────────────────────────

    def list_users(self, actor: User, status: Optional[str] = None,
                   role: Optional[str] = None) -> List[Dict[str, Any]]:
        ensure_allowed(actor, _NO_RESOURCE, Action.USER_MODERATE)

        stmt = select(User)
        if status:
            stmt = stmt.where(User.status == UserStatus(status))
        if role:
            stmt = stmt.where(User.role == UserRole(role))
        stmt = stmt.order_by(User.created_at.desc(), User.id.desc()).limit(USER_LIST_LIMIT)
        return [serialize_user(u) for u in self.db.execute(stmt).scalars()]

    def _set_user_status(self, actor: User, user_id: int, status: UserStatus,
                         reason: Optional[str] = None) -> Outcome:
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFound("User not found")
        ensure_allowed(actor, _NO_RESOURCE, Action.USER_MODERATE)

        user.status = status
        self.db.commit()
        logger.info(f"[ADMIN] User {user.id} set to {status.value} by {actor.id}")

        if status == UserStatus.ACTIVE:
            audit = AuditEvent(actor.id, "USER_APPROVED", "user", user.id)
            title, message = "Account approved", "Your account has been approved."
        else:
            audit = AuditEvent(actor.id, "USER_REJECTED", "user", user.id, {"reason": reason})
            title, message = "Account rejected", f"Rejected: {reason}"

        events = [audit, *notify_many([user.id], "approval", title, message)]
        return Outcome({"userId": user.id, "status": status.value}, events)

    def approve_user(self, actor: User, user_id: int) -> Outcome:
        return self._set_user_status(actor, user_id, UserStatus.ACTIVE)

    def reject_user(self, actor: User, user_id: int, reason: str) -> Outcome:
        return self._set_user_status(actor, user_id, UserStatus.REJECTED, reason)

    # ── Properties ───────────────────────────────────────────────────────

    def list_properties(self, actor: User, approval_status: Optional[str] = None) -> List[Dict[str, Any]]:
        ensure_allowed(actor, _NO_RESOURCE, Action.PROPERTY_MODERATE)

        stmt = select(Property).where(Property.deleted_at.is_(None))
        if approval_status:
            stmt = stmt.where(Property.approval_status == ApprovalStatus(approval_status))
        stmt = stmt.order_by(Property.created_at.desc(), Property.id.desc()).limit(PROPERTY_LIST_LIMIT)
        return [
            {
                "id": p.id,
                "title": p.title,
                "price": p.price,
                "type": p.type,
                "location": p.location,
                "area": p.area,
                "approval_status": p.approval_status,
                "created_at": p.created_at,
            }
            for p in self.db.execute(stmt).scalars()
        ]

    def _set_property_status(self, actor: User, property_id: int, status: ApprovalStatus,
                             reason: Optional[str] = None) -> Outcome:
        prop = get_live_property(self.db, property_id)
        ensure_allowed(actor, describe_property(prop), Action.PROPERTY_MODERATE)

        prop.approval_status = status
        self.db.commit()
        logger.info(f"[ADMIN] Property {prop.id} set to {status.value} by {actor.id}")

        if status == ApprovalStatus.APPROVED:
            audit = AuditEvent(actor.id, "PROPERTY_APPROVED", "property", prop.id)
            title, message = "Listing approved", f'Your property "{prop.title}" has been approved.'
        else:
            audit = AuditEvent(actor.id, "PROPERTY_REJECTED", "property", prop.id, {"reason": reason})
            title, message = "Listing rejected", f'Your property "{prop.title}" was rejected: {reason}'

        events = [
            audit,
            *notify_many([prop.responsible_party_id], "approval", title, message, "property", prop.id),
        ]
        return Outcome({"propertyId": prop.id, "approval_status": status.value}, events)

    def approve_property(self, actor: User, property_id: int) -> Outcome:
        return self._set_property_status(actor, property_id, ApprovalStatus.APPROVED)

    def reject_property(self, actor: User, property_id: int, reason: str) -> Outcome:
        return self._set_property_status(actor, property_id, ApprovalStatus.REJECTED, reason)

    # ── Media ────────────────────────────────────────────────────────────

    def list_media(self, actor: User, status: Optional[str] = None,
                   property_id: Optional[int] = None) -> List[Dict[str, Any]]:
        return self.media.list_for_admin(actor, status, property_id)

    def approve_media(self, actor: User, media_id: int) -> Outcome:
        return self.media.approve(actor, media_id)

    def reject_media(self, actor: User, media_id: int, reason: str) -> Outcome:
        return self.media.reject(actor, media_id, reason)

    # ── Audit log ────────────────────────────────────────────────────────

    def list_audit_logs(self, actor: User, actor_id: Optional[int] = None, action: Optional[str] = None,
                        date_from: Optional[datetime] = None,
                        date_to: Optional[datetime] = None) -> List[Dict[str, Any]]:
        ensure_allowed(actor, _NO_RESOURCE, Action.AUDIT_READ)

        stmt = select(AuditLog)
        if actor_id is not None:
            stmt = stmt.where(AuditLog.actor_id == actor_id)
        if action:
            stmt = stmt.where(AuditLog.action == action)
        if date_from is not None:
            stmt = stmt.where(AuditLog.created_at >= date_from)
        if date_to is not None:
            stmt = stmt.where(AuditLog.created_at <= date_to)
        stmt = stmt.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(AUDIT_LIST_LIMIT)
        return [
            {
                "id": log.id,
                "actor_id": log.actor_id,
                "action": log.action,
                "entity_type": log.entity_type,
                "entity_id": log.entity_id,
                "meta": log.meta,
                "created_at": log.created_at,
            }
            for log in self.db.execute(stmt).scalars()
        ]

    # ── Announcements ────────────────────────────────────────────────────

    def create_announcement(self, actor: User, title: str, message: str, audience: List[str],
                            expires_at: Optional[datetime] = None) -> Outcome:
        ensure_allowed(actor, _NO_RESOURCE, Action.ANNOUNCEMENT_CREATE)

        if not audience:
            raise ValidationError("audience must contain at least one tag")
        unknown = sorted(set(audience) - AUDIENCE_TAGS)
        if unknown:
            raise ValidationError(f"Unknown audience tag(s): {', '.join(unknown)}")

        announcement = Announcement(
            title=title,
            message=message,
            audience=list(dict.fromkeys(audience)),
            expires_at=expires_at,
            created_by=actor.id,
        )
        self.db.add(announcement)
        self.db.commit()
        self.db.refresh(announcement)

        return Outcome(
            {"announcementId": announcement.id},
            [AuditEvent(actor.id, "ANNOUNCEMENT_CREATED", "announcement", announcement.id)],
        )

    def list_announcements(self, actor: User) -> List[Dict[str, Any]]:
        """Unexpired announcements addressed to everyone or to the actor's role."""
        now = utcnow()
        role = UserRole(actor.role).value
        stmt = (
            select(Announcement)
            .where((Announcement.expires_at.is_(None)) | (Announcement.expires_at > now))
            .order_by(Announcement.created_at.desc(), Announcement.id.desc())
        )
        return [
            {
                "id": a.id,
                "title": a.title,
                "message": a.message,
                "audience": a.audience,
                "expires_at": a.expires_at,
                "created_at": a.created_at,
            }
            for a in self.db.execute(stmt).scalars()
            if actor.role == UserRole.ADMIN or "all" in a.audience or role in a.audience
        ]
