"""
Media Approval Service
Upload -> pending -> approved | rejected, with soft delete orthogonal to approval.
Only approved, non-deleted media is ever shown publicly.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import NotFound, ValidationError
from app.core.policy import (
    Action, ResourceDescriptor, ensure_allowed, describe_media, describe_property,
)
from app.models.media import Media, MediaKind
from app.models.property import Property, ApprovalStatus
from app.models.user import User
from app.services.events import AuditEvent, Outcome, notify_many
from app.services.property_service import active_admin_ids, get_live_property
from app.services.storage import IncomingFile, LocalStorage

logger = logging.getLogger(__name__)

ADMIN_LIST_LIMIT = 300


def media_kind_for(content_type: Optional[str]) -> Optional[MediaKind]:
    """image/* -> photo, video/* -> video, anything else unsupported (None)"""
    mime = (content_type or "").lower()
    if mime.startswith("image/"):
        return MediaKind.PHOTO
    if mime.startswith("video/"):
        return MediaKind.VIDEO
    return None


def serialize_media(media: Media, full: bool = False) -> Dict[str, Any]:
    data = {
        "id": media.id,
        "kind": media.kind,
        "url": media.url,
        "thumb_url": media.thumb_url,
        "created_at": media.created_at,
    }
    if full:
        data.update({
            "property_id": media.property_id,
            "mime_type": media.mime_type,
            "size_bytes": media.size_bytes,
            "approval_status": media.approval_status,
            "uploaded_by": media.uploaded_by,
        })
    return data


class MediaService:
    def __init__(self, db: Session, storage: Optional[LocalStorage] = None):
        self.db = db
        self.storage = storage or LocalStorage()

    # ── Loaders ──────────────────────────────────────────────────────────

    def _get_live_media(self, media_id: int) -> Media:
        media = self.db.execute(
            select(Media).where(Media.id == media_id, Media.deleted_at.is_(None))
        ).scalar_one_or_none()
        if media is None:
            raise NotFound("Media not found")
        # Media of a soft-deleted listing is gone with it
        get_live_property(self.db, media.property_id)
        return media

    # ── Upload ───────────────────────────────────────────────────────────

    def upload(self, actor: User, property_id: int, files: List[IncomingFile]) -> Outcome:
        prop = get_live_property(self.db, property_id)
        ensure_allowed(actor, describe_property(prop), Action.MEDIA_UPLOAD)

        if not files:
            raise ValidationError("No files uploaded")
        if len(files) > settings.MAX_UPLOAD_FILES:
            raise ValidationError(f"At most {settings.MAX_UPLOAD_FILES} files per upload")

        created: List[Media] = []
        for incoming in files:
            kind = media_kind_for(incoming.content_type)
            if kind is None:
                logger.info(f"[MEDIA] Skipping unsupported file {incoming.filename!r} ({incoming.content_type})")
                continue

            stored = self.storage.save(incoming, make_thumbnail=kind == MediaKind.PHOTO)
            media = Media(
                property_id=prop.id,
                uploaded_by=actor.id,
                kind=kind,
                url=stored.url,
                thumb_url=stored.thumb_url,
                mime_type=incoming.content_type,
                size_bytes=incoming.size,
                approval_status=ApprovalStatus.PENDING,
            )
            self.db.add(media)
            created.append(media)

        self.db.commit()

        events = [
            AuditEvent(
                actor.id,
                "MEDIA_UPLOADED",
                "media",
                m.id,
                {"propertyId": prop.id, "kind": m.kind.value, "mime": m.mime_type, "size": m.size_bytes},
            )
            for m in created
        ]
        if created:
            events += notify_many(
                active_admin_ids(self.db),
                "approval",
                "Media pending approval",
                f'New media uploaded for "{prop.title}" requires approval.',
                "property",
                prop.id,
            )

        logger.info(f"[MEDIA] {len(created)}/{len(files)} file(s) stored for property {prop.id}")
        return Outcome(
            {
                "uploaded": [
                    {"id": m.id, "kind": m.kind, "url": m.url, "thumbUrl": m.thumb_url}
                    for m in created
                ],
                "approval_status": ApprovalStatus.PENDING.value,
            },
            events,
        )

    # ── Moderation ───────────────────────────────────────────────────────

    def _moderation_targets(self, media: Media) -> List[Optional[int]]:
        prop = media.listing
        return [media.uploaded_by, prop.owner_id, prop.broker_id]

    def approve(self, actor: User, media_id: int) -> Outcome:
        media = self._get_live_media(media_id)
        ensure_allowed(actor, describe_media(media, media.listing), Action.MEDIA_MODERATE)

        # Idempotent: a second approval emits nothing
        if media.approval_status == ApprovalStatus.APPROVED:
            return Outcome({"mediaId": media.id, "approval_status": ApprovalStatus.APPROVED.value})

        media.approval_status = ApprovalStatus.APPROVED
        self.db.commit()

        events = [
            AuditEvent(actor.id, "MEDIA_APPROVED", "media", media.id, {"propertyId": media.property_id}),
            *notify_many(
                self._moderation_targets(media),
                "approval",
                "Media approved",
                f'Media for "{media.listing.title}" has been approved and is now visible.',
                "media",
                media.id,
            ),
        ]
        return Outcome({"mediaId": media.id, "approval_status": ApprovalStatus.APPROVED.value}, events)

    def reject(self, actor: User, media_id: int, reason: str) -> Outcome:
        media = self._get_live_media(media_id)
        ensure_allowed(actor, describe_media(media, media.listing), Action.MEDIA_MODERATE)

        media.approval_status = ApprovalStatus.REJECTED
        self.db.commit()

        events = [
            AuditEvent(
                actor.id, "MEDIA_REJECTED", "media", media.id,
                {"propertyId": media.property_id, "reason": reason},
            ),
            *notify_many(
                self._moderation_targets(media),
                "approval",
                "Media rejected",
                f'Media for "{media.listing.title}" was rejected: {reason}',
                "media",
                media.id,
            ),
        ]
        return Outcome({"mediaId": media.id, "approval_status": ApprovalStatus.REJECTED.value}, events)

    # ── Soft delete ──────────────────────────────────────────────────────

    def soft_delete(self, actor: User, media_id: int) -> Outcome:
        media = self._get_live_media(media_id)
        ensure_allowed(actor, describe_media(media, media.listing), Action.MEDIA_DELETE)

        media.deleted_at = datetime.now(timezone.utc)
        self.db.commit()

        return Outcome(
            {"mediaId": media.id, "deleted": True},
            [AuditEvent(actor.id, "MEDIA_DELETED", "media", media.id)],
        )

    # ── Reads ────────────────────────────────────────────────────────────

    def list_public(self, property_id: int) -> List[Dict[str, Any]]:
        stmt = (
            select(Media)
            .join(Property, Property.id == Media.property_id)
            .where(
                Media.property_id == property_id,
                Media.deleted_at.is_(None),
                Media.approval_status == ApprovalStatus.APPROVED,
                Property.deleted_at.is_(None),
            )
            .order_by(Media.created_at.desc(), Media.id.desc())
        )
        return [serialize_media(m) for m in self.db.execute(stmt).scalars()]

    def list_for_admin(self, actor: User, status: Optional[str] = None,
                       property_id: Optional[int] = None) -> List[Dict[str, Any]]:
        ensure_allowed(actor, ResourceDescriptor(), Action.MEDIA_MODERATE)

        stmt = select(Media).where(Media.deleted_at.is_(None))
        if status:
            stmt = stmt.where(Media.approval_status == ApprovalStatus(status))
        if property_id is not None:
            stmt = stmt.where(Media.property_id == property_id)
        stmt = stmt.order_by(Media.created_at.desc(), Media.id.desc()).limit(ADMIN_LIST_LIMIT)
        return [serialize_media(m, full=True) for m in self.db.execute(stmt).scalars()]
