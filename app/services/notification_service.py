"""
Notification inbox: list, mark one read, mark all read.
"""
import logging
from typing import Any, Dict, List

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.core.exceptions import NotFound
from app.core.policy import Action, ensure_allowed, describe_notification
from app.db.base import utcnow
from app.models.notification import Notification
from app.models.user import User

logger = logging.getLogger(__name__)

INBOX_LIMIT = 200


def serialize_notification(n: Notification) -> Dict[str, Any]:
    return {
        "id": n.id,
        "type": n.type,
        "title": n.title,
        "message": n.message,
        "ref_type": n.ref_type,
        "ref_id": n.ref_id,
        "read_at": n.read_at,
        "created_at": n.created_at,
    }


class NotificationService:
    def __init__(self, db: Session):
        self.db = db

    def list_mine(self, actor: User, unread_only: bool = False) -> List[Dict[str, Any]]:
        stmt = select(Notification).where(Notification.user_id == actor.id)
        if unread_only:
            stmt = stmt.where(Notification.read_at.is_(None))
        stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(INBOX_LIMIT)
        return [serialize_notification(n) for n in self.db.execute(stmt).scalars()]

    def mark_read(self, actor: User, notification_id: int) -> Dict[str, Any]:
        notification = self.db.get(Notification, notification_id)
        if notification is None:
            raise NotFound("Notification not found")
        ensure_allowed(actor, describe_notification(notification), Action.NOTIFICATION_MANAGE)

        if notification.read_at is None:
            notification.read_at = utcnow()
            self.db.commit()
        return {"read": True}

    def mark_all_read(self, actor: User) -> Dict[str, Any]:
        result = self.db.execute(
            update(Notification)
            .where(Notification.user_id == actor.id, Notification.read_at.is_(None))
            .values(read_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        logger.debug(f"[NOTIFY] Marked {result.rowcount} notification(s) read for user {actor.id}")
        return {"readAll": True, "updated": result.rowcount}
