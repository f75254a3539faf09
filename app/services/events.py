"""
Post-commit side effects: audit entries and inbox notifications.

Workflow services never write audit or notification rows themselves. They
return an Outcome whose events list is handed to EventDispatcher once the
primary transition has been committed. Dispatch is fire-and-forget: a failed
event is logged and rolled back on its own, the transition stays committed.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from sqlalchemy.orm import Session

from app.models.audit_log import AuditLog
from app.models.notification import Notification

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditEvent:
    actor_id: Optional[int]
    action: str
    entity_type: str
    entity_id: Optional[int] = None
    meta: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class NotificationEvent:
    user_id: int
    type: str
    title: str
    message: str
    ref_type: Optional[str] = None
    ref_id: Optional[int] = None


Event = Union[AuditEvent, NotificationEvent]


@dataclass
class Outcome:
    """Result payload of a workflow operation plus the events it produced."""
    data: Dict[str, Any] = field(default_factory=dict)
    events: List[Event] = field(default_factory=list)


def notify_many(
    user_ids: Iterable[Optional[int]],
    type: str,
    title: str,
    message: str,
    ref_type: Optional[str] = None,
    ref_id: Optional[int] = None,
) -> List[NotificationEvent]:
    """One notification per distinct, non-null recipient, first-seen order."""
    seen = []
    for user_id in user_ids:
        if user_id is not None and user_id not in seen:
            seen.append(user_id)
    return [
        NotificationEvent(user_id, type, title, message, ref_type, ref_id)
        for user_id in seen
    ]


def record_audit(db: Session, event: AuditEvent) -> AuditLog:
    entry = AuditLog(
        actor_id=event.actor_id,
        action=event.action,
        entity_type=event.entity_type,
        entity_id=event.entity_id,
        meta=event.meta,
    )
    db.add(entry)
    return entry


def notify(db: Session, event: NotificationEvent) -> Notification:
    row = Notification(
        user_id=event.user_id,
        type=event.type,
        title=event.title,
        message=event.message,
        ref_type=event.ref_type,
        ref_id=event.ref_id,
    )
    db.add(row)
    return row


class EventDispatcher:
    """Writes events in list order, one commit per event."""

    def __init__(self, db: Session):
        self.db = db

    def dispatch(self, events: Iterable[Event]) -> int:
        """
        Persist every event, skipping failures.

        Returns:
            Number of events written.
        """
        written = 0
        for event in events:
            try:
                if isinstance(event, AuditEvent):
                    record_audit(self.db, event)
                else:
                    notify(self.db, event)
                self.db.commit()
                written += 1
            except Exception as exc:
                logger.error(f"[EVENTS] Failed to write {type(event).__name__} {event}: {exc}")
                self.db.rollback()
        return written

    def dispatch_outcome(self, outcome: Outcome) -> Dict[str, Any]:
        self.dispatch(outcome.events)
        return outcome.data
