"""
Analytics Service
Append-only event tracking and per-property counts (views, inquiries, viewings)
over an optional date range.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.exceptions import Forbidden
from app.core.policy import Action, ensure_allowed, describe_property
from app.models.analytics import AnalyticsEvent, AnalyticsEventType, Inquiry
from app.models.property import Property
from app.models.user import User, UserRole
from app.models.viewing import Viewing
from app.services.events import AuditEvent, Outcome
from app.services.property_service import get_live_property

logger = logging.getLogger(__name__)

STATS_PROPERTY_LIMIT = 500


class AnalyticsService:
    def __init__(self, db: Session):
        self.db = db

    def track_event(self, actor: Optional[User], event_type: str, property_id: Optional[int] = None,
                    session_id: Optional[str] = None, meta: Optional[Dict[str, Any]] = None) -> Outcome:
        if property_id is not None:
            get_live_property(self.db, property_id)

        event = AnalyticsEvent(
            type=event_type,
            property_id=property_id,
            user_id=actor.id if actor else None,
            session_id=session_id,
            meta=meta,
        )
        self.db.add(event)
        self.db.commit()

        events = []
        if actor is not None:
            events.append(AuditEvent(
                actor.id, "ANALYTICS_EVENT", "analytics_event", None,
                {"type": event_type, "propertyId": property_id},
            ))
        return Outcome({"recorded": True}, events)

    def _count(self, model, property_id: int, date_from: Optional[datetime],
               date_to: Optional[datetime], *criteria) -> int:
        stmt = select(func.count()).select_from(model).where(model.property_id == property_id, *criteria)
        if date_from is not None:
            stmt = stmt.where(model.created_at >= date_from)
        if date_to is not None:
            stmt = stmt.where(model.created_at <= date_to)
        return self.db.execute(stmt).scalar_one()

    def _metrics(self, property_id: int, date_from: Optional[datetime],
                 date_to: Optional[datetime]) -> Dict[str, int]:
        return {
            "views": self._count(
                AnalyticsEvent, property_id, date_from, date_to,
                AnalyticsEvent.type == AnalyticsEventType.PROPERTY_VIEW.value,
            ),
            "inquiries": self._count(Inquiry, property_id, date_from, date_to),
            "viewings": self._count(Viewing, property_id, date_from, date_to),
        }

    def property_stats(self, actor: User, property_id: int, date_from: Optional[datetime] = None,
                       date_to: Optional[datetime] = None) -> Dict[str, Any]:
        prop = get_live_property(self.db, property_id)
        ensure_allowed(actor, describe_property(prop), Action.PROPERTY_STATS)

        return {"propertyId": prop.id, "metrics": self._metrics(prop.id, date_from, date_to)}

    def my_properties_stats(self, actor: User, date_from: Optional[datetime] = None,
                            date_to: Optional[datetime] = None) -> List[Dict[str, Any]]:
        stmt = select(Property).where(Property.deleted_at.is_(None))
        if actor.role == UserRole.OWNER:
            stmt = stmt.where(Property.owner_id == actor.id)
        elif actor.role == UserRole.BROKER:
            stmt = stmt.where(Property.broker_id == actor.id)
        elif actor.role != UserRole.ADMIN:
            raise Forbidden("Only owners, brokers and admins have property stats")
        stmt = stmt.order_by(Property.created_at.desc(), Property.id.desc()).limit(STATS_PROPERTY_LIMIT)

        return [
            {"propertyId": p.id, "title": p.title, **self._metrics(p.id, date_from, date_to)}
            for p in self.db.execute(stmt).scalars()
        ]
