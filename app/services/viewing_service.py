"""
Viewing Service
ViewingRequest (pending -> accepted) and Viewing (upcoming -> cancelled,
reschedule as a same-state mutation).

Turning a request into a viewing is one transaction: the request flip is a
conditional UPDATE guarded on status='pending' and the viewing insert relies on
the unique request_id, so concurrent schedulers cannot produce two viewings.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import BadRequest, NotFound, ValidationError
from app.core.policy import Action, ensure_allowed, describe_request, describe_viewing
from app.models.property import Property
from app.models.user import User, UserRole
from app.models.viewing import Viewing, ViewingRequest, ViewingRequestStatus, ViewingStatus
from app.services.events import AuditEvent, Outcome, notify_many
from app.services.property_service import get_live_property

logger = logging.getLogger(__name__)

REQUEST_LIST_LIMIT = 300
VIEWING_LIST_LIMIT = 500

# Roles whose listings are filtered on the requester side
REQUESTER_ROLES = (UserRole.CUSTOMER, UserRole.PHOTOGRAPHER)


def resolve_recipient(prop: Property, recipient_role: Optional[str] = None,
                      recipient_user_id: Optional[int] = None) -> int:
    """
    Pick the broker or owner a viewing request is routed to.

    An explicit recipient_user_id must be one of the property's parties,
    recipient_role selects that party, otherwise broker falls back to owner.
    """
    if recipient_user_id is not None:
        if recipient_user_id not in (prop.broker_id, prop.owner_id):
            raise ValidationError("recipientUserId must be the property's broker or owner")
        return recipient_user_id

    if recipient_role is not None:
        chosen = prop.broker_id if recipient_role == UserRole.BROKER.value else prop.owner_id
        if chosen is None:
            raise ValidationError(f"Property has no {recipient_role} assigned")
        return chosen

    recipient_id = prop.responsible_party_id
    if recipient_id is None:
        raise ValidationError("No broker/owner assigned to this property")
    return recipient_id


def serialize_request(vr: ViewingRequest) -> Dict[str, Any]:
    return {
        "id": vr.id,
        "reference": vr.reference(),
        "property_id": vr.property_id,
        "requester_name": vr.requester_name,
        "requester_email": vr.requester_email,
        "requester_phone": vr.requester_phone,
        "preferred_dates": vr.preferred_dates,
        "message": vr.message,
        "status": vr.status,
        "created_at": vr.created_at,
    }


def serialize_viewing(viewing: Viewing) -> Dict[str, Any]:
    return {
        "id": viewing.id,
        "request_id": viewing.request_id,
        "property_id": viewing.property_id,
        "scheduled_at": viewing.scheduled_at,
        "location_note": viewing.location_note,
        "agent_note": viewing.agent_note,
        "status": viewing.status,
        "cancel_reason": viewing.cancel_reason,
        "created_at": viewing.created_at,
    }


class ViewingService:
    def __init__(self, db: Session):
        self.db = db

    # ── Requests ─────────────────────────────────────────────────────────

    def create_request(self, actor: Optional[User], property_id: int, payload) -> Outcome:
        prop = get_live_property(self.db, property_id)
        recipient_id = resolve_recipient(prop, payload.recipient_role, payload.recipient_user_id)

        vr = ViewingRequest(
            property_id=prop.id,
            recipient_user_id=recipient_id,
            requester_user_id=actor.id if actor else None,
            requester_name=payload.name,
            requester_email=payload.email,
            requester_phone=payload.phone,
            preferred_dates=payload.preferred_dates,
            message=payload.message,
            status=ViewingRequestStatus.PENDING,
        )
        self.db.add(vr)
        self.db.commit()
        self.db.refresh(vr)
        logger.info(f"[VIEWING] Request {vr.id} for property {prop.id} routed to user {recipient_id}")

        events = [
            AuditEvent(
                actor.id if actor else None,
                "VIEWING_REQUEST_CREATED",
                "viewing_request",
                vr.id,
                {"propertyId": prop.id, "recipientId": recipient_id},
            ),
            *notify_many(
                [recipient_id],
                "viewing",
                "New viewing request",
                f'New viewing request for "{prop.title}".',
                "viewing_request",
                vr.id,
            ),
        ]
        if actor is not None:
            events += notify_many(
                [actor.id],
                "viewing",
                "Viewing request sent",
                f'Your viewing request for "{prop.title}" was sent (ref {vr.reference()}).',
                "viewing_request",
                vr.id,
            )

        return Outcome({"requestId": vr.id, "reference": vr.reference()}, events)

    def _scope_to_actor(self, stmt, model, actor: User):
        """Requesters see what they asked for, brokers/owners what they received, admins all."""
        if actor.role == UserRole.ADMIN:
            return stmt
        if actor.role in REQUESTER_ROLES:
            return stmt.where(model.requester_user_id == actor.id)
        return stmt.where(model.recipient_user_id == actor.id)

    def list_requests(self, actor: User, status: Optional[str] = None) -> List[Dict[str, Any]]:
        stmt = self._scope_to_actor(select(ViewingRequest), ViewingRequest, actor)
        if status:
            stmt = stmt.where(ViewingRequest.status == ViewingRequestStatus(status))
        stmt = stmt.order_by(ViewingRequest.created_at.desc(), ViewingRequest.id.desc()).limit(REQUEST_LIST_LIMIT)
        return [serialize_request(vr) for vr in self.db.execute(stmt).scalars()]

    # ── Viewings ─────────────────────────────────────────────────────────

    def create_viewing(self, actor: User, request_id: int, scheduled_at: datetime,
                       location_note: Optional[str] = None, agent_note: Optional[str] = None) -> Outcome:
        vr = self.db.get(ViewingRequest, request_id)
        if vr is None:
            raise NotFound("Viewing request not found")
        get_live_property(self.db, vr.property_id)
        ensure_allowed(actor, describe_request(vr), Action.VIEWING_SCHEDULE)
        if vr.status != ViewingRequestStatus.PENDING:
            raise BadRequest("Request is not pending")

        try:
            flipped = self.db.execute(
                update(ViewingRequest)
                .where(ViewingRequest.id == vr.id, ViewingRequest.status == ViewingRequestStatus.PENDING)
                .values(status=ViewingRequestStatus.ACCEPTED)
                .execution_options(synchronize_session=False)
            )
            if flipped.rowcount != 1:
                raise BadRequest("Request is not pending")

            viewing = Viewing(
                request_id=vr.id,
                property_id=vr.property_id,
                recipient_user_id=vr.recipient_user_id,
                requester_user_id=vr.requester_user_id,
                scheduled_at=scheduled_at,
                location_note=location_note,
                agent_note=agent_note,
                status=ViewingStatus.UPCOMING,
            )
            self.db.add(viewing)
            self.db.commit()
        except BadRequest:
            self.db.rollback()
            raise
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"[VIEWING] Request {vr.id} already has a viewing")
            raise BadRequest("Request is not pending")

        self.db.refresh(viewing)
        logger.info(f"[VIEWING] Viewing {viewing.id} scheduled from request {vr.id}")

        events = [
            AuditEvent(
                actor.id,
                "VIEWING_SCHEDULED",
                "viewing",
                viewing.id,
                {"requestId": vr.id, "propertyId": vr.property_id, "scheduledAt": scheduled_at.isoformat()},
            ),
            *notify_many(
                [vr.requester_user_id],
                "viewing",
                "Viewing scheduled",
                "Your viewing request has been scheduled.",
                "viewing",
                viewing.id,
            ),
        ]
        return Outcome({"viewingId": viewing.id, "status": ViewingStatus.UPCOMING.value}, events)

    def list_viewings(self, actor: User, date_from: Optional[datetime] = None,
                      date_to: Optional[datetime] = None, status: Optional[str] = None) -> List[Dict[str, Any]]:
        stmt = self._scope_to_actor(select(Viewing), Viewing, actor)
        if date_from is not None:
            stmt = stmt.where(Viewing.scheduled_at >= date_from)
        if date_to is not None:
            stmt = stmt.where(Viewing.scheduled_at <= date_to)
        if status:
            stmt = stmt.where(Viewing.status == ViewingStatus(status))
        stmt = stmt.order_by(Viewing.scheduled_at.asc(), Viewing.id.asc()).limit(VIEWING_LIST_LIMIT)
        return [serialize_viewing(v) for v in self.db.execute(stmt).scalars()]

    def _get_upcoming(self, actor: User, viewing_id: int, verb: str) -> Viewing:
        viewing = self.db.get(Viewing, viewing_id)
        if viewing is None:
            raise NotFound("Viewing not found")
        ensure_allowed(actor, describe_viewing(viewing), Action.VIEWING_MODIFY)
        if viewing.status != ViewingStatus.UPCOMING:
            raise BadRequest(f"Only upcoming viewings can be {verb}")
        return viewing

    def _notify_parties(self, viewing: Viewing, title: str, message: str):
        return notify_many(
            [viewing.requester_user_id, viewing.recipient_user_id],
            "viewing",
            title,
            message,
            "viewing",
            viewing.id,
        )

    def reschedule(self, actor: User, viewing_id: int, new_scheduled_at: datetime, reason: str) -> Outcome:
        viewing = self._get_upcoming(actor, viewing_id, "rescheduled")

        viewing.scheduled_at = new_scheduled_at
        self.db.commit()

        events = [
            AuditEvent(
                actor.id, "VIEWING_RESCHEDULED", "viewing", viewing.id,
                {"reason": reason, "newScheduledAt": new_scheduled_at.isoformat()},
            ),
            *self._notify_parties(viewing, "Viewing rescheduled", "Your viewing appointment has been rescheduled."),
        ]
        return Outcome({"viewingId": viewing.id, "scheduledAt": new_scheduled_at}, events)

    def cancel(self, actor: User, viewing_id: int, reason: str) -> Outcome:
        viewing = self._get_upcoming(actor, viewing_id, "cancelled")

        viewing.status = ViewingStatus.CANCELLED
        viewing.cancel_reason = reason
        self.db.commit()

        events = [
            AuditEvent(actor.id, "VIEWING_CANCELLED", "viewing", viewing.id, {"reason": reason}),
            *self._notify_parties(viewing, "Viewing cancelled", "Your viewing appointment was cancelled."),
        ]
        return Outcome({"viewingId": viewing.id, "cancelled": True}, events)
