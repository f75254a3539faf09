"""
Property Service
Listing creation, public reads, soft delete and contact-form inquiries.
Also home of the loaders other workflows use to fetch a live property.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import Forbidden, NotFound, ValidationError
from app.core.policy import Action, ensure_allowed, describe_property
from app.models.analytics import Inquiry
from app.models.property import Property, ApprovalStatus
from app.models.user import User, UserRole, UserStatus
from app.services.events import AuditEvent, Outcome, notify_many
from app.core.config import settings

logger = logging.getLogger(__name__)


def get_live_property(db: Session, property_id: int) -> Property:
    """Property that exists and is not soft-deleted, else 404"""
    prop = db.execute(
        select(Property).where(Property.id == property_id, Property.deleted_at.is_(None))
    ).scalar_one_or_none()
    if prop is None:
        raise NotFound("Property not found")
    return prop


def active_admin_ids(db: Session, limit: Optional[int] = None) -> List[int]:
    stmt = (
        select(User.id)
        .where(User.role == UserRole.ADMIN, User.status == UserStatus.ACTIVE)
        .order_by(User.id)
        .limit(limit or settings.ADMIN_NOTIFY_LIMIT)
    )
    return list(db.execute(stmt).scalars())


def serialize_property(prop: Property) -> Dict[str, Any]:
    return {
        "id": prop.id,
        "title": prop.title,
        "description": prop.description,
        "price": prop.price,
        "type": prop.type,
        "location": prop.location,
        "area": prop.area,
        "owner_id": prop.owner_id,
        "broker_id": prop.broker_id,
        "approval_status": prop.approval_status,
        "created_at": prop.created_at,
    }


class PropertyService:
    def __init__(self, db: Session):
        self.db = db

    def _resolve_parties(self, actor: User, owner_id: Optional[int], broker_id: Optional[int]):
        """Creator becomes owner or broker by role; any other named party must hold that role."""
        if actor.role == UserRole.OWNER:
            owner_id = actor.id
        elif actor.role == UserRole.BROKER:
            broker_id = actor.id
        elif owner_id is None and broker_id is None:
            raise ValidationError("ownerId or brokerId is required")
        for user_id, role in ((owner_id, UserRole.OWNER), (broker_id, UserRole.BROKER)):
            if user_id is None or user_id == actor.id:
                continue
            user = self.db.get(User, user_id)
            if user is None or user.role != role:
                raise ValidationError(f"{role.value}Id must reference a user with role {role.value}")
        return owner_id, broker_id

    def create(self, actor: User, payload) -> Outcome:
        if actor.role not in (UserRole.OWNER, UserRole.BROKER, UserRole.ADMIN):
            raise Forbidden("Only owners, brokers and admins can list properties")

        owner_id, broker_id = self._resolve_parties(actor, payload.owner_id, payload.broker_id)

        prop = Property(
            title=payload.title,
            description=payload.description,
            price=payload.price,
            type=payload.type,
            location=payload.location,
            area=payload.area,
            owner_id=owner_id,
            broker_id=broker_id,
            approval_status=ApprovalStatus.PENDING,
        )
        self.db.add(prop)
        self.db.commit()
        self.db.refresh(prop)
        logger.info(f"[PROPERTY] Created property {prop.id} by user {actor.id}")

        events = [
            AuditEvent(actor.id, "PROPERTY_CREATED", "property", prop.id),
            *notify_many(
                active_admin_ids(self.db),
                "approval",
                "Listing pending approval",
                f'New listing "{prop.title}" requires approval.',
                "property",
                prop.id,
            ),
        ]
        return Outcome({"propertyId": prop.id, "approval_status": ApprovalStatus.PENDING.value}, events)

    def list_public(self, property_type: Optional[str] = None, area: Optional[str] = None,
                    limit: int = 100) -> List[Dict[str, Any]]:
        stmt = select(Property).where(
            Property.deleted_at.is_(None),
            Property.approval_status == ApprovalStatus.APPROVED,
        )
        if property_type:
            stmt = stmt.where(Property.type == property_type)
        if area:
            stmt = stmt.where(Property.area == area)
        stmt = stmt.order_by(Property.created_at.desc(), Property.id.desc()).limit(limit)
        return [serialize_property(p) for p in self.db.execute(stmt).scalars()]

    def get(self, property_id: int) -> Dict[str, Any]:
        return serialize_property(get_live_property(self.db, property_id))

    def soft_delete(self, actor: User, property_id: int) -> Outcome:
        prop = get_live_property(self.db, property_id)
        ensure_allowed(actor, describe_property(prop), Action.PROPERTY_MANAGE)

        prop.deleted_at = datetime.now(timezone.utc)
        self.db.commit()

        return Outcome(
            {"propertyId": prop.id, "deleted": True},
            [AuditEvent(actor.id, "PROPERTY_DELETED", "property", prop.id)],
        )

    def create_inquiry(self, actor: Optional[User], property_id: int, payload) -> Outcome:
        prop = get_live_property(self.db, property_id)
        recipient_id = prop.responsible_party_id
        if recipient_id is None:
            raise ValidationError("No broker/owner assigned to this property")

        inquiry = Inquiry(
            property_id=prop.id,
            recipient_user_id=recipient_id,
            requester_user_id=actor.id if actor else None,
            name=payload.name,
            email=payload.email,
            phone=payload.phone,
            message=payload.message,
        )
        self.db.add(inquiry)
        self.db.commit()
        self.db.refresh(inquiry)

        events = [
            AuditEvent(
                actor.id if actor else None,
                "INQUIRY_CREATED",
                "inquiry",
                inquiry.id,
                {"propertyId": prop.id, "recipientId": recipient_id},
            ),
            *notify_many(
                [recipient_id],
                "inquiry",
                "New inquiry",
                f'New inquiry for "{prop.title}".',
                "inquiry",
                inquiry.id,
            ),
        ]
        return Outcome({"inquiryId": inquiry.id}, events)
