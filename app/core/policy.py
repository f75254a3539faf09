"""
Authorization Policy
One pure decision function shared by every workflow: allow(actor, resource, action).

Resources are reduced to a ResourceDescriptor holding only the ownership
fields the rules look at, so the policy never touches the database.
Existence (404) is checked by the caller before the policy is consulted.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from app.core.exceptions import Forbidden
from app.models.user import UserRole


class Action(str, Enum):
    # Properties
    PROPERTY_MANAGE = "property:manage"
    PROPERTY_STATS = "property:stats"
    PROPERTY_MODERATE = "property:moderate"
    # Users / admin
    USER_MODERATE = "user:moderate"
    AUDIT_READ = "audit:read"
    ANNOUNCEMENT_CREATE = "announcement:create"
    # Media
    MEDIA_UPLOAD = "media:upload"
    MEDIA_DELETE = "media:delete"
    MEDIA_MODERATE = "media:moderate"
    # Viewings
    VIEWING_SCHEDULE = "viewing:schedule"
    VIEWING_MODIFY = "viewing:modify"
    # Photo jobs
    JOB_CREATE = "job:create"
    JOB_CLAIM = "job:claim"
    JOB_WORK = "job:work"
    JOB_ACCESS = "job:access"
    # Inbox
    NOTIFICATION_MANAGE = "notification:manage"


ADMIN_ONLY = frozenset({
    Action.PROPERTY_MODERATE,
    Action.USER_MODERATE,
    Action.AUDIT_READ,
    Action.ANNOUNCEMENT_CREATE,
    Action.MEDIA_MODERATE,
})

# Roles that own or broker listings
MANAGING_ROLES = frozenset({UserRole.OWNER, UserRole.BROKER})


@dataclass(frozen=True)
class ResourceDescriptor:
    owner_id: Optional[int] = None
    broker_id: Optional[int] = None
    recipient_id: Optional[int] = None
    requester_id: Optional[int] = None
    photographer_id: Optional[int] = None
    preferred_photographer_id: Optional[int] = None

    def is_party(self, user_id: int) -> bool:
        """Owning, brokering or receiving party of the resource"""
        if user_id is None:
            return False
        return user_id in (self.owner_id, self.broker_id, self.recipient_id)

    def is_requester(self, user_id: int) -> bool:
        return user_id is not None and self.requester_id == user_id


def allow(actor, resource: ResourceDescriptor, action: Action) -> bool:
    """Decide whether actor (anything with .id and .role) may perform action on resource."""
    if actor is None:
        return False

    role = UserRole(actor.role)
    uid = actor.id

    if role == UserRole.ADMIN:
        return True
    if action in ADMIN_ONLY:
        return False

    is_manager = role in MANAGING_ROLES and resource.is_party(uid)

    if action == Action.MEDIA_UPLOAD:
        return role == UserRole.PHOTOGRAPHER or is_manager

    if action == Action.JOB_CLAIM:
        if role != UserRole.PHOTOGRAPHER:
            return False
        if resource.photographer_id == uid:
            return True
        return resource.preferred_photographer_id in (None, uid)

    if action == Action.JOB_WORK:
        return role == UserRole.PHOTOGRAPHER and resource.photographer_id == uid

    if action == Action.JOB_ACCESS:
        if role == UserRole.PHOTOGRAPHER and resource.photographer_id == uid:
            return True
        return resource.is_requester(uid)

    if action == Action.NOTIFICATION_MANAGE:
        return resource.recipient_id == uid

    if action == Action.VIEWING_MODIFY:
        return is_manager or resource.is_requester(uid)

    # PROPERTY_MANAGE, PROPERTY_STATS, MEDIA_DELETE, JOB_CREATE, VIEWING_SCHEDULE
    return is_manager


def ensure_allowed(actor, resource: ResourceDescriptor, action: Action, message: str = "Forbidden") -> None:
    if not allow(actor, resource, action):
        raise Forbidden(message)


# ==================== Descriptor builders ====================

def describe_property(prop) -> ResourceDescriptor:
    return ResourceDescriptor(owner_id=prop.owner_id, broker_id=prop.broker_id)


def describe_media(media, prop) -> ResourceDescriptor:
    """Media inherits ownership from its property"""
    return ResourceDescriptor(owner_id=prop.owner_id, broker_id=prop.broker_id)


def describe_request(viewing_request) -> ResourceDescriptor:
    return ResourceDescriptor(
        recipient_id=viewing_request.recipient_user_id,
        requester_id=viewing_request.requester_user_id,
    )


def describe_viewing(viewing) -> ResourceDescriptor:
    return ResourceDescriptor(
        recipient_id=viewing.recipient_user_id,
        requester_id=viewing.requester_user_id,
    )


def describe_job(job) -> ResourceDescriptor:
    return ResourceDescriptor(
        requester_id=job.requested_by,
        photographer_id=job.photographer_id,
        preferred_photographer_id=job.preferred_photographer_id,
    )


def describe_notification(notification) -> ResourceDescriptor:
    return ResourceDescriptor(recipient_id=notification.user_id)
