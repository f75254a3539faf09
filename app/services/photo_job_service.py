"""
Photo Job Service
Dispatches photography jobs to photographers.

    open -> assigned -> scheduled -> completed
    open -> rejected
    scheduled -> scheduled (re-scheduling)

TRANSITIONS is the single source for state guards. Every transition is a
conditional UPDATE on the allowed source states, so two photographers racing
for the same open job cannot both win. Admins pass every ownership check but
never skip a state guard.
"""
import logging
from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.core.exceptions import BadRequest, NotFound, ValidationError
from app.core.policy import Action, ensure_allowed, describe_job, describe_property
from app.models.photo_job import PhotoJob, PhotoJobMessage, PhotoJobStatus
from app.models.user import User, UserRole, UserStatus
from app.services.events import AuditEvent, Outcome, notify_many
from app.services.property_service import get_live_property

logger = logging.getLogger(__name__)

JOB_LIST_LIMIT = 300

TRANSITIONS: Dict[PhotoJobStatus, FrozenSet[PhotoJobStatus]] = {
    PhotoJobStatus.OPEN: frozenset({PhotoJobStatus.ASSIGNED, PhotoJobStatus.REJECTED}),
    PhotoJobStatus.ASSIGNED: frozenset({PhotoJobStatus.SCHEDULED}),
    PhotoJobStatus.SCHEDULED: frozenset({PhotoJobStatus.SCHEDULED, PhotoJobStatus.COMPLETED}),
    PhotoJobStatus.REJECTED: frozenset(),
    PhotoJobStatus.COMPLETED: frozenset(),
}

GUARD_MESSAGES = {
    PhotoJobStatus.ASSIGNED: "Job is not open",
    PhotoJobStatus.REJECTED: "Job is not open",
    PhotoJobStatus.SCHEDULED: "Job must be assigned first",
    PhotoJobStatus.COMPLETED: "Job must be scheduled to complete",
}


def can_transition(source: PhotoJobStatus, target: PhotoJobStatus) -> bool:
    return target in TRANSITIONS.get(PhotoJobStatus(source), frozenset())


def sources_for(target: PhotoJobStatus) -> List[PhotoJobStatus]:
    return [source for source, targets in TRANSITIONS.items() if target in targets]


def serialize_job(job: PhotoJob) -> Dict[str, Any]:
    return {
        "id": job.id,
        "property_id": job.property_id,
        "requested_by": job.requested_by,
        "preferred_photographer_id": job.preferred_photographer_id,
        "photographer_id": job.photographer_id,
        "notes": job.notes,
        "preferred_dates": job.preferred_dates,
        "status": job.status,
        "scheduled_at": job.scheduled_at,
        "reject_reason": job.reject_reason,
        "created_at": job.created_at,
    }


class PhotoJobService:
    def __init__(self, db: Session):
        self.db = db

    # ── Helpers ──────────────────────────────────────────────────────────

    def _get_job(self, job_id: int) -> PhotoJob:
        job = self.db.get(PhotoJob, job_id)
        if job is None:
            raise NotFound("Job not found")
        return job

    def _get_photographer(self, user_id: int, field: str, active_only: bool = False) -> User:
        user = self.db.get(User, user_id)
        if user is None or user.role != UserRole.PHOTOGRAPHER:
            raise ValidationError(f"{field} must reference a photographer")
        if active_only and user.status != UserStatus.ACTIVE:
            raise ValidationError(f"{field} must reference an active photographer")
        return user

    def _guard(self, job: PhotoJob, target: PhotoJobStatus) -> None:
        if not can_transition(job.status, target):
            raise BadRequest(GUARD_MESSAGES[target])

    def _transition(self, job: PhotoJob, target: PhotoJobStatus, **values) -> None:
        """Conditional update from the allowed source states; 400 if another request got there first."""
        result = self.db.execute(
            update(PhotoJob)
            .where(PhotoJob.id == job.id, PhotoJob.status.in_(sources_for(target)))
            .values(status=target, **values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.db.rollback()
            logger.warning(f"[PHOTO_JOB] Lost race on job {job.id} -> {target.value}")
            raise BadRequest(GUARD_MESSAGES[target])
        self.db.commit()
        self.db.refresh(job)

    # ── Create / list ────────────────────────────────────────────────────

    def create(self, actor: User, property_id: int, payload) -> Outcome:
        prop = get_live_property(self.db, property_id)
        ensure_allowed(actor, describe_property(prop), Action.JOB_CREATE,
                       "Forbidden: not owner/broker of this property")

        preferred_id = payload.preferred_photographer_id
        if preferred_id is not None:
            self._get_photographer(preferred_id, "preferredPhotographerId")

        job = PhotoJob(
            property_id=prop.id,
            requested_by=actor.id,
            preferred_photographer_id=preferred_id,
            notes=payload.notes,
            preferred_dates=payload.preferred_dates,
            status=PhotoJobStatus.OPEN,
        )
        self.db.add(job)
        self.db.commit()
        self.db.refresh(job)
        logger.info(f"[PHOTO_JOB] Job {job.id} opened for property {prop.id}")

        events = [
            AuditEvent(actor.id, "PHOTO_JOB_CREATED", "photo_job", job.id, {"propertyId": prop.id}),
            *notify_many(
                [preferred_id],
                "photo_job",
                "Photography request",
                f'You have a new preferred photography request for "{prop.title}".',
                "photo_job",
                job.id,
            ),
        ]
        return Outcome({"jobId": job.id, "status": PhotoJobStatus.OPEN.value}, events)

    def list_open(self, actor: User) -> List[Dict[str, Any]]:
        stmt = select(PhotoJob).where(PhotoJob.status == PhotoJobStatus.OPEN)
        if actor.role != UserRole.ADMIN:
            stmt = stmt.where(
                (PhotoJob.preferred_photographer_id.is_(None))
                | (PhotoJob.preferred_photographer_id == actor.id)
            )
        stmt = stmt.order_by(PhotoJob.created_at.desc(), PhotoJob.id.desc()).limit(JOB_LIST_LIMIT)
        return [serialize_job(j) for j in self.db.execute(stmt).scalars()]

    def list_mine(self, actor: User) -> List[Dict[str, Any]]:
        stmt = select(PhotoJob)
        if actor.role == UserRole.PHOTOGRAPHER:
            stmt = stmt.where(PhotoJob.photographer_id == actor.id)
        elif actor.role != UserRole.ADMIN:
            stmt = stmt.where(PhotoJob.requested_by == actor.id)
        stmt = stmt.order_by(PhotoJob.created_at.desc(), PhotoJob.id.desc()).limit(JOB_LIST_LIMIT)
        return [serialize_job(j) for j in self.db.execute(stmt).scalars()]

    # ── Transitions ──────────────────────────────────────────────────────

    def accept(self, actor: User, job_id: int, photographer_id: Optional[int] = None) -> Outcome:
        job = self._get_job(job_id)
        ensure_allowed(actor, describe_job(job), Action.JOB_CLAIM,
                       "Forbidden: job is preferred for another photographer")
        self._guard(job, PhotoJobStatus.ASSIGNED)

        assignee_id = actor.id
        if photographer_id is not None and photographer_id != actor.id:
            if actor.role != UserRole.ADMIN:
                raise ValidationError("Only admins can assign another photographer")
            assignee_id = self._get_photographer(photographer_id, "photographerId", active_only=True).id

        self._transition(job, PhotoJobStatus.ASSIGNED, photographer_id=assignee_id)
        logger.info(f"[PHOTO_JOB] Job {job.id} assigned to user {assignee_id} by {actor.id}")

        events = [
            AuditEvent(
                actor.id, "PHOTO_JOB_ACCEPTED", "photo_job", job.id,
                {"photographerId": assignee_id} if assignee_id != actor.id else None,
            ),
            *notify_many(
                [job.requested_by],
                "photo_job",
                "Photographer assigned",
                "A photographer accepted your job request.",
                "photo_job",
                job.id,
            ),
        ]
        if assignee_id != actor.id:
            events += notify_many(
                [assignee_id],
                "photo_job",
                "Job assigned",
                "An administrator assigned a photography job to you.",
                "photo_job",
                job.id,
            )
        return Outcome({"jobId": job.id, "status": PhotoJobStatus.ASSIGNED.value, "photographerId": assignee_id}, events)

    def reject(self, actor: User, job_id: int, reason: str) -> Outcome:
        job = self._get_job(job_id)
        ensure_allowed(actor, describe_job(job), Action.JOB_CLAIM,
                       "Forbidden: job is preferred for another photographer")
        self._guard(job, PhotoJobStatus.REJECTED)

        self._transition(job, PhotoJobStatus.REJECTED, reject_reason=reason)

        events = [
            AuditEvent(actor.id, "PHOTO_JOB_REJECTED", "photo_job", job.id, {"reason": reason}),
            *notify_many(
                [job.requested_by],
                "photo_job",
                "Photography request rejected",
                f"Photographer rejected the job: {reason}",
                "photo_job",
                job.id,
            ),
        ]
        return Outcome({"jobId": job.id, "status": PhotoJobStatus.REJECTED.value}, events)

    def schedule(self, actor: User, job_id: int, scheduled_at: datetime) -> Outcome:
        job = self._get_job(job_id)
        ensure_allowed(actor, describe_job(job), Action.JOB_WORK)
        self._guard(job, PhotoJobStatus.SCHEDULED)

        self._transition(job, PhotoJobStatus.SCHEDULED, scheduled_at=scheduled_at)

        events = [
            AuditEvent(
                actor.id, "PHOTO_JOB_SCHEDULED", "photo_job", job.id,
                {"scheduledAt": scheduled_at.isoformat()},
            ),
            *notify_many(
                [job.requested_by],
                "photo_job",
                "Session scheduled",
                "Your photography session has been scheduled.",
                "photo_job",
                job.id,
            ),
        ]
        return Outcome(
            {"jobId": job.id, "status": PhotoJobStatus.SCHEDULED.value, "scheduledAt": scheduled_at},
            events,
        )

    def complete(self, actor: User, job_id: int) -> Outcome:
        job = self._get_job(job_id)
        ensure_allowed(actor, describe_job(job), Action.JOB_WORK)
        self._guard(job, PhotoJobStatus.COMPLETED)

        self._transition(job, PhotoJobStatus.COMPLETED)

        events = [
            AuditEvent(actor.id, "PHOTO_JOB_COMPLETED", "photo_job", job.id),
            *notify_many(
                [job.requested_by],
                "photo_job",
                "Job completed",
                "Photography job marked as completed.",
                "photo_job",
                job.id,
            ),
        ]
        return Outcome({"jobId": job.id, "status": PhotoJobStatus.COMPLETED.value}, events)

    # ── Messages ─────────────────────────────────────────────────────────

    def send_message(self, actor: User, job_id: int, message: str) -> Outcome:
        job = self._get_job(job_id)
        ensure_allowed(actor, describe_job(job), Action.JOB_ACCESS)

        row = PhotoJobMessage(job_id=job.id, sender_user_id=actor.id, message=message)
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)

        # The other side of the thread
        if job.photographer_id is not None and actor.id == job.photographer_id:
            target = job.requested_by
        else:
            target = job.photographer_id
        if target == actor.id:
            target = None

        events = [
            AuditEvent(actor.id, "PHOTO_JOB_MESSAGE_SENT", "photo_job", job.id),
            *notify_many(
                [target],
                "message",
                "New job message",
                "You received a new message on a photography job.",
                "photo_job",
                job.id,
            ),
        ]
        return Outcome({"sent": True, "messageId": row.id}, events)

    def list_messages(self, actor: User, job_id: int) -> List[Dict[str, Any]]:
        job = self._get_job(job_id)
        ensure_allowed(actor, describe_job(job), Action.JOB_ACCESS)

        stmt = (
            select(PhotoJobMessage)
            .where(PhotoJobMessage.job_id == job.id)
            .order_by(PhotoJobMessage.created_at.asc(), PhotoJobMessage.id.asc())
        )
        return [
            {"id": m.id, "sender_user_id": m.sender_user_id, "message": m.message, "created_at": m.created_at}
            for m in self.db.execute(stmt).scalars()
        ]
