"""
Photography Job Models
Jobs dispatched to photographers plus the per-job message thread.
"""
from datetime import datetime
from enum import Enum
from typing import Optional
from sqlalchemy import DateTime, Integer, ForeignKey, Text, String, JSON, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, CreatedAtMixin, TimestampMixin, enum_values


class PhotoJobStatus(str, Enum):
    OPEN = "open"
    ASSIGNED = "assigned"
    SCHEDULED = "scheduled"
    REJECTED = "rejected"
    COMPLETED = "completed"


class PhotoJob(TimestampMixin, Base):
    """Photography request raised by an owner, broker or admin for one property."""
    __tablename__ = "photo_jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    property_id: Mapped[int] = mapped_column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    requested_by: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # While open, only this photographer (if set) may accept or reject
    preferred_photographer_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True, index=True
    )
    photographer_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True, index=True
    )

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    preferred_dates: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    status: Mapped[PhotoJobStatus] = mapped_column(
        SQLEnum(PhotoJobStatus, name="photo_job_status", values_callable=enum_values),
        default=PhotoJobStatus.OPEN,
        nullable=False,
        index=True,
    )
    scheduled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    reject_reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)


class PhotoJobMessage(CreatedAtMixin, Base):
    """Append-only message on a job thread."""
    __tablename__ = "photo_job_messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    job_id: Mapped[int] = mapped_column(Integer, ForeignKey("photo_jobs.id"), nullable=False, index=True)
    sender_user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
