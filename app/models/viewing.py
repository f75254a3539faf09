"""
Viewing Models - Property Viewing Requests and Appointments
A request (pending -> accepted) becomes at most one viewing (upcoming -> cancelled)
"""
from datetime import datetime
from typing import Optional
from sqlalchemy import String, DateTime, Text, Integer, ForeignKey, JSON, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
import enum

from app.db.base import Base, CreatedAtMixin, TimestampMixin, enum_values, utcnow


class ViewingRequestStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"


class ViewingStatus(str, enum.Enum):
    UPCOMING = "upcoming"
    CANCELLED = "cancelled"


class ViewingRequest(CreatedAtMixin, Base):
    """
    A customer's (or guest's) request to view a property
    """
    __tablename__ = "viewing_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    property_id: Mapped[int] = mapped_column(Integer, ForeignKey("properties.id"), nullable=False, index=True)

    # Broker or owner the request is routed to
    recipient_user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # Null for guests
    requester_user_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    requester_name: Mapped[str] = mapped_column(String(120), nullable=False)
    requester_email: Mapped[str] = mapped_column(String(255), nullable=False)
    requester_phone: Mapped[str] = mapped_column(String(30), nullable=False)
    preferred_dates: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[ViewingRequestStatus] = mapped_column(
        SQLEnum(ViewingRequestStatus, name="viewing_request_status", values_callable=enum_values),
        default=ViewingRequestStatus.PENDING,
        nullable=False,
        index=True,
    )

    def reference(self) -> str:
        """Human-facing reference, e.g. VR-2026-000042"""
        year = (self.created_at or utcnow()).year
        return f"VR-{year}-{self.id:06d}"


class Viewing(TimestampMixin, Base):
    """
    Scheduled appointment created from exactly one pending request
    """
    __tablename__ = "viewings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Unique: the store refuses a second viewing for the same request
    request_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("viewing_requests.id"), nullable=False, unique=True
    )
    property_id: Mapped[int] = mapped_column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    recipient_user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    requester_user_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    scheduled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    location_note: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    agent_note: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    status: Mapped[ViewingStatus] = mapped_column(
        SQLEnum(ViewingStatus, name="viewing_status", values_callable=enum_values),
        default=ViewingStatus.UPCOMING,
        nullable=False,
        index=True,
    )
    cancel_reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
