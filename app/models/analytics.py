"""
Analytics Models
Covers: AnalyticsEvent (tracked client events), Inquiry (contact-form leads)
"""
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import String, Integer, Text, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, CreatedAtMixin


class AnalyticsEventType(str, PyEnum):
    PROPERTY_VIEW = "PROPERTY_VIEW"
    SEARCH = "SEARCH"
    SHARE = "SHARE"
    CONTACT_CLICK = "CONTACT_CLICK"


class AnalyticsEvent(CreatedAtMixin, Base):
    __tablename__ = "analytics_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Free-form: clients may send types beyond AnalyticsEventType
    type: Mapped[str] = mapped_column(String(60), nullable=False, index=True)
    property_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("properties.id"), nullable=True, index=True)
    user_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    session_id: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    meta: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)


class Inquiry(CreatedAtMixin, Base):
    __tablename__ = "inquiries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    property_id: Mapped[int] = mapped_column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    recipient_user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    requester_user_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
