from enum import Enum
from datetime import datetime
from typing import Optional

from sqlalchemy import String, ForeignKey, DateTime, Integer, Float, Text, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin, enum_values


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Shared by properties and media so PostgreSQL sees a single enum type
ApprovalStatusType = SQLEnum(ApprovalStatus, name="approval_status", values_callable=enum_values)


class Property(TimestampMixin, Base):
    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=True)
    price: Mapped[float] = mapped_column(Float, nullable=True)
    type: Mapped[str] = mapped_column(String(50), nullable=True)  # apartment, house, land, commercial
    location: Mapped[str] = mapped_column(String(255), nullable=True)
    area: Mapped[str] = mapped_column(String(120), nullable=True)

    owner_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    broker_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    approval_status: Mapped[ApprovalStatus] = mapped_column(
        ApprovalStatusType,
        default=ApprovalStatus.PENDING,
        nullable=False,
        index=True,
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def responsible_party_id(self) -> Optional[int]:
        """Broker first, falling back to the owner"""
        return self.broker_id or self.owner_id
