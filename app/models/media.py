"""
Property Media Model - photos and videos awaiting admin approval
"""
from enum import Enum
from datetime import datetime
from typing import Optional

from sqlalchemy import String, ForeignKey, DateTime, Integer, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, CreatedAtMixin, enum_values
from app.models.property import ApprovalStatus, ApprovalStatusType


class MediaKind(str, Enum):
    PHOTO = "photo"
    VIDEO = "video"


class Media(CreatedAtMixin, Base):
    __tablename__ = "media"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    property_id: Mapped[int] = mapped_column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    uploaded_by: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)

    kind: Mapped[MediaKind] = mapped_column(
        SQLEnum(MediaKind, name="media_kind", values_callable=enum_values), nullable=False
    )
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    thumb_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=True)
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=True)

    approval_status: Mapped[ApprovalStatus] = mapped_column(
        ApprovalStatusType,
        default=ApprovalStatus.PENDING,
        nullable=False,
        index=True,
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    listing = relationship("Property", lazy="joined")

    @property
    def is_public(self) -> bool:
        return self.approval_status == ApprovalStatus.APPROVED and self.deleted_at is None
