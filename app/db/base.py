# app/db/base.py

"""
Database Base Class and Timestamp Mixin
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models - SINGLE SOURCE OF TRUTH."""
    pass


class CreatedAtMixin:
    """Mixin for an automatic created_at timestamp (append-only rows)."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True,
    )


class TimestampMixin(CreatedAtMixin):
    """Mixin for automatic created_at/updated_at timestamps."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )


def enum_values(enum_cls):
    """Persist str enums by value ("pending"), not by member name."""
    return [member.value for member in enum_cls]
