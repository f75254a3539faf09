"""
Database init - Exports for models
"""

from .base import Base, TimestampMixin, CreatedAtMixin, utcnow, enum_values

__all__ = ["Base", "TimestampMixin", "CreatedAtMixin", "utcnow", "enum_values"]
