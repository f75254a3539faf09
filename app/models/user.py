"""
User Model - Marketplace accounts
Customers, owners, brokers, photographers and admins
"""
from enum import Enum
from sqlalchemy import String, Integer, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, validates

from app.db.base import Base, TimestampMixin, enum_values


class UserRole(str, Enum):
    CUSTOMER = "customer"
    OWNER = "owner"
    BROKER = "broker"
    PHOTOGRAPHER = "photographer"
    ADMIN = "admin"


class UserStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    REJECTED = "rejected"


class User(TimestampMixin, Base):
    """
    Marketplace account

    The role is fixed at creation time; only active users pass the
    authentication dependency.
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, name="user_role", values_callable=enum_values),
        default=UserRole.CUSTOMER,
        nullable=False,
        index=True,
    )
    status: Mapped[UserStatus] = mapped_column(
        SQLEnum(UserStatus, name="user_status", values_callable=enum_values),
        default=UserStatus.PENDING,
        nullable=False,
        index=True,
    )

    # Profile
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String(30), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=True)

    @validates("role")
    def _role_is_immutable(self, key, value):
        current = self.__dict__.get("role")
        if current is not None and UserRole(current) != UserRole(value):
            raise ValueError("User role cannot be changed after creation")
        return UserRole(value)
