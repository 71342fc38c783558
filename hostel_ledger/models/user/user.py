# hostel_ledger/models/user/user.py
"""
Staff account. Accounts are managed elsewhere; this service reads them
for display names and hostel membership.
"""

from typing import Optional

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from hostel_ledger.models.base.base_model import BaseModel
from hostel_ledger.models.base.enums import UserRole
from hostel_ledger.models.base.mixins import ActiveFlagMixin, TimestampMixin

__all__ = ["User"]


class User(BaseModel, TimestampMixin, ActiveFlagMixin):
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=UserRole.CUSTODIAN.value,
    )
    # Null for Super-Admins
    hostel_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("hostels.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    @property
    def user_role(self) -> UserRole:
        return UserRole.parse(self.role)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role={self.role})>"
