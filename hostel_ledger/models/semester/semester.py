# hostel_ledger/models/semester/semester.py
"""
Semester: the academic period every allocation, payment and expense
is bucketed into.
"""

from datetime import date
from typing import Optional

from sqlalchemy import Boolean, Date, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from hostel_ledger.models.base.base_model import BaseModel
from hostel_ledger.models.base.mixins import TimestampMixin

__all__ = ["Semester"]


class Semester(BaseModel, TimestampMixin):
    """
    Academic period of a hostel.

    At most one semester per hostel is active at a time; the service layer
    enforces this when activating.
    """

    __tablename__ = "semesters"
    __table_args__ = (
        Index("ix_semesters_hostel_active", "hostel_id", "is_active"),
    )

    hostel_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("hostels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    # New semesters start inactive
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Semester(id={self.id}, name='{self.name}', active={self.is_active})>"
