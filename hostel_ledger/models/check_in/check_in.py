# hostel_ledger/models/check_in/check_in.py
"""
Physical check-in / check-out record.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_ledger.models.base.base_model import BaseModel, utcnow

__all__ = ["CheckIn"]


class CheckIn(BaseModel):
    """
    A stay of a student in the hostel.

    Open while ``checked_out_at`` is null. A closed check-in removes the
    student from room occupancy counts.
    """

    __tablename__ = "check_ins"
    __table_args__ = (
        Index("ix_check_ins_student_semester", "student_id", "semester_id"),
    )

    student_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
    )
    hostel_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("hostels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    semester_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("semesters.id", ondelete="SET NULL"),
        nullable=True,
    )

    checked_in_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    checked_out_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    checked_in_by_user_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    checked_out_by_user_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    student = relationship("Student", lazy="raise")

    @property
    def is_open(self) -> bool:
        return self.checked_out_at is None
