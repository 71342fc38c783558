# hostel_ledger/models/allocation/allocation.py
"""
Room allocation with price snapshots.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_ledger.models.base.base_model import BaseModel, utcnow

__all__ = ["Allocation"]


class Allocation(BaseModel):
    """
    Binding of a student to a room for one semester.

    A student holds at most one allocation per semester. The price columns
    are frozen at creation and are the basis of every balance computation.
    """

    __tablename__ = "allocations"
    __table_args__ = (
        UniqueConstraint(
            "student_id",
            "semester_id",
            name="uq_allocations_student_semester",
        ),
        Index("ix_allocations_room_semester", "room_id", "semester_id"),
    )

    # ==================== Scope ====================

    hostel_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("hostels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    semester_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("semesters.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # ==================== Binding ====================

    student_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
    )
    room_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("rooms.id", ondelete="RESTRICT"),
        nullable=False,
    )

    # ==================== Price Snapshot ====================

    room_price_at_allocation: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
    )
    display_price_at_allocation: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(10, 2),
        nullable=True,
    )

    allocated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utcnow,
    )

    # ==================== Relationships ====================

    student = relationship("Student", lazy="raise")
    room = relationship("Room", lazy="raise")
    hostel = relationship("Hostel", lazy="raise")
    semester = relationship("Semester", lazy="raise")

    def __repr__(self) -> str:
        return (
            f"<Allocation(id={self.id}, student_id={self.student_id}, "
            f"room_id={self.room_id}, semester_id={self.semester_id})>"
        )
