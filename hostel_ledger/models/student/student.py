# hostel_ledger/models/student/student.py
"""
Student registered with a hostel for one semester.
"""

from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from hostel_ledger.models.base.base_model import BaseModel
from hostel_ledger.models.base.mixins import TimestampMixin

__all__ = ["Student"]


class Student(BaseModel, TimestampMixin):
    __tablename__ = "students"
    __table_args__ = (
        UniqueConstraint(
            "registration_number",
            "semester_id",
            name="uq_students_registration_semester",
        ),
    )

    hostel_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("hostels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Null when registered before semesters were introduced
    semester_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("semesters.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    registration_number: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    gender: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    access_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    emergency_contact: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, registration_number='{self.registration_number}')>"
