# hostel_ledger/models/expense/expense.py
"""
Hostel operating expense.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_ledger.models.base.base_model import BaseModel
from hostel_ledger.models.base.mixins import TimestampMixin

__all__ = ["Expense"]


class Expense(BaseModel, TimestampMixin):
    __tablename__ = "expenses"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_expenses_amount_positive"),
        Index("ix_expenses_hostel_semester", "hostel_id", "semester_id"),
    )

    hostel_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("hostels.id", ondelete="CASCADE"),
        nullable=False,
    )
    semester_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("semesters.id", ondelete="CASCADE"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    recorded_by_user_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    expense_date: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)

    recorded_by = relationship("User", lazy="raise")
