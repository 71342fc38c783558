# hostel_ledger/models/payment/payment.py
"""
Append-only payment ledger.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from hostel_ledger.models.base.base_model import BaseModel, utcnow

__all__ = ["Payment"]


class Payment(BaseModel):
    """
    One recorded payment against an allocation.

    Rows are never updated or deleted. ``allocation_id`` is a plain indexed
    reference, not a foreign key, so the ledger outlives a checkout; the
    hostel, semester and student ids are copied from the allocation.
    """

    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
        Index("ix_payments_hostel_semester", "hostel_id", "semester_id"),
        Index("ix_payments_allocation_recorded", "allocation_id", "recorded_at"),
        UniqueConstraint("allocation_id", "idempotency_key", name="uq_payments_allocation_idempotency_key"),
    )

    allocation_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

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
    student_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    recorded_by_user_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utcnow,
    )
    # Client-supplied key, unique per allocation
    idempotency_key: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        return f"<Payment(id={self.id}, allocation_id={self.allocation_id}, amount={self.amount})>"
