"""
Payment Repository.

Append-only ledger access: running totals, replay detection and
receipt lookups.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_ledger.models.allocation import Allocation
from hostel_ledger.models.hostel import Hostel
from hostel_ledger.models.payment import Payment
from hostel_ledger.models.room import Room
from hostel_ledger.models.student import Student
from hostel_ledger.repositories.base.base_repository import BaseRepository
from hostel_ledger.utils.formatters import to_money


class PaymentRepository(BaseRepository[Payment]):
    """Repository for payment ledger operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Payment, session)

    # ==================== Totals ====================

    async def get_total_paid(self, allocation_id: int) -> Decimal:
        """
        Sum of all payments recorded against an allocation.

        Args:
            allocation_id: Allocation ID

        Returns:
            Total paid, 0.00 when nothing was paid
        """
        result = await self.session.execute(
            select(func.coalesce(func.sum(Payment.amount), 0)).where(
                Payment.allocation_id == allocation_id
            )
        )
        return to_money(result.scalar_one())

    # ==================== Replay Detection ====================

    async def get_by_idempotency_key(self, allocation_id: int, idempotency_key: str) -> Optional[Payment]:
        return await self.find_one(
            Payment.allocation_id == allocation_id,
            Payment.idempotency_key == idempotency_key,
        )

    async def find_recent_duplicate(
        self,
        allocation_id: int,
        amount: Decimal,
        recorded_by_user_id: int,
        since: datetime,
    ) -> Optional[Payment]:
        """
        Find a payment with the same amount recorded by the same user
        against the same allocation after ``since``.

        Args:
            allocation_id: Allocation ID
            amount: Payment amount
            recorded_by_user_id: Staff user recording the payment
            since: Start of the look-back window (naive UTC)

        Returns:
            Most recent matching payment or None
        """
        candidates = await self.find_all(
            Payment.allocation_id == allocation_id,
            Payment.recorded_by_user_id == recorded_by_user_id,
            Payment.recorded_at >= since,
            order_by=(Payment.recorded_at.desc(), Payment.id.desc()),
        )
        target = to_money(amount)
        for payment in candidates:
            if to_money(payment.amount) == target:
                return payment
        return None

    # ==================== Listings ====================

    async def list_for_semesters(
        self,
        semester_ids: Sequence[int],
        hostel_id: Optional[int] = None,
    ) -> List[Payment]:
        """
        Payments of the given semesters, newest first.

        Args:
            semester_ids: Semesters to include
            hostel_id: Restrict to one hostel

        Returns:
            List of payments
        """
        if not semester_ids:
            return []
        criteria = [Payment.semester_id.in_(list(semester_ids))]
        if hostel_id:
            criteria.append(Payment.hostel_id == hostel_id)
        return await self.find_all(
            *criteria,
            order_by=(Payment.recorded_at.desc(), Payment.id.desc()),
        )

    # ==================== Receipts ====================

    async def get_receipt_row(
        self,
        payment_id: int,
    ) -> Optional[Tuple[Payment, Allocation, Student, Optional[Room], Hostel]]:
        """
        Get a payment with everything printed on its receipt.

        Payments whose allocation no longer exists are not returned.

        Args:
            payment_id: Payment ID

        Returns:
            (payment, allocation, student, room, hostel) or None
        """
        result = await self.session.execute(
            select(Payment, Allocation, Student, Room, Hostel)
            .join(Allocation, Allocation.id == Payment.allocation_id)
            .join(Student, Student.id == Allocation.student_id)
            .outerjoin(Room, Room.id == Allocation.room_id)
            .join(Hostel, Hostel.id == Allocation.hostel_id)
            .where(Payment.id == payment_id)
        )
        row: Any = result.first()
        if row is None:
            return None
        return row[0], row[1], row[2], row[3], row[4]
