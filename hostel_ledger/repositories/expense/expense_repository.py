"""
Expense Repository.

Filtered listings and per-category aggregates.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_ledger.models.expense import Expense
from hostel_ledger.models.user import User
from hostel_ledger.repositories.base.base_repository import BaseRepository
from hostel_ledger.utils.formatters import to_money


class ExpenseRepository(BaseRepository[Expense]):
    """Repository for hostel expenses."""

    def __init__(self, session: AsyncSession):
        super().__init__(Expense, session)

    def _criteria(
        self,
        semester_ids: Sequence[int],
        hostel_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category: Optional[str] = None,
    ) -> List[Any]:
        criteria: List[Any] = [Expense.semester_id.in_(list(semester_ids))]
        if hostel_id:
            criteria.append(Expense.hostel_id == hostel_id)
        if start_date:
            criteria.append(Expense.expense_date >= start_date)
        if end_date:
            criteria.append(Expense.expense_date <= end_date)
        if category:
            criteria.append(Expense.category == category)
        return criteria

    # ==================== Listings ====================

    async def list_filtered(
        self,
        semester_ids: Sequence[int],
        hostel_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category: Optional[str] = None,
        limit: int = 1000,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """
        Expenses with the recording user's name and phone.

        Args:
            semester_ids: Semesters to include
            hostel_id: Restrict to one hostel
            start_date: Earliest expense date (inclusive)
            end_date: Latest expense date (inclusive)
            category: Exact category match
            limit: Maximum rows
            offset: Rows to skip

        Returns:
            Row dictionaries ordered by expense date then creation time, newest first
        """
        if not semester_ids:
            return []
        stmt = (
            select(Expense, User.username, User.phone)
            .outerjoin(User, User.id == Expense.recorded_by_user_id)
            .where(*self._criteria(semester_ids, hostel_id, start_date, end_date, category))
            .order_by(Expense.expense_date.desc(), Expense.created_at.desc(), Expense.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        rows = []
        for expense, username, phone in result.all():
            rows.append({
                "id": expense.id,
                "hostel_id": expense.hostel_id,
                "semester_id": expense.semester_id,
                "amount": expense.amount,
                "description": expense.description,
                "category": expense.category,
                "expense_date": expense.expense_date,
                "created_at": expense.created_at,
                "recorded_by_user_id": expense.recorded_by_user_id,
                "recorded_by_username": username,
                "recorded_by_phone": phone,
            })
        return rows

    async def count_filtered(
        self,
        semester_ids: Sequence[int],
        hostel_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category: Optional[str] = None,
    ) -> int:
        if not semester_ids:
            return 0
        return await self.count(*self._criteria(semester_ids, hostel_id, start_date, end_date, category))

    # ==================== Aggregates ====================

    async def get_total(
        self,
        semester_ids: Sequence[int],
        hostel_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Decimal:
        if not semester_ids:
            return to_money(0)
        result = await self.session.execute(
            select(func.coalesce(func.sum(Expense.amount), 0)).where(
                *self._criteria(semester_ids, hostel_id, start_date, end_date)
            )
        )
        return to_money(result.scalar_one())

    async def get_totals_by_category(
        self,
        semester_ids: Sequence[int],
        hostel_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Dict[str, Any]]:
        """
        Sum of expenses per category, largest first.

        Returns:
            List of {"category", "total"} dictionaries
        """
        if not semester_ids:
            return []
        total = func.sum(Expense.amount).label("total")
        result = await self.session.execute(
            select(Expense.category, total)
            .where(*self._criteria(semester_ids, hostel_id, start_date, end_date))
            .group_by(Expense.category)
            .order_by(total.desc())
        )
        return [
            {"category": category, "total": to_money(amount)}
            for category, amount in result.all()
        ]
