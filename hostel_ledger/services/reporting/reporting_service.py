"""
Read-only listings scoped by hostel and semester.

Unless a semester is named, every listing shows the hostel's active
semester. A hostel without an active semester lists nothing.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from hostel_ledger.core.exceptions import ValidationError
from hostel_ledger.repositories.allocation import AllocationRepository
from hostel_ledger.repositories.check_in import CheckInRepository
from hostel_ledger.repositories.expense import ExpenseRepository
from hostel_ledger.repositories.payment import PaymentRepository
from hostel_ledger.repositories.semester import SemesterRepository
from hostel_ledger.schemas.allocation import AllocationListItem
from hostel_ledger.schemas.check_in import CheckInListItem
from hostel_ledger.schemas.expense import (
    CategoryTotal,
    ExpenseListItem,
    ExpenseListResponse,
    ExpenseStats,
)
from hostel_ledger.schemas.payment import PaymentListItem
from hostel_ledger.services.base.base_service import BaseService
from hostel_ledger.services.common.permissions import (
    Capability,
    Principal,
    optional_hostel_scope,
    require_capability,
)

DEFAULT_EXPENSE_LIMIT = 1000


class ReportingService(BaseService):
    """Listings for allocations, payments, check-ins and expenses."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.semester_repo = SemesterRepository(session)
        self.allocation_repo = AllocationRepository(session)
        self.payment_repo = PaymentRepository(session)
        self.check_in_repo = CheckInRepository(session)
        self.expense_repo = ExpenseRepository(session)

    async def _semester_ids(
        self,
        hostel_id: Optional[int],
        semester_id: Optional[int] = None,
    ) -> List[int]:
        """
        Semesters a listing covers.

        Args:
            hostel_id: Resolved hostel scope; None means every hostel
            semester_id: Explicitly requested semester

        Raises:
            ValidationError: requested semester is not one of the hostel's
        """
        if semester_id:
            if hostel_id and not await self.semester_repo.belongs_to_hostel(semester_id, hostel_id):
                raise ValidationError("Invalid semester or semester does not belong to this hostel")
            return [semester_id]
        if hostel_id is None:
            return await self.semester_repo.get_active_semester_ids()
        active_id = await self.semester_repo.get_active_semester_id(hostel_id)
        return [active_id] if active_id else []

    # -------------------------------------------------------------------------
    # Ledger
    # -------------------------------------------------------------------------

    async def list_allocations(
        self,
        principal: Principal,
        hostel_id: Optional[int] = None,
    ) -> List[AllocationListItem]:
        require_capability(principal, Capability.VIEW_ALLOCATIONS)
        scope = optional_hostel_scope(principal, hostel_id)
        semester_ids = await self._semester_ids(scope)
        allocations = await self.allocation_repo.list_for_semesters(semester_ids, scope)
        return [AllocationListItem.model_validate(a) for a in allocations]

    async def list_payments(
        self,
        principal: Principal,
        hostel_id: Optional[int] = None,
    ) -> List[PaymentListItem]:
        require_capability(principal, Capability.VIEW_PAYMENTS)
        scope = optional_hostel_scope(principal, hostel_id)
        semester_ids = await self._semester_ids(scope)
        payments = await self.payment_repo.list_for_semesters(semester_ids, scope)
        return [PaymentListItem.model_validate(p) for p in payments]

    async def list_check_ins(
        self,
        principal: Principal,
        hostel_id: Optional[int] = None,
    ) -> List[CheckInListItem]:
        require_capability(principal, Capability.MANAGE_CHECK_INS)
        scope = optional_hostel_scope(principal, hostel_id)
        semester_ids = await self._semester_ids(scope)
        rows = await self.check_in_repo.list_for_semesters(semester_ids, scope)
        return [CheckInListItem.model_validate(row) for row in rows]

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    async def list_expenses(
        self,
        principal: Principal,
        hostel_id: Optional[int] = None,
        semester_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category: Optional[str] = None,
        limit: int = DEFAULT_EXPENSE_LIMIT,
        offset: int = 0,
    ) -> ExpenseListResponse:
        """
        Page through expenses.

        Returns:
            ExpenseListResponse; ``total`` counts every matching row
        """
        require_capability(principal, Capability.VIEW_EXPENSES)
        scope = optional_hostel_scope(principal, hostel_id)
        semester_ids = await self._semester_ids(scope, semester_id)
        if not semester_ids:
            return ExpenseListResponse(limit=limit, offset=offset)

        rows = await self.expense_repo.list_filtered(
            semester_ids, scope, start_date, end_date, category, limit, offset
        )
        total = await self.expense_repo.count_filtered(
            semester_ids, scope, start_date, end_date, category
        )
        return ExpenseListResponse(
            expenses=[ExpenseListItem.model_validate(row) for row in rows],
            total=total,
            limit=limit,
            offset=offset,
        )

    async def expense_stats(
        self,
        principal: Principal,
        hostel_id: Optional[int] = None,
        semester_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> ExpenseStats:
        require_capability(principal, Capability.VIEW_EXPENSES)
        scope = optional_hostel_scope(principal, hostel_id)
        semester_ids = await self._semester_ids(scope, semester_id)

        total = await self.expense_repo.get_total(semester_ids, scope, start_date, end_date)
        by_category = await self.expense_repo.get_totals_by_category(
            semester_ids, scope, start_date, end_date
        )
        return ExpenseStats(
            total=total,
            by_category=[CategoryTotal.model_validate(row) for row in by_category],
        )
