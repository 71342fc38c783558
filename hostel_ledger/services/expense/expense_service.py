"""
Hostel expense recording.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from hostel_ledger.core.exceptions import ValidationError
from hostel_ledger.models.base.enums import AuditAction
from hostel_ledger.repositories.base import AuditContext
from hostel_ledger.repositories.expense import ExpenseRepository
from hostel_ledger.repositories.semester import SemesterRepository
from hostel_ledger.schemas.expense import ExpenseCreated
from hostel_ledger.services.audit import AuditService
from hostel_ledger.services.base.base_service import BaseService
from hostel_ledger.services.common.permissions import (
    Capability,
    Principal,
    require_capability,
    resolve_hostel_scope,
)
from hostel_ledger.utils.formatters import to_money

ENTITY_TYPE = "expense"


class ExpenseService(BaseService):
    """Every expense belongs to a semester, the active one unless named."""

    def __init__(self, session: AsyncSession, audit: Optional[AuditService] = None):
        super().__init__(session)
        self.expense_repo = ExpenseRepository(session)
        self.semester_repo = SemesterRepository(session)
        self.audit = audit or AuditService(session)

    async def record_expense(
        self,
        principal: Principal,
        amount: Decimal,
        description: str,
        expense_date: date,
        category: Optional[str] = None,
        semester_id: Optional[int] = None,
        hostel_id: Optional[int] = None,
        audit_context: Optional[AuditContext] = None,
    ) -> ExpenseCreated:
        """
        Record an expense.

        Raises:
            ValidationError: no hostel scope, no active semester, or a
                semester of another hostel
        """
        require_capability(principal, Capability.RECORD_EXPENSE)
        effective_hostel_id = resolve_hostel_scope(principal, hostel_id)

        if semester_id is None:
            semester_id = await self.semester_repo.get_active_semester_id(effective_hostel_id)
            if semester_id is None:
                raise ValidationError(
                    "No active semester found. Please activate a semester before recording expenses."
                )
        elif not await self.semester_repo.belongs_to_hostel(semester_id, effective_hostel_id):
            raise ValidationError("Invalid semester or semester does not belong to this hostel")

        amount = to_money(amount)
        async with self.transaction():
            expense = await self.expense_repo.create({
                "hostel_id": effective_hostel_id,
                "semester_id": semester_id,
                "amount": amount,
                "description": description,
                "category": category or None,
                "expense_date": expense_date,
                "recorded_by_user_id": principal.user_id,
            })
            await self.audit.record(
                principal,
                AuditAction.EXPENSE_RECORDED,
                ENTITY_TYPE,
                expense.id,
                {
                    "hostelId": effective_hostel_id,
                    "amount": str(amount),
                    "description": description,
                    "category": category,
                },
                audit_context,
            )

        self._logger.info("Expense recorded", extra={
            'expense_id': expense.id,
            'hostel_id': effective_hostel_id,
            'semester_id': semester_id,
        })
        return ExpenseCreated(expense_id=expense.id)
