"""
Expense endpoints.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from hostel_ledger.api.deps import (
    get_audit_context,
    get_current_principal,
    get_expense_service,
    get_reporting_service,
)
from hostel_ledger.repositories.base import AuditContext
from hostel_ledger.schemas.expense import (
    ExpenseCreate,
    ExpenseCreated,
    ExpenseListResponse,
    ExpenseStats,
)
from hostel_ledger.services import ExpenseService, ReportingService
from hostel_ledger.services.common import Principal
from hostel_ledger.services.reporting.reporting_service import DEFAULT_EXPENSE_LIMIT

router = APIRouter(prefix="/expenses", tags=["Expenses"])


@router.post("", response_model=ExpenseCreated, status_code=status.HTTP_201_CREATED)
async def record_expense(
    payload: ExpenseCreate,
    principal: Principal = Depends(get_current_principal),
    audit_context: AuditContext = Depends(get_audit_context),
    service: ExpenseService = Depends(get_expense_service),
) -> ExpenseCreated:
    return await service.record_expense(
        principal,
        amount=payload.amount,
        description=payload.description,
        expense_date=payload.expense_date,
        category=payload.category,
        semester_id=payload.semester_id,
        hostel_id=payload.hostel_id,
        audit_context=audit_context,
    )


@router.get("", response_model=ExpenseListResponse)
async def list_expenses(
    hostel_id: Optional[int] = Query(default=None, alias="hostelId", gt=0),
    semester_id: Optional[int] = Query(default=None, alias="semesterId", gt=0),
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    category: Optional[str] = Query(default=None, max_length=100),
    limit: int = Query(default=DEFAULT_EXPENSE_LIMIT, ge=1, le=DEFAULT_EXPENSE_LIMIT),
    offset: int = Query(default=0, ge=0),
    principal: Principal = Depends(get_current_principal),
    service: ReportingService = Depends(get_reporting_service),
) -> ExpenseListResponse:
    return await service.list_expenses(
        principal,
        hostel_id=hostel_id,
        semester_id=semester_id,
        start_date=start_date,
        end_date=end_date,
        category=category,
        limit=limit,
        offset=offset,
    )


@router.get("/stats", response_model=ExpenseStats)
async def expense_stats(
    hostel_id: Optional[int] = Query(default=None, alias="hostelId", gt=0),
    semester_id: Optional[int] = Query(default=None, alias="semesterId", gt=0),
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    principal: Principal = Depends(get_current_principal),
    service: ReportingService = Depends(get_reporting_service),
) -> ExpenseStats:
    return await service.expense_stats(
        principal,
        hostel_id=hostel_id,
        semester_id=semester_id,
        start_date=start_date,
        end_date=end_date,
    )
