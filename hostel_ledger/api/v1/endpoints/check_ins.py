"""
Check-in endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from hostel_ledger.api.deps import (
    get_audit_context,
    get_check_in_service,
    get_current_principal,
    get_reporting_service,
)
from hostel_ledger.repositories.base import AuditContext
from hostel_ledger.schemas.check_in import (
    CheckInListItem,
    CheckInRequest,
    CheckInResult,
    CheckOutResult,
)
from hostel_ledger.services import CheckInService, ReportingService
from hostel_ledger.services.common import Principal

router = APIRouter(prefix="/check-ins", tags=["Check-ins"])


@router.get("", response_model=List[CheckInListItem])
async def list_check_ins(
    hostel_id: Optional[int] = Query(default=None, alias="hostelId", gt=0),
    principal: Principal = Depends(get_current_principal),
    service: ReportingService = Depends(get_reporting_service),
) -> List[CheckInListItem]:
    return await service.list_check_ins(principal, hostel_id)


@router.post("", response_model=CheckInResult, status_code=status.HTTP_201_CREATED)
async def check_in_student(
    payload: CheckInRequest,
    principal: Principal = Depends(get_current_principal),
    audit_context: AuditContext = Depends(get_audit_context),
    service: CheckInService = Depends(get_check_in_service),
) -> CheckInResult:
    return await service.check_in(principal, payload.student_id, payload.hostel_id, audit_context)


@router.post("/checkout", response_model=CheckOutResult)
async def check_out_student(
    payload: CheckInRequest,
    principal: Principal = Depends(get_current_principal),
    audit_context: AuditContext = Depends(get_audit_context),
    service: CheckInService = Depends(get_check_in_service),
) -> CheckOutResult:
    return await service.check_out(principal, payload.student_id, payload.hostel_id, audit_context)
