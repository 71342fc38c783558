"""
Allocation and payment endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from hostel_ledger.api.deps import (
    get_allocation_service,
    get_audit_context,
    get_current_principal,
    get_payment_service,
    get_reporting_service,
)
from hostel_ledger.repositories.base import AuditContext
from hostel_ledger.schemas.allocation import (
    AllocateRequest,
    AllocationListItem,
    AllocationResult,
    CheckoutResult,
)
from hostel_ledger.schemas.payment import (
    PaymentListItem,
    PaymentResult,
    PaymentSummary,
    RecordPaymentRequest,
)
from hostel_ledger.services import AllocationService, PaymentLedgerService, ReportingService
from hostel_ledger.services.common import Principal

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("/allocate", response_model=AllocationResult, status_code=status.HTTP_201_CREATED)
async def allocate_room(
    payload: AllocateRequest,
    principal: Principal = Depends(get_current_principal),
    audit_context: AuditContext = Depends(get_audit_context),
    service: AllocationService = Depends(get_allocation_service),
) -> AllocationResult:
    """Allocate a room to a student for the student's semester."""
    return await service.allocate(
        principal,
        student_id=payload.student_id,
        room_id=payload.room_id,
        hostel_id=payload.hostel_id,
        display_price=payload.display_price,
        audit_context=audit_context,
    )


@router.delete("/allocations/{allocation_id}", response_model=CheckoutResult)
async def checkout_allocation(
    allocation_id: int = Path(..., gt=0),
    principal: Principal = Depends(get_current_principal),
    audit_context: AuditContext = Depends(get_audit_context),
    service: AllocationService = Depends(get_allocation_service),
) -> CheckoutResult:
    """Remove an allocation. Recorded payments are kept."""
    return await service.checkout(principal, allocation_id, audit_context)


@router.post("", response_model=PaymentResult, status_code=status.HTTP_201_CREATED)
async def record_payment(
    payload: RecordPaymentRequest,
    principal: Principal = Depends(get_current_principal),
    audit_context: AuditContext = Depends(get_audit_context),
    service: PaymentLedgerService = Depends(get_payment_service),
) -> PaymentResult:
    """Record a full or partial payment received outside the system."""
    return await service.record_payment(
        principal,
        allocation_id=payload.allocation_id,
        amount=payload.amount,
        idempotency_key=payload.idempotency_key,
        audit_context=audit_context,
    )


@router.get("/summary/{allocation_id}", response_model=PaymentSummary)
async def payment_summary(
    allocation_id: int = Path(..., gt=0),
    principal: Principal = Depends(get_current_principal),
    service: PaymentLedgerService = Depends(get_payment_service),
) -> PaymentSummary:
    return await service.get_summary(principal, allocation_id)


@router.get("/allocations", response_model=List[AllocationListItem])
async def list_allocations(
    hostel_id: Optional[int] = Query(default=None, alias="hostelId", gt=0),
    principal: Principal = Depends(get_current_principal),
    service: ReportingService = Depends(get_reporting_service),
) -> List[AllocationListItem]:
    return await service.list_allocations(principal, hostel_id)


@router.get("", response_model=List[PaymentListItem])
async def list_payments(
    hostel_id: Optional[int] = Query(default=None, alias="hostelId", gt=0),
    principal: Principal = Depends(get_current_principal),
    service: ReportingService = Depends(get_reporting_service),
) -> List[PaymentListItem]:
    return await service.list_payments(principal, hostel_id)
