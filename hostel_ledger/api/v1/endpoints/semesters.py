"""
Semester endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from hostel_ledger.api.deps import get_audit_context, get_current_principal, get_semester_service
from hostel_ledger.repositories.base import AuditContext
from hostel_ledger.schemas.semester import (
    SemesterCreate,
    SemesterCreated,
    SemesterResponse,
    SemesterStateResult,
)
from hostel_ledger.services import SemesterService
from hostel_ledger.services.common import Principal

router = APIRouter(prefix="/semesters", tags=["Semesters"])


@router.get("", response_model=List[SemesterResponse])
async def list_semesters(
    hostel_id: Optional[int] = Query(default=None, alias="hostelId", gt=0),
    principal: Principal = Depends(get_current_principal),
    service: SemesterService = Depends(get_semester_service),
) -> List[SemesterResponse]:
    return await service.list_semesters(principal, hostel_id)


@router.post("", response_model=SemesterCreated, status_code=status.HTTP_201_CREATED)
async def create_semester(
    payload: SemesterCreate,
    principal: Principal = Depends(get_current_principal),
    audit_context: AuditContext = Depends(get_audit_context),
    service: SemesterService = Depends(get_semester_service),
) -> SemesterCreated:
    """Create a semester. New semesters start inactive."""
    return await service.create_semester(
        principal,
        name=payload.name,
        start_date=payload.start_date,
        end_date=payload.end_date,
        hostel_id=payload.hostel_id,
        audit_context=audit_context,
    )


@router.post("/{semester_id}/activate", response_model=SemesterStateResult, response_model_exclude_none=True)
async def activate_semester(
    semester_id: int = Path(..., gt=0),
    principal: Principal = Depends(get_current_principal),
    audit_context: AuditContext = Depends(get_audit_context),
    service: SemesterService = Depends(get_semester_service),
) -> SemesterStateResult:
    return await service.activate(principal, semester_id, audit_context)


@router.post("/{semester_id}/deactivate", response_model=SemesterStateResult, response_model_exclude_none=True)
async def deactivate_semester(
    semester_id: int = Path(..., gt=0),
    principal: Principal = Depends(get_current_principal),
    audit_context: AuditContext = Depends(get_audit_context),
    service: SemesterService = Depends(get_semester_service),
) -> SemesterStateResult:
    return await service.deactivate(principal, semester_id, audit_context)
