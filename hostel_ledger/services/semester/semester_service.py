"""
Semester management.

A hostel has at most one active semester. Allocations, payments, check-ins
and expenses all hang off a semester, and listings default to the active one.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from hostel_ledger.core.exceptions import ResourceNotFoundError
from hostel_ledger.models.base.enums import AuditAction
from hostel_ledger.models.semester import Semester
from hostel_ledger.repositories.base import AuditContext
from hostel_ledger.repositories.semester import SemesterRepository
from hostel_ledger.schemas.semester import SemesterCreated, SemesterResponse, SemesterStateResult
from hostel_ledger.services.audit import AuditService
from hostel_ledger.services.base.base_service import BaseService
from hostel_ledger.services.common.permissions import (
    Capability,
    Principal,
    ensure_same_hostel,
    optional_hostel_scope,
    require_capability,
    resolve_hostel_scope,
)

ENTITY_TYPE = "semester"


class SemesterService(BaseService):
    """Create, list and switch semesters."""

    def __init__(self, session: AsyncSession, audit: Optional[AuditService] = None):
        super().__init__(session)
        self.semester_repo = SemesterRepository(session)
        self.audit = audit or AuditService(session)

    async def create_semester(
        self,
        principal: Principal,
        name: str,
        start_date: date,
        end_date: Optional[date] = None,
        hostel_id: Optional[int] = None,
        audit_context: Optional[AuditContext] = None,
    ) -> SemesterCreated:
        """Create an inactive semester."""
        require_capability(principal, Capability.MANAGE_SEMESTERS)
        effective_hostel_id = resolve_hostel_scope(principal, hostel_id)

        async with self.transaction():
            semester = await self.semester_repo.create({
                "hostel_id": effective_hostel_id,
                "name": name,
                "start_date": start_date,
                "end_date": end_date,
                "is_active": False,
            })
            await self.audit.record(
                principal,
                AuditAction.SEMESTER_CREATED,
                ENTITY_TYPE,
                semester.id,
                {
                    "hostelId": effective_hostel_id,
                    "name": name,
                    "startDate": start_date.isoformat(),
                    "endDate": end_date.isoformat() if end_date else None,
                },
                audit_context,
            )

        self._logger.info("Semester created", extra={
            'semester_id': semester.id,
            'hostel_id': effective_hostel_id,
        })
        return SemesterCreated(semester_id=semester.id)

    async def list_semesters(
        self,
        principal: Principal,
        hostel_id: Optional[int] = None,
    ) -> List[SemesterResponse]:
        require_capability(principal, Capability.MANAGE_SEMESTERS)
        scope = optional_hostel_scope(principal, hostel_id)
        semesters = await self.semester_repo.list_for_hostel(scope)
        return [SemesterResponse.model_validate(s) for s in semesters]

    async def _load(self, principal: Principal, semester_id: int) -> Semester:
        semester = await self.semester_repo.get_by_id(semester_id)
        if semester is None:
            raise ResourceNotFoundError("Semester", semester_id, message="Semester not found")
        ensure_same_hostel(principal, semester.hostel_id, "Semester")
        return semester

    async def activate(
        self,
        principal: Principal,
        semester_id: int,
        audit_context: Optional[AuditContext] = None,
    ) -> SemesterStateResult:
        """
        Make a semester the hostel's only active semester.

        Activating the semester that is already the single active one is a
        no-op reported with ``already_active``.

        Raises:
            ResourceNotFoundError: semester missing
            ValidationError: staff member not linked to a hostel
            PermissionDenied: semester of another hostel
        """
        require_capability(principal, Capability.MANAGE_SEMESTERS)
        semester = await self._load(principal, semester_id)

        if semester.is_active:
            others = await self.semester_repo.count_other_active(semester.hostel_id, semester.id)
            if others == 0:
                return SemesterStateResult(
                    message="Semester is already active. This operation is idempotent.",
                    already_active=True,
                )

        async with self.transaction():
            await self.semester_repo.activate_exclusively(semester)
            await self.audit.record(
                principal,
                AuditAction.SEMESTER_ACTIVATED,
                ENTITY_TYPE,
                semester.id,
                {"hostelId": semester.hostel_id},
                audit_context,
            )

        self._logger.info("Semester activated", extra={
            'semester_id': semester.id,
            'hostel_id': semester.hostel_id,
        })
        return SemesterStateResult(message="Semester activated successfully")

    async def deactivate(
        self,
        principal: Principal,
        semester_id: int,
        audit_context: Optional[AuditContext] = None,
    ) -> SemesterStateResult:
        require_capability(principal, Capability.MANAGE_SEMESTERS)
        semester = await self._load(principal, semester_id)

        if not semester.is_active:
            return SemesterStateResult(
                message="Semester is already inactive. This operation is idempotent.",
                already_inactive=True,
            )

        async with self.transaction():
            await self.semester_repo.update(semester, {"is_active": False})
            await self.audit.record(
                principal,
                AuditAction.SEMESTER_DEACTIVATED,
                ENTITY_TYPE,
                semester.id,
                {"hostelId": semester.hostel_id},
                audit_context,
            )

        return SemesterStateResult(message="Semester deactivated successfully")

    async def get_active_semester_id(self, hostel_id: int) -> Optional[int]:
        return await self.semester_repo.get_active_semester_id(hostel_id)
