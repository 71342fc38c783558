"""
Student check-in and check-out.

A closed check-in releases the student's seat when room capacity is counted.
"""

from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from hostel_ledger.core.exceptions import (
    ConflictError,
    ErrorCode,
    ResourceNotFoundError,
    ValidationError,
)
from hostel_ledger.models.base.base_model import utcnow
from hostel_ledger.models.base.enums import AuditAction, MessageType
from hostel_ledger.models.student import Student
from hostel_ledger.repositories.base import AuditContext
from hostel_ledger.repositories.check_in import CheckInRepository
from hostel_ledger.repositories.student import StudentRepository
from hostel_ledger.schemas.check_in import CheckInResult, CheckOutResult
from hostel_ledger.services.audit import AuditService
from hostel_ledger.services.base.base_service import BaseService
from hostel_ledger.services.common.permissions import (
    Capability,
    Principal,
    ensure_entity_in_hostel,
    require_capability,
    resolve_hostel_scope,
)
from hostel_ledger.services.notification import NotificationDispatcher
from hostel_ledger.services.notification import message_templates

ENTITY_TYPE = "check_in"


class CheckInService(BaseService):
    """Open and close check-ins for the student's current semester."""

    def __init__(
        self,
        session: AsyncSession,
        notifier: Optional[NotificationDispatcher] = None,
        audit: Optional[AuditService] = None,
    ):
        super().__init__(session)
        self.check_in_repo = CheckInRepository(session)
        self.student_repo = StudentRepository(session)
        self.audit = audit or AuditService(session)
        self.notifier = notifier or NotificationDispatcher(session)

    async def _load_student(
        self,
        principal: Principal,
        student_id: int,
        hostel_id: Optional[int],
    ) -> Tuple[int, Student, str]:
        effective_hostel_id = resolve_hostel_scope(principal, hostel_id)
        student, hostel_name = await self.student_repo.get_with_hostel_name(student_id)
        if student is None:
            raise ResourceNotFoundError("Student", student_id, message="Student not found")
        ensure_entity_in_hostel(principal, student.hostel_id, effective_hostel_id, "Student")
        if not student.semester_id:
            raise ValidationError("Student is not registered for a semester")
        return effective_hostel_id, student, hostel_name or "Hostel"

    async def check_in(
        self,
        principal: Principal,
        student_id: int,
        hostel_id: Optional[int] = None,
        audit_context: Optional[AuditContext] = None,
    ) -> CheckInResult:
        """
        Check a student in for their semester.

        Raises:
            ResourceNotFoundError: student missing
            PermissionDenied: student of another hostel
            ValidationError: no hostel scope, or student without semester
            ConflictError: student already checked in
        """
        require_capability(principal, Capability.MANAGE_CHECK_INS)
        effective_hostel_id, student, hostel_name = await self._load_student(
            principal, student_id, hostel_id
        )

        existing = await self.check_in_repo.get_open(student.id, student.semester_id)
        if existing is not None:
            raise ConflictError(
                "Student is already checked in",
                error_code=ErrorCode.ALREADY_CHECKED_IN,
                details={"checkInId": existing.id},
            )

        async with self.transaction():
            check_in = await self.check_in_repo.create({
                "student_id": student.id,
                "hostel_id": effective_hostel_id,
                "semester_id": student.semester_id,
                "checked_in_by_user_id": principal.user_id,
            })
            await self.audit.record(
                principal,
                AuditAction.STUDENT_CHECKED_IN,
                ENTITY_TYPE,
                check_in.id,
                {"hostelId": effective_hostel_id, "studentId": student.id, "semesterId": student.semester_id},
                audit_context,
            )

        notification = await self.notifier.send_sms(
            student_id=student.id,
            phone=student.phone,
            message_type=MessageType.CHECK_IN,
            sms_text=message_templates.create_check_in_message(hostel_name, student.full_name or "Student"),
            sent_by_user_id=principal.user_id,
        )
        return CheckInResult(
            check_in_id=check_in.id,
            sms_sent=notification.sms_sent,
            sms_history_id=notification.sms_history_id,
        )

    async def check_out(
        self,
        principal: Principal,
        student_id: int,
        hostel_id: Optional[int] = None,
        audit_context: Optional[AuditContext] = None,
    ) -> CheckOutResult:
        """
        Close the student's open check-in.

        Raises:
            ResourceNotFoundError: student missing or not checked in
        """
        require_capability(principal, Capability.MANAGE_CHECK_INS)
        effective_hostel_id, student, hostel_name = await self._load_student(
            principal, student_id, hostel_id
        )

        open_check_in = await self.check_in_repo.get_open(student.id, student.semester_id)
        if open_check_in is None:
            raise ResourceNotFoundError(
                "CheckIn", None, message="Student is not currently checked in"
            )

        async with self.transaction():
            await self.check_in_repo.update(open_check_in, {
                "checked_out_at": utcnow(),
                "checked_out_by_user_id": principal.user_id,
            })
            await self.audit.record(
                principal,
                AuditAction.STUDENT_CHECKED_OUT,
                ENTITY_TYPE,
                open_check_in.id,
                {"hostelId": effective_hostel_id, "studentId": student.id, "semesterId": student.semester_id},
                audit_context,
            )

        notification = await self.notifier.send_sms(
            student_id=student.id,
            phone=student.phone,
            message_type=MessageType.CHECK_OUT,
            sms_text=message_templates.create_check_out_message(hostel_name, student.full_name or "Student"),
            sent_by_user_id=principal.user_id,
        )
        return CheckOutResult(
            sms_sent=notification.sms_sent,
            sms_history_id=notification.sms_history_id,
        )
