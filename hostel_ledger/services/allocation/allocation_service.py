"""
Room allocation service.

Binds a student to a room for the student's semester at a frozen
per-student price, and removes that binding on checkout.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_ledger.core.exceptions import (
    ConflictError,
    ErrorCode,
    ResourceNotFoundError,
    ValidationError,
)
from hostel_ledger.core.logging import log_execution_time
from hostel_ledger.models.allocation import Allocation
from hostel_ledger.models.base.enums import AuditAction, MessageType
from hostel_ledger.models.room import Room
from hostel_ledger.models.student import Student
from hostel_ledger.repositories.allocation import AllocationRepository
from hostel_ledger.repositories.base import AuditContext
from hostel_ledger.repositories.hostel import HostelFeatureSettingRepository
from hostel_ledger.repositories.room import RoomRepository
from hostel_ledger.repositories.student import StudentRepository
from hostel_ledger.schemas.allocation import AllocationResult, CheckoutResult
from hostel_ledger.services.audit import AuditService
from hostel_ledger.services.base.base_service import BaseService
from hostel_ledger.services.common.permissions import (
    Capability,
    Principal,
    ensure_entity_in_hostel,
    ensure_same_hostel,
    require_capability,
    resolve_hostel_scope,
)
from hostel_ledger.services.notification import DispatchResult, NotificationDispatcher
from hostel_ledger.services.notification import message_templates
from hostel_ledger.services.pricing import display_price_per_student, price_per_student

ENTITY_TYPE = "allocation"


class AllocationService(BaseService):
    """
    Allocation manager.

    One allocation per (student, semester). Seats are counted per room and
    semester; a student whose check-in was closed frees their seat.
    """

    def __init__(
        self,
        session: AsyncSession,
        notifier: Optional[NotificationDispatcher] = None,
        audit: Optional[AuditService] = None,
    ):
        super().__init__(session)
        self.allocation_repo = AllocationRepository(session)
        self.room_repo = RoomRepository(session)
        self.student_repo = StudentRepository(session)
        self.feature_repo = HostelFeatureSettingRepository(session)
        self.audit = audit or AuditService(session)
        self.notifier = notifier or NotificationDispatcher(session)

    # -------------------------------------------------------------------------
    # Allocate
    # -------------------------------------------------------------------------

    @log_execution_time("hostel_ledger.services.allocation")
    async def allocate(
        self,
        principal: Principal,
        student_id: int,
        room_id: int,
        hostel_id: Optional[int] = None,
        display_price: Optional[Decimal] = None,
        audit_context: Optional[AuditContext] = None,
    ) -> AllocationResult:
        """
        Allocate a room to a student for the student's semester.

        Args:
            principal: Acting staff member
            student_id: Student to house
            room_id: Target room
            hostel_id: Hostel to act on (required for Super-Admins)
            display_price: Room price quoted to the student (custodians only,
                when price markup is enabled)
            audit_context: Request origin for the audit row

        Returns:
            AllocationResult with pricing and notification outcome

        Raises:
            ValidationError: scope missing, no semester, room full, bad display price
            PermissionDenied: room or student of another hostel, display price by non-custodian
            ResourceNotFoundError: room or student missing
            ConflictError: student already holds an allocation this semester
        """
        require_capability(principal, Capability.ALLOCATE_ROOM)
        effective_hostel_id = resolve_hostel_scope(principal, hostel_id)

        room = await self.room_repo.get_active(room_id)
        if room is None:
            raise ResourceNotFoundError("Room", room_id, message="Room not found or inactive")
        ensure_entity_in_hostel(principal, room.hostel_id, effective_hostel_id, "Room")

        student, hostel_name = await self.student_repo.get_with_hostel_name(student_id)
        if student is None:
            raise ResourceNotFoundError("Student", student_id, message="Student not found")
        ensure_entity_in_hostel(principal, student.hostel_id, effective_hostel_id, "Student")
        if not student.semester_id:
            raise ValidationError("Student is not registered for a semester")
        semester_id = student.semester_id

        existing = await self.allocation_repo.get_for_student_semester(student.id, semester_id)
        if existing is not None:
            raise self._already_allocated(existing, room.id)

        capacity = int(room.capacity or 1)
        occupied = await self.allocation_repo.count_occupied(room.id, semester_id)
        if occupied >= capacity:
            raise ValidationError(
                f"Room is at full capacity ({occupied}/{capacity}). Cannot allocate more students."
            )

        per_student = price_per_student(room.price, capacity)
        display_per_student = None
        if display_price is not None:
            display_per_student = await self._validate_display_price(
                principal, effective_hostel_id, display_price, capacity, room.price
            )

        try:
            async with self.transaction():
                allocation = await self.allocation_repo.create({
                    "hostel_id": effective_hostel_id,
                    "semester_id": semester_id,
                    "student_id": student.id,
                    "room_id": room.id,
                    "room_price_at_allocation": per_student,
                    "display_price_at_allocation": display_per_student,
                })
                await self.audit.record(
                    principal,
                    AuditAction.ROOM_ALLOCATED,
                    ENTITY_TYPE,
                    allocation.id,
                    {"hostelId": effective_hostel_id, "studentId": student.id, "roomId": room.id},
                    audit_context,
                )
        except IntegrityError:
            # Lost a race with a concurrent allocation for the same student
            existing = await self.allocation_repo.get_for_student_semester(student.id, semester_id)
            if existing is not None:
                raise self._already_allocated(existing, room.id)
            raise ConflictError(
                "Student already has an allocation for this semester",
                error_code=ErrorCode.ALREADY_ALLOCATED,
            )

        self._logger.info("Room allocated", extra={
            'allocation_id': allocation.id,
            'hostel_id': effective_hostel_id,
            'room_id': room.id,
            'student_id': student.id,
        })

        notification = await self._notify_registration(
            principal, student, room, hostel_name, display_per_student or per_student
        )

        return AllocationResult(
            allocation_id=allocation.id,
            total_required=per_student,
            room_capacity=capacity,
            price_per_student=per_student,
            display_price_per_student=display_per_student,
            email_sent=notification.email_sent,
            email_history_id=notification.email_history_id,
            sms_sent=notification.sms_sent,
            sms_history_id=notification.sms_history_id,
        )

    def _already_allocated(self, existing: Allocation, room_id: int) -> ConflictError:
        if int(existing.room_id) == int(room_id):
            return ConflictError(
                "Student is already allocated to this room for this semester. "
                "This operation is idempotent.",
                error_code=ErrorCode.ALREADY_ALLOCATED,
                details={"allocationId": existing.id},
            )
        return ConflictError(
            f"Student already has an allocation for this semester (room ID: {existing.room_id}). "
            "Please remove the existing allocation first if you want to change rooms.",
            error_code=ErrorCode.ALREADY_ALLOCATED,
            details={"allocationId": existing.id, "roomId": existing.room_id},
        )

    async def _validate_display_price(
        self,
        principal: Principal,
        hostel_id: int,
        display_price: Decimal,
        capacity: int,
        room_price: Decimal,
    ) -> Decimal:
        markup_enabled = await self.feature_repo.is_custodian_markup_enabled(hostel_id)
        if not markup_enabled:
            raise ValidationError(
                "Display price is only allowed when custodian price markup feature is enabled for this hostel"
            )
        require_capability(
            principal,
            Capability.SET_DISPLAY_PRICE,
            error_message="Only custodians can set display prices when the feature is enabled",
        )
        return display_price_per_student(display_price, capacity, room_price)

    async def _notify_registration(
        self,
        principal: Principal,
        student: Student,
        room: Room,
        hostel_name: Optional[str],
        balance: Decimal,
    ) -> DispatchResult:
        hostel_name = hostel_name or "Hostel"
        student_name = student.full_name or "Student"
        room_number = room.name or str(room.id)
        amount_paid = Decimal("0")

        try:
            email_html = None
            if student.email:
                email_html = message_templates.create_registration_email(
                    hostel_name, student_name, room_number, amount_paid, balance
                )
            sms_text = message_templates.create_registration_message(
                hostel_name, student_name, room_number, amount_paid, balance
            )
        except Exception as e:
            self._logger.error(f"Failed to build registration notification: {e}")
            return DispatchResult()

        return await self.notifier.dispatch(
            student_id=student.id,
            email=student.email,
            phone=student.phone,
            message_type=MessageType.REGISTRATION,
            email_subject=message_templates.registration_subject(hostel_name),
            email_html=email_html,
            sms_text=sms_text,
            sent_by_user_id=principal.user_id,
        )

    # -------------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------------

    async def checkout(
        self,
        principal: Principal,
        allocation_id: int,
        audit_context: Optional[AuditContext] = None,
    ) -> CheckoutResult:
        """
        Remove an allocation.

        There is no balance check. Payments recorded against the allocation
        stay in the ledger.

        Raises:
            ResourceNotFoundError: allocation missing
            ValidationError: staff member not linked to a hostel
            PermissionDenied: allocation of another hostel
        """
        require_capability(principal, Capability.CHECKOUT_ALLOCATION)

        allocation = await self.allocation_repo.get_by_id(allocation_id)
        if allocation is None:
            raise ResourceNotFoundError("Allocation", allocation_id, message="Allocation not found")
        ensure_same_hostel(principal, allocation.hostel_id, "Allocation")

        details = {
            "hostelId": allocation.hostel_id,
            "studentId": allocation.student_id,
            "roomId": allocation.room_id,
        }
        async with self.transaction():
            await self.allocation_repo.delete(allocation)
            await self.audit.record(
                principal,
                AuditAction.STUDENT_CHECKED_OUT,
                ENTITY_TYPE,
                allocation_id,
                details,
                audit_context,
            )

        self._logger.info("Allocation removed", extra={
            'allocation_id': allocation_id,
            'hostel_id': details["hostelId"],
        })
        return CheckoutResult(allocation_id=allocation_id)
