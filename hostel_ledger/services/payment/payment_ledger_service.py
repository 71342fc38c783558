"""
Payment ledger service.

Payments are append-only. Each allocation owes exactly its frozen
per-student price; the sum of its payments never exceeds it.
"""

from datetime import timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_ledger.config.settings import settings
from hostel_ledger.core.exceptions import (
    DuplicatePaymentError,
    ResourceNotFoundError,
    ValidationError,
)
from hostel_ledger.core.logging import log_execution_time
from hostel_ledger.models.allocation import Allocation
from hostel_ledger.models.base.base_model import utcnow
from hostel_ledger.models.base.enums import AuditAction, MessageType
from hostel_ledger.repositories.allocation import AllocationRepository
from hostel_ledger.repositories.base import AuditContext
from hostel_ledger.repositories.payment import PaymentRepository
from hostel_ledger.repositories.student import StudentRepository
from hostel_ledger.schemas.payment import PaymentResult, PaymentSummary, RoomRef, StudentRef
from hostel_ledger.services.audit import AuditService
from hostel_ledger.services.base.base_service import BaseService
from hostel_ledger.services.common.permissions import (
    Capability,
    Principal,
    ensure_same_hostel,
    require_capability,
)
from hostel_ledger.services.notification import DispatchResult, NotificationDispatcher
from hostel_ledger.services.notification import message_templates
from hostel_ledger.services.payment.receipt_service import ReceiptService
from hostel_ledger.utils.formatters import ZERO, format_amount, to_money

ENTITY_TYPE = "payment"

RECENT_DUPLICATE_MESSAGE = (
    "A payment with the same amount was recorded very recently. This may be a "
    "duplicate request. Please refresh and check if the payment was already recorded."
)


def _plain_amount(amount: Decimal) -> str:
    """150000 -> '150,000'; 1500.5 -> '1,500.50'."""
    amount = to_money(amount)
    if amount == amount.to_integral_value():
        return format_amount(amount)
    return format_amount(amount, 2)


class PaymentLedgerService(BaseService):
    """
    Records payments against allocations:
    - Row lock on the allocation while checking the balance
    - Replays rejected by idempotency key, then by a short debounce window
    - Receipt sent to the student after commit
    """

    def __init__(
        self,
        session: AsyncSession,
        notifier: Optional[NotificationDispatcher] = None,
        audit: Optional[AuditService] = None,
    ):
        super().__init__(session)
        self.allocation_repo = AllocationRepository(session)
        self.payment_repo = PaymentRepository(session)
        self.student_repo = StudentRepository(session)
        self.receipts = ReceiptService(session)
        self.audit = audit or AuditService(session)
        self.notifier = notifier or NotificationDispatcher(session)

    async def _load_allocation(
        self,
        principal: Principal,
        allocation_id: int,
        for_update: bool = False,
    ) -> Allocation:
        allocation = await self.allocation_repo.get_by_id(allocation_id, for_update=for_update)
        if allocation is None:
            raise ResourceNotFoundError("Allocation", allocation_id, message="Allocation not found")
        ensure_same_hostel(principal, allocation.hostel_id, "Allocation")
        return allocation

    # -------------------------------------------------------------------------
    # Recording
    # -------------------------------------------------------------------------

    @log_execution_time("hostel_ledger.services.payment")
    async def record_payment(
        self,
        principal: Principal,
        allocation_id: int,
        amount: Decimal,
        idempotency_key: Optional[str] = None,
        audit_context: Optional[AuditContext] = None,
    ) -> PaymentResult:
        """
        Record a payment received outside the system.

        Args:
            principal: Acting staff member
            allocation_id: Allocation being paid
            amount: Amount received (at least 0.01)
            idempotency_key: Client key identifying this submission
            audit_context: Request origin for the audit row

        Returns:
            PaymentResult with the new totals and receipt delivery outcome

        Raises:
            ResourceNotFoundError: allocation missing
            PermissionDenied: allocation of another hostel
            ValidationError: nothing left to pay, or amount above the balance
            DuplicatePaymentError: replayed key or same payment seconds ago
        """
        require_capability(principal, Capability.RECORD_PAYMENT)
        amount = to_money(amount)
        if amount <= ZERO:
            raise ValidationError("Payment amount must be greater than zero")

        try:
            async with self.transaction():
                allocation = await self._load_allocation(principal, allocation_id, for_update=True)

                if idempotency_key:
                    previous = await self.payment_repo.get_by_idempotency_key(allocation.id, idempotency_key)
                    if previous is not None:
                        raise DuplicatePaymentError(
                            "This payment was already recorded (same idempotency key).",
                            previous.id,
                        )

                total_required = to_money(allocation.room_price_at_allocation)
                current_paid = await self.payment_repo.get_total_paid(allocation.id)
                current_balance = total_required - current_paid
                if current_balance <= ZERO:
                    raise ValidationError(
                        "This student has already completed their payment. "
                        "No additional payments can be recorded."
                    )
                if amount > current_balance:
                    balance_text = _plain_amount(current_balance)
                    raise ValidationError(
                        f"Payment amount ({_plain_amount(amount)}) exceeds the outstanding balance "
                        f"({balance_text}). Maximum allowed: {balance_text}"
                    )

                since = utcnow() - timedelta(seconds=settings.PAYMENT_DEDUP_WINDOW_SECONDS)
                recent = await self.payment_repo.find_recent_duplicate(
                    allocation.id, amount, principal.user_id, since
                )
                if recent is not None:
                    raise DuplicatePaymentError(RECENT_DUPLICATE_MESSAGE, recent.id)

                payment = await self.payment_repo.create({
                    "allocation_id": allocation.id,
                    "hostel_id": allocation.hostel_id,
                    "semester_id": allocation.semester_id,
                    "student_id": allocation.student_id,
                    "amount": amount,
                    "recorded_by_user_id": principal.user_id,
                    "idempotency_key": idempotency_key,
                })
                await self.audit.record(
                    principal,
                    AuditAction.PAYMENT_RECORDED,
                    ENTITY_TYPE,
                    payment.id,
                    {"allocationId": allocation.id, "amount": str(amount)},
                    audit_context,
                )
        except IntegrityError:
            # Same idempotency key committed by a concurrent request
            previous = None
            if idempotency_key:
                previous = await self.payment_repo.get_by_idempotency_key(allocation_id, idempotency_key)
            if previous is None:
                raise
            raise DuplicatePaymentError(
                "This payment was already recorded (same idempotency key).",
                previous.id,
            )

        total_paid = await self.payment_repo.get_total_paid(allocation_id)
        balance = total_required - total_paid

        self._logger.info("Payment recorded", extra={
            'payment_id': payment.id,
            'allocation_id': allocation_id,
            'amount': str(amount),
            'balance': str(balance),
        })

        notification = await self._send_receipt(principal, payment.id, allocation.student_id)

        return PaymentResult(
            allocation_id=allocation_id,
            payment_id=payment.id,
            total_required=total_required,
            total_paid=total_paid,
            balance=balance,
            receipt_sent=notification.delivered,
            email_sent=notification.email_sent,
            email_history_id=notification.email_history_id,
            sms_sent=notification.sms_sent,
            sms_history_id=notification.sms_history_id,
        )

    async def _send_receipt(self, principal: Principal, payment_id: int, student_id: int) -> DispatchResult:
        try:
            receipt, _ = await self.receipts.build(payment_id)
            student = await self.student_repo.get_by_id(student_id)
            if student is None:
                return DispatchResult()
            email_html = self.receipts.render_html(receipt) if student.email else None
            sms_text = self.receipts.render_sms(receipt)
        except Exception as e:
            self._logger.error(f"Failed to prepare receipt for payment {payment_id}: {e}")
            return DispatchResult()

        return await self.notifier.dispatch(
            student_id=student.id,
            email=student.email,
            phone=student.phone,
            message_type=MessageType.RECEIPT,
            email_subject=message_templates.receipt_subject(receipt.receipt_number, receipt.hostel_name),
            email_html=email_html,
            sms_text=sms_text,
            sent_by_user_id=principal.user_id,
        )

    # -------------------------------------------------------------------------
    # Summary
    # -------------------------------------------------------------------------

    async def get_summary(self, principal: Principal, allocation_id: int) -> PaymentSummary:
        """Balance snapshot of one allocation in actual (not quoted) amounts."""
        require_capability(principal, Capability.VIEW_PAYMENTS)
        await self._load_allocation(principal, allocation_id)

        allocation, student, room = await self.allocation_repo.get_with_student_and_room(allocation_id)
        total_required = to_money(allocation.room_price_at_allocation)
        total_paid = await self.payment_repo.get_total_paid(allocation_id)

        return PaymentSummary(
            allocation_id=allocation.id,
            student=StudentRef.model_validate(student),
            room=RoomRef.model_validate(room),
            total_required=total_required,
            total_paid=total_paid,
            balance=total_required - total_paid,
        )
