"""
Receipt builder for recorded payments.
"""

from typing import Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from hostel_ledger.core.exceptions import ResourceNotFoundError
from hostel_ledger.models.base.base_model import utcnow
from hostel_ledger.repositories.hostel import HostelFeatureSettingRepository
from hostel_ledger.repositories.payment import PaymentRepository
from hostel_ledger.schemas.receipt import ReceiptData
from hostel_ledger.services.base.base_service import BaseService
from hostel_ledger.services.common.permissions import (
    Capability,
    Principal,
    ensure_same_hostel,
    require_capability,
)
from hostel_ledger.services.notification import message_templates
from hostel_ledger.services.notification.templates import template_engine
from hostel_ledger.services.pricing import PriceQuote


def receipt_number(payment_id: int) -> str:
    return f"RCP-{int(payment_id):06d}"


class ReceiptService(BaseService):
    """
    Receipts show what the student was quoted: when the hostel has custodian
    markup enabled and the allocation carries a display price, paid and
    balance are scaled to the display price.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.payment_repo = PaymentRepository(session)
        self.feature_repo = HostelFeatureSettingRepository(session)

    async def get_receipt(self, principal: Principal, payment_id: int) -> ReceiptData:
        """
        Build the receipt of a payment.

        Args:
            principal: Acting staff member
            payment_id: Payment ID

        Returns:
            ReceiptData with cumulative paid and remaining balance

        Raises:
            ResourceNotFoundError: payment missing, or its allocation was removed
            PermissionDenied: payment of another hostel
        """
        require_capability(principal, Capability.VIEW_RECEIPTS)
        receipt, hostel_id = await self.build(payment_id)
        ensure_same_hostel(principal, hostel_id, "Payment")
        return receipt

    async def build(self, payment_id: int) -> Tuple[ReceiptData, int]:
        """Build a receipt without access checks; also returns the owning hostel."""
        row = await self.payment_repo.get_receipt_row(payment_id)
        if row is None:
            raise ResourceNotFoundError("Payment", payment_id, message="Payment not found")
        payment, allocation, student, room, hostel = row

        total_paid = await self.payment_repo.get_total_paid(allocation.id)
        markup_enabled = await self.feature_repo.is_custodian_markup_enabled(allocation.hostel_id)
        quote = PriceQuote.from_allocation(allocation)

        receipt = ReceiptData(
            receipt_number=receipt_number(payment.id),
            hostel_name=hostel.name,
            hostel_contact_phone=hostel.contact_phone,
            student_name=student.full_name,
            registration_number=student.registration_number,
            student_phone=student.phone,
            room_number=room.name if room is not None else None,
            amount_paid=quote.to_display(total_paid, markup_enabled),
            total_required=quote.display_total(markup_enabled),
            balance=quote.display_balance(total_paid, markup_enabled),
            payment_date=payment.recorded_at,
            payment_id=payment.id,
        )
        return receipt, allocation.hostel_id

    def render_html(self, receipt: ReceiptData) -> str:
        return template_engine.render("receipt.html", {
            "receipt": receipt,
            "generated_at": utcnow(),
        })

    def render_sms(self, receipt: ReceiptData) -> str:
        return message_templates.create_receipt_message(
            receipt.receipt_number,
            receipt.hostel_name,
            receipt.student_name,
            receipt.room_number,
            receipt.amount_paid,
            receipt.balance,
            receipt.payment_date,
        )

