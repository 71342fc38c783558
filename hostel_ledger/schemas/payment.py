"""
Payment ledger request and response schemas.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from hostel_ledger.schemas.common.base import (
    BaseCreateSchema,
    BaseResponseSchema,
    BaseSchema,
    MoneyAmount,
    MoneyOut,
)

__all__ = [
    "RecordPaymentRequest",
    "PaymentResult",
    "StudentRef",
    "RoomRef",
    "PaymentSummary",
    "PaymentListItem",
]


class RecordPaymentRequest(BaseCreateSchema):
    """Body of POST /payments."""

    allocation_id: int = Field(..., gt=0)
    amount: MoneyAmount
    idempotency_key: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=64,
        description="Client generated key; resubmitting it never records a second payment",
    )


class PaymentResult(BaseResponseSchema):
    message: str = "Payment recorded"
    allocation_id: int
    payment_id: int
    total_required: MoneyOut
    total_paid: MoneyOut
    balance: MoneyOut
    receipt_sent: bool = False
    email_sent: bool = False
    email_history_id: Optional[int] = None
    sms_sent: bool = False
    sms_history_id: Optional[int] = None


class StudentRef(BaseSchema):
    id: int
    full_name: str
    registration_number: str


class RoomRef(BaseSchema):
    id: int
    name: str


class PaymentSummary(BaseResponseSchema):
    allocation_id: int
    student: StudentRef
    room: RoomRef
    total_required: MoneyOut
    total_paid: MoneyOut
    balance: MoneyOut


class PaymentListItem(BaseResponseSchema):
    id: int
    allocation_id: int
    hostel_id: int
    semester_id: int
    student_id: int
    amount: MoneyOut
    recorded_by_user_id: Optional[int] = None
    recorded_at: datetime
