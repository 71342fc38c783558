"""
Room allocation request and response schemas.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from hostel_ledger.schemas.common.base import (
    BaseCreateSchema,
    BaseResponseSchema,
    MoneyAmount,
    MoneyOut,
)

__all__ = [
    "AllocateRequest",
    "AllocationResult",
    "CheckoutResult",
    "AllocationListItem",
]


class AllocateRequest(BaseCreateSchema):
    """Body of POST /payments/allocate."""

    student_id: int = Field(..., gt=0)
    room_id: int = Field(..., gt=0)
    hostel_id: Optional[int] = Field(default=None, gt=0, description="Required for Super-Admins")
    display_price: Optional[MoneyAmount] = Field(
        default=None,
        description="Room price shown to the student when price markup is enabled",
    )


class AllocationResult(BaseResponseSchema):
    message: str = "Room allocated"
    allocation_id: int
    total_required: MoneyOut
    room_capacity: int
    price_per_student: MoneyOut
    display_price_per_student: Optional[MoneyOut] = None
    email_sent: bool = False
    email_history_id: Optional[int] = None
    sms_sent: bool = False
    sms_history_id: Optional[int] = None


class CheckoutResult(BaseResponseSchema):
    message: str = "Student checked out successfully"
    allocation_id: int


class AllocationListItem(BaseResponseSchema):
    id: int
    hostel_id: int
    semester_id: int
    student_id: int
    room_id: int
    room_price_at_allocation: MoneyOut
    display_price_at_allocation: Optional[MoneyOut] = None
    allocated_at: datetime
