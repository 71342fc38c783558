"""
Payment receipt schema.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from hostel_ledger.schemas.common.base import BaseResponseSchema, MoneyOut

__all__ = ["ReceiptData"]


class ReceiptData(BaseResponseSchema):
    """
    Everything printed on a receipt.

    Amounts are the ones the student was quoted: when the allocation
    carries a display price and markup is enabled they are scaled to it.
    """

    receipt_number: str
    hostel_name: str
    hostel_contact_phone: Optional[str] = None
    student_name: str
    registration_number: str
    student_phone: Optional[str] = None
    room_number: Optional[str] = None
    amount_paid: MoneyOut
    total_required: MoneyOut
    balance: MoneyOut
    payment_date: datetime
    payment_id: int
