"""
Check-in / check-out schemas.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from hostel_ledger.schemas.common.base import BaseCreateSchema, BaseResponseSchema

__all__ = [
    "CheckInRequest",
    "CheckInResult",
    "CheckOutResult",
    "CheckInListItem",
]


class CheckInRequest(BaseCreateSchema):
    """Body of POST /check-ins and POST /check-ins/checkout."""

    student_id: int = Field(..., gt=0)
    hostel_id: Optional[int] = Field(default=None, gt=0)


class CheckInResult(BaseResponseSchema):
    message: str = "Student checked in successfully"
    check_in_id: int
    sms_sent: bool = False
    sms_history_id: Optional[int] = None


class CheckOutResult(BaseResponseSchema):
    message: str = "Student checked out successfully"
    sms_sent: bool = False
    sms_history_id: Optional[int] = None


class CheckInListItem(BaseResponseSchema):
    id: int
    student_id: int
    hostel_id: int
    semester_id: Optional[int] = None
    checked_in_at: datetime
    checked_out_at: Optional[datetime] = None
    checked_in_by_user_id: Optional[int] = None
    checked_out_by_user_id: Optional[int] = None
    full_name: str
    registration_number: str
