"""
Semester schemas.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import Field, model_validator

from hostel_ledger.schemas.common.base import BaseCreateSchema, BaseResponseSchema

__all__ = [
    "SemesterCreate",
    "SemesterCreated",
    "SemesterResponse",
    "SemesterStateResult",
]


class SemesterCreate(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=100)
    start_date: date
    end_date: Optional[date] = None
    hostel_id: Optional[int] = Field(default=None, gt=0)

    @model_validator(mode="after")
    def validate_date_range(self) -> "SemesterCreate":
        if self.end_date and self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self


class SemesterCreated(BaseResponseSchema):
    message: str = "Semester created successfully"
    semester_id: int


class SemesterResponse(BaseResponseSchema):
    id: int
    hostel_id: int
    name: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool
    created_at: datetime


class SemesterStateResult(BaseResponseSchema):
    """Outcome of activate/deactivate; the ``already*`` flag is set on idempotent replays."""

    message: str
    already_active: Optional[bool] = None
    already_inactive: Optional[bool] = None
