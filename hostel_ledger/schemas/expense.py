"""
Expense schemas.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import Field, field_validator

from hostel_ledger.schemas.common.base import (
    BaseCreateSchema,
    BaseResponseSchema,
    BaseSchema,
    MoneyAmount,
    MoneyOut,
)

__all__ = [
    "ExpenseCreate",
    "ExpenseCreated",
    "ExpenseListItem",
    "ExpenseListResponse",
    "CategoryTotal",
    "ExpenseStats",
]


class ExpenseCreate(BaseCreateSchema):
    amount: MoneyAmount
    description: str = Field(..., min_length=1, max_length=500)
    category: Optional[str] = Field(default=None, max_length=100)
    expense_date: date
    semester_id: Optional[int] = Field(default=None, gt=0)
    hostel_id: Optional[int] = Field(default=None, gt=0)

    @field_validator("category", mode="before")
    @classmethod
    def blank_category_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ExpenseCreated(BaseResponseSchema):
    message: str = "Expense recorded successfully"
    expense_id: int


class ExpenseListItem(BaseResponseSchema):
    id: int
    hostel_id: int
    semester_id: int
    amount: MoneyOut
    description: str
    category: Optional[str] = None
    expense_date: date
    created_at: datetime
    recorded_by_user_id: Optional[int] = None
    recorded_by_username: Optional[str] = None
    recorded_by_phone: Optional[str] = None


class ExpenseListResponse(BaseResponseSchema):
    expenses: List[ExpenseListItem] = Field(default_factory=list)
    total: int = 0
    limit: int
    offset: int


class CategoryTotal(BaseSchema):
    category: Optional[str] = None
    total: MoneyOut


class ExpenseStats(BaseResponseSchema):
    total: MoneyOut
    by_category: List[CategoryTotal] = Field(default_factory=list)
