from hostel_ledger.schemas.common.base import (
    BaseCreateSchema,
    BaseResponseSchema,
    BaseSchema,
    MoneyAmount,
    MoneyOut,
)
from hostel_ledger.schemas.common.response import HealthResponse

__all__ = [
    "BaseSchema",
    "BaseCreateSchema",
    "BaseResponseSchema",
    "MoneyAmount",
    "MoneyOut",
    "HealthResponse",
]
