"""
Generic response envelopes.
"""

from __future__ import annotations

from hostel_ledger.schemas.common.base import BaseResponseSchema

__all__ = ["HealthResponse"]


class HealthResponse(BaseResponseSchema):
    status: str
    version: str
    environment: str
    database: str
