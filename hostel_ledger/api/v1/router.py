"""
API v1 Router - Main Entry Point
Aggregates all v1 endpoints of the hostel ledger
"""

from fastapi import APIRouter

from hostel_ledger.api.v1.endpoints import check_ins, expenses, health, payments, receipts, semesters
from hostel_ledger.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(
    responses={
        400: {"description": "Bad Request"},
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        500: {"description": "Internal Server Error"},
    }
)

router.include_router(health.router)
router.include_router(payments.router)
router.include_router(receipts.router)
router.include_router(check_ins.router)
router.include_router(semesters.router)
router.include_router(expenses.router)

logger.debug("API v1 routes registered", extra={'route_count': len(router.routes)})

__all__ = ["router"]
