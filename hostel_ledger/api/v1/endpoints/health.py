"""
Liveness endpoint.
"""

from fastapi import APIRouter

from hostel_ledger.config.settings import settings
from hostel_ledger.core.database import database_manager
from hostel_ledger.schemas.common.response import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    db_health = await database_manager.check_database_health()
    return HealthResponse(
        status="ok",
        version=settings.API_VERSION,
        environment=settings.ENVIRONMENT,
        database=db_health["status"],
    )
