"""
Audit log repository (append-only).
"""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from hostel_ledger.models.audit import AuditLog
from hostel_ledger.repositories.base.base_repository import BaseRepository


class AuditLogRepository(BaseRepository[AuditLog]):
    def __init__(self, session: AsyncSession):
        super().__init__(AuditLog, session)

    async def list_for_entity(self, entity_type: str, entity_id: Optional[int]) -> List[AuditLog]:
        """Audit trail of one entity, oldest first."""
        return await self.find_all(
            AuditLog.entity_type == entity_type,
            AuditLog.entity_id == entity_id,
            order_by=(AuditLog.created_at.asc(), AuditLog.id.asc()),
        )
