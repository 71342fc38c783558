"""
Audit logging service.
"""

from typing import Any, Dict, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_ledger.models.audit import AuditLog
from hostel_ledger.models.base.enums import AuditAction
from hostel_ledger.repositories.audit import AuditLogRepository
from hostel_ledger.repositories.base import AuditContext
from hostel_ledger.services.base.base_service import BaseService
from hostel_ledger.services.common.permissions import Principal

audit_logger = structlog.get_logger("hostel_ledger.audit")


class AuditService(BaseService):
    """
    Writes audit rows inside the caller's transaction; the row is
    committed or rolled back together with the change it describes.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.repository = AuditLogRepository(session)

    async def record(
        self,
        principal: Principal,
        action: AuditAction,
        entity_type: str,
        entity_id: Optional[int],
        details: Optional[Dict[str, Any]] = None,
        audit_context: Optional[AuditContext] = None,
    ) -> AuditLog:
        """
        Add an audit row for a state change.

        Args:
            principal: Acting staff member
            action: What happened
            entity_type: Kind of entity touched (``allocation``, ``payment``...)
            entity_id: Id of the entity touched
            details: JSON-serializable extra facts
            audit_context: Request origin (ip address, user agent)

        Returns:
            The pending audit row
        """
        audit_context = audit_context or AuditContext()
        entry = await self.repository.create({
            "actor_user_id": principal.user_id,
            "actor_role": principal.role.value,
            "actor_hostel_id": principal.hostel_id,
            "action": action.value,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "details": details or {},
            "ip_address": audit_context.ip_address,
            "user_agent": audit_context.user_agent,
        })
        audit_logger.info(
            "audit_event",
            action=action.value,
            entity_type=entity_type,
            entity_id=entity_id,
            actor_user_id=principal.user_id,
            actor_role=principal.role.value,
            request_id=audit_context.request_id,
        )
        return entry
