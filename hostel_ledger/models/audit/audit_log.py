# hostel_ledger/models/audit/audit_log.py
"""
Append-only audit trail of state-changing staff actions.
"""

from typing import Any, Dict, Optional

from sqlalchemy import JSON, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from hostel_ledger.models.base.base_model import BaseModel
from hostel_ledger.models.base.mixins import TimestampMixin

__all__ = ["AuditLog"]


class AuditLog(BaseModel, TimestampMixin):
    """
    Who did what to which entity, from where.
    """

    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_entity", "entity_type", "entity_id"),
        Index("ix_audit_logs_actor_hostel", "actor_hostel_id", "created_at"),
    )

    # ==================== Actor ====================

    actor_user_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    actor_role: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    actor_hostel_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # ==================== Action ====================

    action: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    entity_type: Mapped[str] = mapped_column(String(64), nullable=False)
    entity_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    details: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    # ==================== Request ====================

    ip_address: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<AuditLog(id={self.id}, action={self.action}, entity={self.entity_type}:{self.entity_id})>"
