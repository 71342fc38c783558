"""
Base model package: declarative base, mixins and shared enums.
"""

from hostel_ledger.models.base.base_model import Base, BaseModel, utcnow
from hostel_ledger.models.base.enums import (
    AuditAction,
    HostelFeature,
    MessageChannel,
    MessageStatus,
    MessageType,
    UserRole,
)
from hostel_ledger.models.base.mixins import ActiveFlagMixin, TimestampMixin

__all__ = [
    "Base",
    "BaseModel",
    "utcnow",
    "TimestampMixin",
    "ActiveFlagMixin",
    "UserRole",
    "MessageChannel",
    "MessageType",
    "MessageStatus",
    "AuditAction",
    "HostelFeature",
]
