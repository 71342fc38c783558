from hostel_ledger.repositories.base.base_repository import (
    AuditContext,
    BaseRepository,
    ModelType,
)

__all__ = ["AuditContext", "BaseRepository", "ModelType"]
