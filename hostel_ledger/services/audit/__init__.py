from hostel_ledger.services.audit.audit_service import AuditService

__all__ = ["AuditService"]
