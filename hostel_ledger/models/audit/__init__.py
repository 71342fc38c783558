from hostel_ledger.models.audit.audit_log import AuditLog

__all__ = ["AuditLog"]
