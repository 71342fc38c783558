"""
Service layer. Services own transactions and raise application exceptions.
"""

from hostel_ledger.services.allocation import AllocationService
from hostel_ledger.services.audit import AuditService
from hostel_ledger.services.check_in import CheckInService
from hostel_ledger.services.expense import ExpenseService
from hostel_ledger.services.notification import NotificationDispatcher
from hostel_ledger.services.payment import PaymentLedgerService, ReceiptService
from hostel_ledger.services.reporting import ReportingService
from hostel_ledger.services.semester import SemesterService

__all__ = [
    "AllocationService",
    "AuditService",
    "CheckInService",
    "ExpenseService",
    "NotificationDispatcher",
    "PaymentLedgerService",
    "ReceiptService",
    "ReportingService",
    "SemesterService",
]
