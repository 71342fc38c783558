"""
Data access layer. Repositories flush but never commit.
"""

from hostel_ledger.repositories.allocation import AllocationRepository
from hostel_ledger.repositories.audit import AuditLogRepository
from hostel_ledger.repositories.base import AuditContext, BaseRepository
from hostel_ledger.repositories.check_in import CheckInRepository
from hostel_ledger.repositories.expense import ExpenseRepository
from hostel_ledger.repositories.hostel import HostelFeatureSettingRepository
from hostel_ledger.repositories.notification import MessageHistoryRepository
from hostel_ledger.repositories.payment import PaymentRepository
from hostel_ledger.repositories.room import RoomRepository
from hostel_ledger.repositories.semester import SemesterRepository
from hostel_ledger.repositories.student import StudentRepository

__all__ = [
    "AuditContext",
    "BaseRepository",
    "AllocationRepository",
    "AuditLogRepository",
    "CheckInRepository",
    "ExpenseRepository",
    "HostelFeatureSettingRepository",
    "MessageHistoryRepository",
    "PaymentRepository",
    "RoomRepository",
    "SemesterRepository",
    "StudentRepository",
]
