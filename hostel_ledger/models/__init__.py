"""
ORM models.

Importing this package registers every table on ``Base.metadata``.
"""

from hostel_ledger.models.base import Base, BaseModel
from hostel_ledger.models.hostel import Hostel, HostelFeatureSetting
from hostel_ledger.models.user import User
from hostel_ledger.models.semester import Semester
from hostel_ledger.models.room import Room
from hostel_ledger.models.student import Student
from hostel_ledger.models.allocation import Allocation
from hostel_ledger.models.payment import Payment
from hostel_ledger.models.check_in import CheckIn
from hostel_ledger.models.expense import Expense
from hostel_ledger.models.audit import AuditLog
from hostel_ledger.models.notification import MessageHistory

__all__ = [
    "Base",
    "BaseModel",
    "Hostel",
    "HostelFeatureSetting",
    "User",
    "Semester",
    "Room",
    "Student",
    "Allocation",
    "Payment",
    "CheckIn",
    "Expense",
    "AuditLog",
    "MessageHistory",
]
