"""
Database enums shared by models, schemas and services.
"""

import enum


class UserRole(str, enum.Enum):
    """Staff role enumeration."""
    SUPER_ADMIN = "SUPER_ADMIN"
    HOSTEL_OWNER = "HOSTEL_OWNER"
    CUSTODIAN = "CUSTODIAN"

    @classmethod
    def parse(cls, value: str) -> "UserRole":
        """Parse a role claim, tolerating case and surrounding whitespace."""
        return cls(str(value).strip().upper())


class MessageChannel(str, enum.Enum):
    """Notification channel recorded in message history."""
    EMAIL = "email"
    SMS = "sms"


class MessageType(str, enum.Enum):
    """Kind of student notification."""
    REGISTRATION = "REGISTRATION"
    RECEIPT = "RECEIPT"
    CHECK_IN = "CHECK_IN"
    CHECK_OUT = "CHECK_OUT"


class MessageStatus(str, enum.Enum):
    """Delivery outcome recorded in message history."""
    SENT = "sent"
    FAILED = "failed"


class AuditAction(str, enum.Enum):
    """State-changing actions written to the audit log."""
    ROOM_ALLOCATED = "ROOM_ALLOCATED"
    STUDENT_CHECKED_OUT = "STUDENT_CHECKED_OUT"
    PAYMENT_RECORDED = "PAYMENT_RECORDED"
    STUDENT_CHECKED_IN = "STUDENT_CHECKED_IN"
    SEMESTER_CREATED = "SEMESTER_CREATED"
    SEMESTER_ACTIVATED = "SEMESTER_ACTIVATED"
    SEMESTER_DEACTIVATED = "SEMESTER_DEACTIVATED"
    EXPENSE_RECORDED = "EXPENSE_RECORDED"


class HostelFeature(str, enum.Enum):
    """Per-hostel feature switches."""
    CUSTODIAN_PRICE_MARKUP = "allow_custodian_price_markup"
    OWNER_VIEW_PAYMENT_AMOUNTS = "owner_view_payment_amounts"
