from hostel_ledger.models.student.student import Student

__all__ = ["Student"]
