from hostel_ledger.models.semester.semester import Semester

__all__ = ["Semester"]
