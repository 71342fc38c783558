from hostel_ledger.services.semester.semester_service import SemesterService

__all__ = ["SemesterService"]
