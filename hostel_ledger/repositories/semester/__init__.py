from hostel_ledger.repositories.semester.semester_repository import SemesterRepository

__all__ = ["SemesterRepository"]
