from hostel_ledger.repositories.student.student_repository import StudentRepository

__all__ = ["StudentRepository"]
