from hostel_ledger.repositories.check_in.check_in_repository import CheckInRepository

__all__ = ["CheckInRepository"]
