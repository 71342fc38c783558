from hostel_ledger.services.check_in.check_in_service import CheckInService

__all__ = ["CheckInService"]
