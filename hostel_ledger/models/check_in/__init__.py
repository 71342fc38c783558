from hostel_ledger.models.check_in.check_in import CheckIn

__all__ = ["CheckIn"]
