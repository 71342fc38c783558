from hostel_ledger.models.user.user import User

__all__ = ["User"]
