from hostel_ledger.models.allocation.allocation import Allocation

__all__ = ["Allocation"]
