from hostel_ledger.services.allocation.allocation_service import AllocationService

__all__ = ["AllocationService"]
