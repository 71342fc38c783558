from hostel_ledger.repositories.allocation.allocation_repository import AllocationRepository

__all__ = ["AllocationRepository"]
