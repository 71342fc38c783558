from hostel_ledger.services.base.base_service import BaseService

__all__ = ["BaseService"]
