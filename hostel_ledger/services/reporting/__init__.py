from hostel_ledger.services.reporting.reporting_service import ReportingService

__all__ = ["ReportingService"]
