from hostel_ledger.services.payment.payment_ledger_service import PaymentLedgerService
from hostel_ledger.services.payment.receipt_service import ReceiptService, receipt_number

__all__ = ["PaymentLedgerService", "ReceiptService", "receipt_number"]
