from hostel_ledger.models.payment.payment import Payment

__all__ = ["Payment"]
