from hostel_ledger.models.notification.message_history import MessageHistory

__all__ = ["MessageHistory"]
