from hostel_ledger.repositories.notification.message_history_repository import (
    MessageHistoryRepository,
)

__all__ = ["MessageHistoryRepository"]
