from hostel_ledger.services.notification.channels import (
    EmailChannel,
    GatewaySmsChannel,
    SmsChannel,
    SmtpEmailChannel,
)
from hostel_ledger.services.notification.dispatcher import DispatchResult, NotificationDispatcher

__all__ = [
    "DispatchResult",
    "NotificationDispatcher",
    "EmailChannel",
    "SmsChannel",
    "SmtpEmailChannel",
    "GatewaySmsChannel",
]
