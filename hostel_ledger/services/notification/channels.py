"""
Outbound delivery channels.

A channel either delivers a message or raises; it never touches the
database.
"""

from abc import ABC, abstractmethod
from typing import Optional

from hostel_ledger.config.settings import Settings, settings
from hostel_ledger.utils.email import EmailConfig, EmailError, build_email, send_email_async
from hostel_ledger.utils.sms import SMSGatewayClient, SMSResult


class EmailChannel(ABC):
    """Interface for email delivery."""

    @abstractmethod
    async def send(self, to: str, subject: str, html: str) -> None:
        """Deliver one HTML email or raise."""
        pass


class SmsChannel(ABC):
    """Interface for SMS delivery."""

    @abstractmethod
    async def send(self, phone: str, message: str) -> SMSResult:
        """Deliver one SMS or raise."""
        pass


class SmtpEmailChannel(EmailChannel):
    """Email over SMTP using the application's mail settings."""

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or settings

    async def send(self, to: str, subject: str, html: str) -> None:
        if not self.config.email_configured():
            raise EmailError("Email service not configured")
        message = build_email(subject=subject, to=[to], body_html=html)
        await send_email_async(message, EmailConfig.from_settings(self.config))


class GatewaySmsChannel(SmsChannel):
    """SMS through the HTTP gateway."""

    def __init__(self, client: Optional[SMSGatewayClient] = None):
        self.client = client or SMSGatewayClient()

    async def send(self, phone: str, message: str) -> SMSResult:
        return await self.client.send(phone, message)
