# hostel_ledger/utils/email.py
from __future__ import annotations

"""
Email utilities: message structure and SMTP-based sending.

This module provides:
- EmailMessage: validated email message dataclass.
- EmailConfig: SMTP configuration built from application settings.
- build_email: convenience helper to construct EmailMessage.
- send_email / send_email_async: SMTP-based sending functions.
"""

import asyncio
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Iterable

from email_validator import EmailNotValidError, validate_email

from hostel_ledger.config.settings import Settings, settings
from hostel_ledger.core.logging import get_logger

logger = get_logger(__name__)


class EmailError(Exception):
    """Custom exception for email operations."""
    pass


def is_valid_email(address: str | None) -> bool:
    """Syntax check only; no DNS lookups."""
    if not address:
        return False
    try:
        validate_email(address.strip(), check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


@dataclass
class EmailMessage:
    """Email message structure with validation."""
    subject: str
    to: list[str]
    body_html: str | None = None
    body_text: str | None = None

    def __post_init__(self) -> None:
        if not self.subject.strip():
            raise EmailError("Subject cannot be empty")

        if not self.to:
            raise EmailError("At least one recipient is required")

        if not self.body_text and not self.body_html:
            raise EmailError("Either body_text or body_html must be provided")

        for address in self.to:
            if not is_valid_email(address):
                raise EmailError(f"Invalid recipient email: {address}")


@dataclass
class EmailConfig:
    """Email configuration."""
    smtp_host: str
    smtp_port: int
    username: str | None
    password: str | None
    use_tls: bool = True
    from_email: str | None = None
    from_name: str | None = None

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> EmailConfig:
        """Create email config from application settings."""
        config = config or settings
        if not config.email_configured():
            raise EmailError("Email service not configured")
        return cls(
            smtp_host=config.SMTP_HOST,
            smtp_port=config.SMTP_PORT,
            username=config.SMTP_USER,
            password=config.SMTP_PASSWORD,
            use_tls=config.SMTP_TLS,
            from_email=config.EMAIL_FROM_ADDRESS,
            from_name=config.EMAIL_FROM_NAME,
        )

    @property
    def sender(self) -> str:
        address = self.from_email or self.username or ""
        if self.from_name:
            return f"{self.from_name} <{address}>"
        return address


def build_email(
    *,
    subject: str,
    to: Iterable[str],
    body_html: str | None = None,
    body_text: str | None = None,
) -> EmailMessage:
    """Helper to construct EmailMessage from typical arguments."""
    return EmailMessage(
        subject=subject,
        to=list(to),
        body_html=body_html,
        body_text=body_text,
    )


def send_email(message: EmailMessage, config: EmailConfig | None = None) -> None:
    """Send an email using SMTP."""
    if config is None:
        config = EmailConfig.from_settings()

    try:
        msg = MIMEMultipart('alternative')
        msg['Subject'] = message.subject
        msg['From'] = config.sender
        msg['To'] = ', '.join(message.to)

        if message.body_text:
            msg.attach(MIMEText(message.body_text, 'plain'))

        if message.body_html:
            msg.attach(MIMEText(message.body_html, 'html'))

        with smtplib.SMTP(config.smtp_host, config.smtp_port) as server:
            if config.use_tls:
                server.starttls()

            if config.username and config.password:
                server.login(config.username, config.password)

            server.send_message(msg, to_addrs=message.to)

        logger.info(f"Email sent successfully to {len(message.to)} recipients")

    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send email: {e}")
        raise EmailError(f"Failed to send email: {e}") from e


async def send_email_async(message: EmailMessage, config: EmailConfig | None = None) -> None:
    """Send email without blocking the event loop."""
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, send_email, message, config)
