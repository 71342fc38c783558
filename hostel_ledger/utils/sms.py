# hostel_ledger/utils/sms.py
from __future__ import annotations

"""
SMS utilities:
- Normalization of Ugandan phone numbers.
- HTTP client for the bulk SMS gateway.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict

import httpx

from hostel_ledger.config.settings import Settings, settings
from hostel_ledger.core.logging import get_logger

logger = get_logger(__name__)

# SMS limits
MAX_SMS_LENGTH_GSM = 160

NON_DIGITS = re.compile(r"\D")
COUNTRY_CODE = "256"


class SMSError(Exception):
    """Base exception for SMS operations."""
    pass


class SMSValidationError(SMSError):
    """SMS validation error."""
    pass


class SMSDeliveryError(SMSError):
    """SMS delivery error."""
    pass


class SMSRateLimitError(SMSError):
    """SMS rate limit exceeded."""
    pass


def format_phone_number(phone: str | None) -> str | None:
    """
    Normalize a phone number to the form the gateway accepts.

    - ``256...`` becomes ``+256...``
    - numbers already starting with ``0`` are kept
    - 9 digits, or 10 digits starting with ``7``, get a leading ``0``

    Returns None when nothing usable is left.
    """
    if not phone:
        return None

    digits = NON_DIGITS.sub("", phone)
    if not digits:
        return None

    if digits.startswith(COUNTRY_CODE):
        return f"+{digits}"
    if digits.startswith("0"):
        return digits
    if len(digits) == 9 or (len(digits) == 10 and digits.startswith("7")):
        return f"0{digits}"
    return digits


@dataclass
class SMSResult:
    """Result of SMS sending operation."""
    success: bool
    message_id: str | None = None
    simulated: bool = False


class SMSGatewayClient:
    """
    Client for the bulk SMS HTTP gateway.

    Without credentials, outside production, messages are only logged
    and reported as sent.
    """

    def __init__(self, config: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config or settings
        self._transport = transport

    @property
    def endpoint(self) -> str:
        base = self.config.SMS_BASE_URL.rstrip("/")
        return f"{base}/{self.config.SMS_API_VERSION}/sms/send"

    def _payload(self, phone: str, message: str) -> Dict[str, Any]:
        return {
            "username": self.config.SMS_USERNAME,
            "password": self.config.SMS_PASSWORD,
            "numbers": phone,
            "message_body": message,
            "sender_id": self.config.SMS_SENDER_ID or "HMS",
        }

    async def send(self, phone: str, message: str) -> SMSResult:
        """
        Send one SMS.

        Raises:
            SMSValidationError: phone or message unusable
            SMSRateLimitError: gateway answered 429
            SMSDeliveryError: any other gateway or transport failure
            SMSError: gateway not configured in production
        """
        if not phone:
            raise SMSValidationError("Phone number is required")
        if not message or not message.strip():
            raise SMSValidationError("SMS message cannot be empty")

        if not self.config.sms_configured():
            if self.config.is_production():
                raise SMSError("SMS service not configured")
            logger.info("SMS gateway not configured, message not delivered", extra={
                'phone': phone,
                'sms_text': message,
            })
            return SMSResult(success=True, simulated=True)

        try:
            async with httpx.AsyncClient(
                timeout=self.config.SMS_TIMEOUT,
                transport=self._transport,
            ) as client:
                response = await client.post(self.endpoint, json=self._payload(phone, message))
        except httpx.HTTPError as e:
            logger.error(f"SMS gateway request failed: {e}")
            raise SMSDeliveryError(f"Failed to reach SMS gateway: {e}") from e

        if response.status_code == 429:
            raise SMSRateLimitError("Rate limit exceeded. Please try again later.")

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400 or not body.get("success"):
            detail = body.get("message") or f"HTTP {response.status_code}"
            raise SMSDeliveryError(f"SMS gateway rejected message: {detail}")

        data = body.get("data") or {}
        logger.info("SMS sent", extra={'phone': phone})
        return SMSResult(success=True, message_id=data.get("message_id"))
