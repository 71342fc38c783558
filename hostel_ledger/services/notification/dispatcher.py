"""
Notification dispatcher for student messages.

Delivery is best effort: every outcome is recorded in the message
history, and no failure ever reaches the caller.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_ledger.models.base.enums import MessageChannel, MessageStatus, MessageType
from hostel_ledger.repositories.notification import MessageHistoryRepository
from hostel_ledger.services.base.base_service import BaseService
from hostel_ledger.services.notification.channels import (
    EmailChannel,
    GatewaySmsChannel,
    SmsChannel,
    SmtpEmailChannel,
)
from hostel_ledger.utils.email import is_valid_email
from hostel_ledger.utils.sms import format_phone_number


@dataclass
class DispatchResult:
    """Outcome of one notification across both channels."""
    email_sent: bool = False
    email_history_id: Optional[int] = None
    sms_sent: bool = False
    sms_history_id: Optional[int] = None

    @property
    def delivered(self) -> bool:
        return self.email_sent or self.sms_sent


class NotificationDispatcher(BaseService):
    """
    Send student notifications by email with SMS fallback:
    - Email first when the student has an address
    - SMS when there is no address, or the email failed and a phone exists
    - Every attempt written to message history

    Runs after the business transaction committed; history rows are
    committed on their own.
    """

    def __init__(
        self,
        session: AsyncSession,
        email_channel: Optional[EmailChannel] = None,
        sms_channel: Optional[SmsChannel] = None,
    ):
        super().__init__(session)
        self.history_repo = MessageHistoryRepository(session)
        self.email_channel = email_channel or SmtpEmailChannel()
        self.sms_channel = sms_channel or GatewaySmsChannel()

    # -------------------------------------------------------------------------
    # Dispatching
    # -------------------------------------------------------------------------

    async def dispatch(
        self,
        student_id: Optional[int],
        email: Optional[str],
        phone: Optional[str],
        message_type: MessageType,
        email_subject: str,
        email_html: Optional[str],
        sms_text: Optional[str],
        sent_by_user_id: Optional[int] = None,
    ) -> DispatchResult:
        """
        Notify a student, preferring email.

        Args:
            student_id: Recipient student
            email: Student email address, if any
            phone: Student phone number, if any
            message_type: Kind of notification
            email_subject: Subject line
            email_html: Rendered HTML body
            sms_text: SMS body used directly or as fallback
            sent_by_user_id: Staff user who triggered it

        Returns:
            DispatchResult; all flags false when nothing could be sent
        """
        result = DispatchResult()
        try:
            if email:
                result.email_sent, result.email_history_id = await self._send_email(
                    student_id, email, message_type, email_subject, email_html, sent_by_user_id
                )
                if not result.email_sent and phone and sms_text:
                    self._logger.info("Falling back to SMS after email failure", extra={
                        'student_id': student_id,
                        'message_type': message_type.value,
                    })
                    result.sms_sent, result.sms_history_id = await self._send_sms(
                        student_id, phone, message_type, sms_text, sent_by_user_id
                    )
            elif phone and sms_text:
                result.sms_sent, result.sms_history_id = await self._send_sms(
                    student_id, phone, message_type, sms_text, sent_by_user_id
                )
        except Exception as e:
            # Notifications never fail the operation that triggered them
            self._logger.error(f"Notification dispatch failed: {e}", exc_info=True, extra={
                'student_id': student_id,
                'message_type': message_type.value,
            })
        return result

    async def send_sms(
        self,
        student_id: Optional[int],
        phone: Optional[str],
        message_type: MessageType,
        sms_text: str,
        sent_by_user_id: Optional[int] = None,
    ) -> DispatchResult:
        """SMS-only notification (check-in, check-out)."""
        result = DispatchResult()
        if not phone:
            return result
        try:
            result.sms_sent, result.sms_history_id = await self._send_sms(
                student_id, phone, message_type, sms_text, sent_by_user_id
            )
        except Exception as e:
            self._logger.error(f"SMS dispatch failed: {e}", exc_info=True, extra={
                'student_id': student_id,
                'message_type': message_type.value,
            })
        return result

    # -------------------------------------------------------------------------
    # Channels
    # -------------------------------------------------------------------------

    async def _send_email(
        self,
        student_id: Optional[int],
        email: str,
        message_type: MessageType,
        subject: str,
        html: Optional[str],
        sent_by_user_id: Optional[int],
    ) -> Tuple[bool, Optional[int]]:
        error = None
        if not is_valid_email(email):
            error = "Invalid email address"
        elif not html:
            error = "Email body is empty"
        else:
            try:
                await self.email_channel.send(email, subject, html)
            except Exception as e:
                error = str(e) or type(e).__name__
                self._logger.warning(f"Email sending failed for student {student_id}: {error}")

        history_id = await self._record(
            student_id=student_id,
            channel=MessageChannel.EMAIL,
            recipient=email,
            message_type=message_type,
            subject=subject,
            content=subject,
            error=error,
            sent_by_user_id=sent_by_user_id,
        )
        return error is None, history_id

    async def _send_sms(
        self,
        student_id: Optional[int],
        phone: str,
        message_type: MessageType,
        text: str,
        sent_by_user_id: Optional[int],
    ) -> Tuple[bool, Optional[int]]:
        error = None
        formatted = format_phone_number(phone)
        if not formatted:
            error = "Invalid phone number format"
        else:
            try:
                await self.sms_channel.send(formatted, text)
            except Exception as e:
                error = str(e) or type(e).__name__
                self._logger.warning(f"SMS sending failed for student {student_id}: {error}")

        history_id = await self._record(
            student_id=student_id,
            channel=MessageChannel.SMS,
            recipient=formatted or phone,
            message_type=message_type,
            subject=None,
            content=text,
            error=error,
            sent_by_user_id=sent_by_user_id,
        )
        return error is None, history_id

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    async def _record(
        self,
        student_id: Optional[int],
        channel: MessageChannel,
        recipient: str,
        message_type: MessageType,
        subject: Optional[str],
        content: str,
        error: Optional[str],
        sent_by_user_id: Optional[int],
    ) -> Optional[int]:
        """Persist one delivery attempt; returns None when that fails too."""
        try:
            entry = await self.history_repo.create({
                "student_id": student_id,
                "channel": channel.value,
                "recipient": recipient[:255],
                "message_type": message_type.value,
                "subject": subject,
                "content": content,
                "status": (MessageStatus.FAILED if error else MessageStatus.SENT).value,
                "error_message": error,
                "sent_by_user_id": sent_by_user_id,
            })
            await self._commit()
            return entry.id
        except SQLAlchemyError as e:
            await self._rollback()
            self._logger.error(f"Failed to save message history: {e}")
            return None
