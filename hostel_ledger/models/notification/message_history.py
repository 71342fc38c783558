# hostel_ledger/models/notification/message_history.py
"""
Record of every email and SMS sent (or attempted) to a student.
"""

from typing import Optional

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from hostel_ledger.models.base.base_model import BaseModel
from hostel_ledger.models.base.mixins import TimestampMixin

__all__ = ["MessageHistory"]


class MessageHistory(BaseModel, TimestampMixin):
    __tablename__ = "message_history"
    __table_args__ = (
        Index("ix_message_history_student_type", "student_id", "message_type"),
    )

    student_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("students.id", ondelete="SET NULL"),
        nullable=True,
    )
    channel: Mapped[str] = mapped_column(String(16), nullable=False)  # email | sms
    recipient: Mapped[str] = mapped_column(String(255), nullable=False)
    message_type: Mapped[str] = mapped_column(String(32), nullable=False)
    subject: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)  # sent | failed
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sent_by_user_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
