"""
SQLAlchemy model mixins for reusable functionality.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from hostel_ledger.models.base.base_model import utcnow


class TimestampMixin:
    """
    Mixin for creation timestamp tracking.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utcnow,
        comment="Record creation timestamp (UTC)",
    )


class ActiveFlagMixin:
    """
    Mixin for the active/inactive switch carried by tenants, rooms and staff.
    """

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        index=True,
        comment="Whether the record is in service",
    )
