# hostel_ledger/models/hostel/hostel.py
"""
Hostel tenant and per-hostel feature switches.
"""

from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_ledger.models.base.base_model import BaseModel
from hostel_ledger.models.base.mixins import ActiveFlagMixin, TimestampMixin

__all__ = ["Hostel", "HostelFeatureSetting"]


class Hostel(BaseModel, TimestampMixin, ActiveFlagMixin):
    """
    Tenant boundary. Every room, student, allocation and payment
    belongs to exactly one hostel.
    """

    __tablename__ = "hostels"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    feature_settings: Mapped[List["HostelFeatureSetting"]] = relationship(
        "HostelFeatureSetting",
        back_populates="hostel",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Hostel(id={self.id}, name='{self.name}')>"


class HostelFeatureSetting(BaseModel):
    """
    Feature switch for a hostel, scoped separately for owners and custodians.

    A missing row means the feature is disabled.
    """

    __tablename__ = "hostel_feature_settings"
    __table_args__ = (
        UniqueConstraint("hostel_id", "feature_name", name="uq_hostel_feature"),
    )

    hostel_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("hostels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    feature_name: Mapped[str] = mapped_column(String(100), nullable=False)
    enabled_for_owner: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    enabled_for_custodian: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    hostel: Mapped["Hostel"] = relationship("Hostel", back_populates="feature_settings")
