# hostel_ledger/models/room/room.py
"""
Room model with price and capacity.
"""

from decimal import Decimal

from sqlalchemy import CheckConstraint, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from hostel_ledger.models.base.base_model import BaseModel
from hostel_ledger.models.base.mixins import ActiveFlagMixin, TimestampMixin

__all__ = ["Room"]


class Room(BaseModel, TimestampMixin, ActiveFlagMixin):
    """
    Bookable room of a hostel.

    ``price`` is the per-student price. Editing it never touches existing
    allocations, which carry their own snapshot.
    """

    __tablename__ = "rooms"
    __table_args__ = (
        CheckConstraint("capacity >= 1", name="ck_rooms_capacity_positive"),
        CheckConstraint("price >= 0", name="ck_rooms_price_non_negative"),
    )

    hostel_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("hostels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    def __repr__(self) -> str:
        return f"<Room(id={self.id}, name='{self.name}', capacity={self.capacity})>"
