"""
Per-student pricing.

A room's price is split evenly by capacity, never by current occupancy:
a 600,000 room for two costs each occupant 300,000 whether or not the
second bed is taken. All results are quantized to cents.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from hostel_ledger.core.exceptions import ValidationError
from hostel_ledger.utils.formatters import CENT, ZERO, Number, to_money

ONE = Decimal("1")


def _split(amount: Number, capacity: int) -> Decimal:
    if capacity is None or int(capacity) < 1:
        raise ValidationError("Room capacity must be at least 1")
    amount = to_money(amount)
    if int(capacity) == 1:
        return amount
    return (amount / int(capacity)).quantize(CENT, rounding=ROUND_HALF_UP)


def price_per_student(room_price: Number, capacity: int) -> Decimal:
    """
    Share of the room price each occupant pays.

    Raises:
        ValidationError: capacity below 1
    """
    return _split(room_price, capacity)


def display_price_per_student(
    display_price: Number,
    capacity: int,
    room_price: Optional[Number] = None,
) -> Decimal:
    """
    Share of the quoted (marked-up) room price each occupant sees.

    Both prices are compared whole, before the split, so cent rounding of
    the shares never lets a quote below cost through.

    Raises:
        ValidationError: capacity below 1, or ``display_price`` is below
            ``room_price``
    """
    display = _split(display_price, capacity)
    if room_price is not None and to_money(display_price) < to_money(room_price):
        raise ValidationError("Display price cannot be less than the actual room price")
    return display


def markup_ratio(
    display_price: Optional[Number],
    actual_price: Number,
    markup_enabled: bool,
) -> Decimal:
    """Factor turning actual amounts into quoted amounts; 1 when not applicable."""
    if not markup_enabled or display_price is None:
        return ONE
    actual = to_money(actual_price)
    if actual <= ZERO:
        return ONE
    return to_money(display_price) / actual


@dataclass(frozen=True)
class PriceQuote:
    """
    The price a student owes and, optionally, the price they were quoted.

    Ledger arithmetic always uses ``actual``; ``display`` only changes what
    is printed on notifications and receipts.
    """

    actual: Decimal
    display: Optional[Decimal] = None

    @classmethod
    def from_allocation(cls, allocation) -> "PriceQuote":
        display = allocation.display_price_at_allocation
        return cls(
            actual=to_money(allocation.room_price_at_allocation),
            display=to_money(display) if display is not None else None,
        )

    def uses_display(self, markup_enabled: bool) -> bool:
        return bool(markup_enabled and self.display is not None and self.actual > ZERO)

    def ratio(self, markup_enabled: bool) -> Decimal:
        return markup_ratio(self.display, self.actual, markup_enabled)

    def to_display(self, amount: Number, markup_enabled: bool) -> Decimal:
        """Convert an actual amount (paid, balance) into its quoted equivalent."""
        if not self.uses_display(markup_enabled):
            return to_money(amount)
        return to_money(to_money(amount) * self.ratio(markup_enabled))

    def display_total(self, markup_enabled: bool) -> Decimal:
        if self.uses_display(markup_enabled):
            return self.display
        return self.actual

    def display_balance(self, total_paid: Number, markup_enabled: bool) -> Decimal:
        """Quoted total minus the quoted equivalent of what was paid."""
        return to_money(self.display_total(markup_enabled) - self.to_display(total_paid, markup_enabled))
