"""
Money and date formatting helpers.

All ledger arithmetic is done on ``Decimal`` values quantized to cents.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

Number = Union[Decimal, int, float, str]


def to_money(value: Number | None) -> Decimal:
    """Convert a number to a Decimal rounded half-up to two places."""
    if value is None:
        return ZERO
    if isinstance(value, float):
        value = repr(value)
    try:
        return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Invalid monetary amount: {value!r}") from e


def format_amount(amount: Number | None, decimal_places: int = 0) -> str:
    """
    Format an amount with thousands separators.

    >>> format_amount(Decimal("150000"))
    '150,000'
    >>> format_amount(Decimal("1234.5"), 2)
    '1,234.50'
    """
    quantum = Decimal(1).scaleb(-decimal_places)
    value = to_money(amount).quantize(quantum, rounding=ROUND_HALF_UP)
    return f"{value:,.{decimal_places}f}"


def format_short_date(value: date | datetime | None) -> str:
    """'Mar 5, 2026' style date."""
    value = value or datetime.utcnow()
    return f"{value.strftime('%b')} {value.day}, {value.year}"


def format_long_datetime(value: date | datetime | None) -> str:
    """'March 5, 2026, 02:30 PM' style timestamp."""
    value = value or datetime.utcnow()
    if not isinstance(value, datetime):
        return f"{value.strftime('%B')} {value.day}, {value.year}"
    return f"{value.strftime('%B')} {value.day}, {value.year}, {value.strftime('%I:%M %p')}"


def truncate(text: str, max_length: int, keep: int) -> str:
    """Cut ``text`` to ``keep`` characters plus an ellipsis when longer than ``max_length``."""
    if len(text) > max_length:
        return text[:keep] + "..."
    return text
