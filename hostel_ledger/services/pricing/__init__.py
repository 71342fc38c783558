from hostel_ledger.services.pricing.pricing_calculator import (
    PriceQuote,
    display_price_per_student,
    markup_ratio,
    price_per_student,
)

__all__ = [
    "PriceQuote",
    "display_price_per_student",
    "markup_ratio",
    "price_per_student",
]
