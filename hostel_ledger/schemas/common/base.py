"""
Base schema classes with common fields and configurations.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from hostel_ledger.utils.formatters import to_money

__all__ = [
    "BaseSchema",
    "BaseCreateSchema",
    "BaseResponseSchema",
    "MoneyAmount",
    "MoneyOut",
]


def _quantize(value: Decimal) -> Decimal:
    return to_money(value)


# Positive amount with at most cent precision; fits a Numeric(10, 2) column
MoneyAmount = Annotated[
    Decimal,
    Field(ge=Decimal("0.01"), max_digits=10, decimal_places=2),
    AfterValidator(_quantize),
]

# Ledger amount rendered as a JSON number
MoneyOut = Annotated[
    Decimal,
    AfterValidator(_quantize),
    PlainSerializer(float, return_type=float, when_used="json"),
]


class BaseSchema(BaseModel):
    """
    Base schema with common Pydantic configuration.

    Fields are declared in snake_case and exposed to clients in camelCase
    through aliases; both spellings are accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=False,
        str_strip_whitespace=True,
    )


class BaseCreateSchema(BaseSchema):
    """Base schema for request bodies."""
    pass


class BaseResponseSchema(BaseSchema):
    """Base schema for API responses."""

    def dump(self) -> dict:
        """Serialize with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")
