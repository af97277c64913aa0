"""Broker number encodings: quotations and money values."""

from __future__ import annotations

from fractions import Fraction

from pydantic import BaseModel, field_validator

NANO = 10**9


class Quotation(BaseModel):
    """Fixed-point number as ``units + nano * 1e-9``.

    ``nano`` carries the same sign as ``units`` (e.g. -1.5 is units=-1,
    nano=-500000000).
    """

    units: int = 0
    nano: int = 0

    def to_fraction(self) -> Fraction:
        return Fraction(self.units) + Fraction(self.nano, NANO)


class MoneyValue(Quotation):
    """Quotation denominated in a currency (lower-case ISO code)."""

    currency: str

    @field_validator("currency")
    @classmethod
    def _lower_currency(cls, value: str) -> str:
        return value.strip().lower()
