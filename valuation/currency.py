"""Currency normalisation: fold a per-currency cost mapping into one value."""

from __future__ import annotations

from collections.abc import Collection, Mapping
from fractions import Fraction

from valuation.errors import MissingExchangeRateError


def aggregate(
    cost: Mapping[str, Fraction],
    exchange_rates: Mapping[str, Fraction],
    exclude: Collection[str] = (),
) -> Fraction:
    """Sum ``amount / rate`` over *cost* in the reporting currency.

    Keys in *exclude* (holdings that could not be priced) are skipped.  Any
    other key without a rate raises ``MissingExchangeRateError``.
    """
    total = Fraction(0)
    for currency, amount in cost.items():
        if currency in exclude:
            continue
        rate = exchange_rates.get(currency)
        if rate is None:
            raise MissingExchangeRateError(currency)
        total += amount / rate
    return total
