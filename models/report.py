"""Report models written at the end of a run.

Rational values are serialised twice: exactly as ``"numerator/denominator"``
and rounded for humans.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class ValuationPoint(BaseModel):
    """Portfolio state at one moment, keyed by ticker for display."""

    time: datetime | None = None
    portfolio: dict[str, str]
    prices: dict[str, str] = {}
    cost: dict[str, str]
    aggregate: str  # exact fraction
    aggregate_rounded: str


class ValuationReport(BaseModel):
    """Run-level result: the maximum account value within the tax year."""

    run_name: str
    account_id: str
    tax_year: int
    reporting_currency: str
    steps: int
    current: ValuationPoint
    best: ValuationPoint
