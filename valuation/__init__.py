"""Backward-replay valuation of a brokerage account.

The core walks the current portfolio back in time through its operation
history and historical prices, and reports the maximum aggregate value seen
during the tax year.
"""

from valuation.currency import aggregate
from valuation.engine import Candidate, ReplayResult, ReplayStep, TimeReversalEngine
from valuation.errors import (
    MissingExchangeRateError,
    NoEligibleCandidateError,
    SnapshotValidationError,
    UnknownInstrumentError,
    UnsupportedOperationTypeError,
    ValuationError,
)
from valuation.interpreter import build_updates, operation_to_update
from valuation.liquidation import liquidate, sell_all
from valuation.tickers import to_tickers

__all__ = [
    "Candidate",
    "ReplayResult",
    "ReplayStep",
    "TimeReversalEngine",
    "aggregate",
    "build_updates",
    "liquidate",
    "operation_to_update",
    "sell_all",
    "to_tickers",
    # errors
    "MissingExchangeRateError",
    "NoEligibleCandidateError",
    "SnapshotValidationError",
    "UnknownInstrumentError",
    "UnsupportedOperationTypeError",
    "ValuationError",
]
