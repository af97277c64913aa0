"""Display mapping from internal asset uids to tickers.

Report output only; the valuation path never sees tickers.
"""

from __future__ import annotations

from collections.abc import Mapping
from fractions import Fraction

from valuation.rational import add


def to_tickers(
    values: Mapping[str, Fraction] | None,
    tickers: Mapping[str, str],
) -> dict[str, Fraction]:
    """Re-key *values* by ticker, summing entries that share one.

    Keys without a known ticker (currency codes, unresolved assets) are kept
    as they are.
    """
    result: dict[str, Fraction] = {}
    for uid, value in (values or {}).items():
        ticker = tickers.get(uid) or uid
        result[ticker] = add(result.get(ticker), value)
    return result
