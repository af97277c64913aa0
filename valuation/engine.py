"""Time-reversal engine: replay the account backward and track its peak value.

Lifecycle:
    1. Start from the current portfolio and the current prices.
    2. Group every update by timestamp and walk the timestamps newest first.
    3. At each timestamp clone the state, apply that timestamp's updates,
       liquidate the clone at known prices and fold the cash into the
       reporting currency.
    4. Keep the strictly largest value whose timestamp lies in the tax year.

Updates sharing a timestamp are applied in the order they were supplied;
no stronger ordering is promised.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from fractions import Fraction

from valuation.currency import aggregate
from valuation.errors import NoEligibleCandidateError
from valuation.liquidation import liquidate
from valuation.rational import to_strings
from valuation.updates import Currencies, Portfolio, Prices, Update

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """Account state at one moment together with its value."""

    at: datetime | None
    portfolio: Portfolio
    prices: Prices
    currencies: Currencies
    cost: Portfolio
    aggregate: Fraction


@dataclass(frozen=True)
class ReplayStep:
    """One timestamp of the backward walk, kept for tracing."""

    at: datetime
    portfolio: Portfolio
    cost: Portfolio
    aggregate: Fraction
    in_tax_year: bool
    is_best: bool


@dataclass
class ReplayResult:
    current: Candidate
    best: Candidate
    trace: list[ReplayStep] = field(default_factory=list)


def group_by_time(updates: Iterable[Update]) -> dict[datetime, list[Update]]:
    """Bucket updates by timestamp, newest timestamp first."""
    buckets: dict[datetime, list[Update]] = defaultdict(list)
    for update in updates:
        buckets[update.at].append(update)
    return {at: buckets[at] for at in sorted(buckets, reverse=True)}


class TimeReversalEngine:
    """Walks one account backward through a fully materialised update set.

    The engine owns its copies of the starting tables; every step works on a
    fresh clone so the snapshots stored in ``Candidate`` and ``ReplayStep``
    never change afterwards.
    """

    def __init__(
        self,
        portfolio: Mapping[str, Fraction],
        prices: Mapping[str, Fraction],
        currencies: Mapping[str, str],
        updates: Iterable[Update],
        exchange_rates: Mapping[str, Fraction],
        tax_year: int,
        as_of: datetime | None = None,
        assets: Iterable[str] = (),
    ) -> None:
        updates = list(updates)
        self._portfolio: Portfolio = dict(portfolio)
        self._prices: Prices = dict(prices)
        self._currencies: Currencies = dict(currencies)
        self._schedule = group_by_time(updates)
        self._exchange_rates = dict(exchange_rates)
        self._tax_year = tax_year
        self._as_of = as_of
        # Anything that is not an asset must be cash and needs a rate.
        self._asset_ids = (
            frozenset(assets)
            | frozenset(self._prices)
            | frozenset(u.asset_uid for u in updates if u.asset_uid)
        )

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    @property
    def asset_ids(self) -> frozenset[str]:
        return self._asset_ids

    def value(
        self,
        portfolio: Portfolio,
        prices: Prices,
        currencies: Currencies,
    ) -> tuple[Portfolio, Fraction]:
        """Liquidate *portfolio* and return ``(cost, aggregate)``.

        Assets that have no known price stay in ``cost`` but contribute
        nothing to the aggregate.
        """
        cost = liquidate(portfolio, prices, currencies)
        unpriced = [key for key in cost if key in self._asset_ids]
        return cost, aggregate(cost, self._exchange_rates, exclude=unpriced)

    def run(self) -> ReplayResult:
        """Walk every timestamp newest to oldest and return the best state.

        Raises ``NoEligibleCandidateError`` if no step inside the tax year
        improved on a value of zero.
        """
        portfolio, prices, currencies = self._portfolio, self._prices, self._currencies
        cost, total = self.value(portfolio, prices, currencies)
        current = Candidate(self._as_of, portfolio, prices, currencies, cost, total)
        logger.info(
            "Current portfolio: %s, cost: %s, aggregate: %s",
            to_strings(portfolio),
            to_strings(cost),
            total,
        )

        best: Candidate | None = None
        best_aggregate = Fraction(0)
        trace: list[ReplayStep] = []

        logger.info(
            "Going back in time over %d timestamp(s), tax year %d.",
            len(self._schedule),
            self._tax_year,
        )
        for at, batch in self._schedule.items():
            portfolio = dict(portfolio)
            prices = dict(prices)
            currencies = dict(currencies)
            for update in batch:
                update.apply(portfolio, prices, currencies)

            cost, total = self.value(portfolio, prices, currencies)
            in_year = self._in_tax_year(at)
            is_best = in_year and total > best_aggregate
            logger.debug(
                "State at %s: portfolio=%s cost=%s aggregate=%s",
                at.isoformat(),
                to_strings(portfolio),
                to_strings(cost),
                total,
            )
            if is_best:
                best = Candidate(at, portfolio, prices, currencies, cost, total)
                best_aggregate = total
                logger.debug("New best at %s: %s", at.isoformat(), total)
            trace.append(ReplayStep(at, portfolio, cost, total, in_year, is_best))

        if best is None:
            earliest = trace[-1].at if trace else None
            raise NoEligibleCandidateError(self._tax_year, len(trace), earliest)

        logger.info(
            "Best portfolio at %s: aggregate %s",
            best.at.isoformat() if best.at else "-",
            best.aggregate,
        )
        return ReplayResult(current=current, best=best, trace=trace)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _in_tax_year(self, at: datetime) -> bool:
        if at.tzinfo is not None:
            at = at.astimezone(timezone.utc)
        return at.year == self._tax_year
