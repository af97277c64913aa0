"""Value a portfolio by selling every holding at its last known price."""

from __future__ import annotations

from valuation.rational import adjust
from valuation.updates import Currencies, Portfolio, Prices


def sell_all(portfolio: Portfolio, prices: Prices, currencies: Currencies) -> None:
    """Convert every priced holding in *portfolio* into cash, in place.

    Each holding becomes ``quantity * price`` in its price currency and the
    holding entry is removed.  Holdings without a known price are left
    untouched, as are cash balances.
    """
    for key, quantity in list(portfolio.items()):
        price = prices.get(key)
        if price is None:
            continue
        del portfolio[key]
        adjust(portfolio, currencies[key], price * quantity)


def liquidate(portfolio: Portfolio, prices: Prices, currencies: Currencies) -> Portfolio:
    """Return a liquidated copy of *portfolio*; the original is not mutated."""
    cost = dict(portfolio)
    sell_all(cost, prices, currencies)
    return cost
