"""State mutations replayed by the engine, newest first.

Each update undoes one historical event: an operation (the account state
*before* it happened is reconstructed) or a price observation (the price
that was known at that moment).  All of them mutate the three tables in
place:

* ``portfolio`` -- asset uid or currency code -> signed quantity,
* ``prices`` -- asset uid -> last known price,
* ``currencies`` -- asset uid -> currency of that price.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from fractions import Fraction
from typing import ClassVar, Union

from valuation.rational import adjust

Portfolio = dict[str, Fraction]
Prices = dict[str, Fraction]
Currencies = dict[str, str]


@dataclass(frozen=True)
class ReverseBuy:
    """Before a buy the asset was not yet held and the money not yet spent."""

    at: datetime
    asset_uid: str
    quantity: Fraction
    payment: Fraction  # negative: cash left the account
    currency: str

    def apply(self, portfolio: Portfolio, prices: Prices, currencies: Currencies) -> None:
        adjust(portfolio, self.asset_uid, -self.quantity)
        adjust(portfolio, self.currency, -self.payment)


@dataclass(frozen=True)
class ReverseSell:
    """Before a sell the asset was still held and the proceeds not yet received."""

    at: datetime
    asset_uid: str
    quantity: Fraction
    payment: Fraction
    currency: str

    def apply(self, portfolio: Portfolio, prices: Prices, currencies: Currencies) -> None:
        adjust(portfolio, self.asset_uid, self.quantity)
        adjust(portfolio, self.currency, -self.payment)


@dataclass(frozen=True)
class ReverseCashFlow:
    """Fees, dividends, taxes and cash deposits only move money."""

    at: datetime
    payment: Fraction
    currency: str
    operation_type: str

    asset_uid: ClassVar[None] = None

    def apply(self, portfolio: Portfolio, prices: Prices, currencies: Currencies) -> None:
        adjust(portfolio, self.currency, -self.payment)


@dataclass(frozen=True)
class ReverseSecuritiesInput:
    """Securities transferred in were not in the account before the transfer.

    The broker reports a payment for these, but it is informational only.
    """

    at: datetime
    asset_uid: str
    quantity: Fraction

    def apply(self, portfolio: Portfolio, prices: Prices, currencies: Currencies) -> None:
        adjust(portfolio, self.asset_uid, -self.quantity)


@dataclass(frozen=True)
class PriceObservation:
    """Price of an asset as seen on one historical candle."""

    at: datetime
    asset_uid: str
    price: Fraction
    currency: str

    def apply(self, portfolio: Portfolio, prices: Prices, currencies: Currencies) -> None:
        prices[self.asset_uid] = self.price
        currencies[self.asset_uid] = self.currency


Update = Union[ReverseBuy, ReverseSell, ReverseCashFlow, ReverseSecuritiesInput, PriceObservation]
