"""Lookup tables for instrument, asset, ticker and currency resolution.

Built once from the snapshot's instrument list before the replay starts and
handed to whoever needs it; nothing here is process-wide state.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable

from models.instruments import Instrument
from valuation.errors import UnknownInstrumentError


class InstrumentDirectory:
    """Resolves instrument uids to assets, tickers and trading currencies.

    Currency instruments whose ISO code is in *cash_currencies* are treated
    as cash.  A currency instrument outside that set is an ordinary priced
    holding.
    """

    def __init__(self, instruments: Iterable[Instrument], cash_currencies: Collection[str]) -> None:
        self._instruments: dict[str, Instrument] = {}
        self._assets: dict[str, str] = {}
        self._tickers: dict[str, str] = {}
        self._cash: dict[str, str] = {}
        for instrument in instruments:
            self._instruments[instrument.uid] = instrument
            self._assets[instrument.uid] = instrument.asset_uid
            if instrument.ticker and instrument.asset_uid not in self._tickers:
                self._tickers[instrument.asset_uid] = instrument.ticker
            if instrument.iso_currency and instrument.iso_currency in cash_currencies:
                self._cash[instrument.uid] = instrument.iso_currency

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def cash_currency(self, instrument_uid: str) -> str | None:
        """Currency code if *instrument_uid* is a cash instrument, else ``None``."""
        return self._cash.get(instrument_uid)

    def asset_of(self, instrument_uid: str, context: str = "") -> str:
        try:
            return self._assets[instrument_uid]
        except KeyError:
            raise UnknownInstrumentError(instrument_uid, context) from None

    def currency_of(self, instrument_uid: str, context: str = "") -> str:
        """Trading currency of *instrument_uid* (the currency its candles are in)."""
        instrument = self._instruments.get(instrument_uid)
        if instrument is None:
            raise UnknownInstrumentError(instrument_uid, context)
        return instrument.currency

    def security_instruments(self) -> list[str]:
        """Uids of every known instrument that is not cash."""
        return [uid for uid in self._instruments if uid not in self._cash]

    def learn(self, instrument_uid: str, asset_uid: str) -> None:
        """Record that *instrument_uid* trades *asset_uid*."""
        self._assets[instrument_uid] = asset_uid

    @property
    def assets(self) -> dict[str, str]:
        """Instrument uid -> asset uid."""
        return dict(self._assets)

    @property
    def tickers(self) -> dict[str, str]:
        """Asset uid -> ticker."""
        return dict(self._tickers)
