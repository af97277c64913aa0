"""Snapshot loading and replay input preparation.

The loader reads one account snapshot from disk, validates it against
``contracts/schemas/account_snapshot.schema.json``, and turns it into the
starting tables and update inputs the engine consumes:

* positions become the current portfolio, price table and price currencies,
  keyed by asset uid (cash positions by currency code);
* operations are kept when executed and dated inside
  ``[Jan 1 of tax year, as_of]``;
* candles are kept inside ``[Jan 1 of tax year, Jan 1 of next year +
  price_tail_months)`` and become price observations at the candle's high.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from fractions import Fraction
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

from models.config import ValuationConfig
from models.snapshot import AccountSnapshot, OperationRecord
from valuation.directory import InstrumentDirectory
from valuation.errors import SnapshotValidationError, UnknownInstrumentError
from valuation.interpreter import SECURITY_TYPES
from valuation.rational import adjust
from valuation.updates import PriceObservation

logger = logging.getLogger(__name__)

SCHEMA_PATH = (
    Path(__file__).resolve().parents[1] / "contracts" / "schemas" / "account_snapshot.schema.json"
)

_SECURITY_TYPE_TAGS = frozenset(t.value for t in SECURITY_TYPES)


@dataclass
class PreparedAccount:
    """Replay inputs derived from one snapshot."""

    account_id: str
    as_of: datetime
    portfolio: dict[str, Fraction]
    prices: dict[str, Fraction]
    currencies: dict[str, str]
    operations: list[OperationRecord]
    price_observations: list[PriceObservation]
    directory: InstrumentDirectory
    assets: set[str] = field(default_factory=set)


# ------------------------------------------------------------------
# Loading from disk
# ------------------------------------------------------------------

def load_schema(path: Path = SCHEMA_PATH) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Schema file not found at {path}")
    return json.loads(path.read_text(encoding="utf-8"))


def validate_snapshot(instance: Any, source: str, schema: dict[str, Any] | None = None) -> None:
    """Raise ``SnapshotValidationError`` listing every schema violation."""
    validator = Draft202012Validator(schema if schema is not None else load_schema())
    errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.path])
    if errors:
        messages = [
            f"{'.'.join(str(p) for p in error.path) or '(root)'}: {error.message}"
            for error in errors
        ]
        raise SnapshotValidationError(source, messages)


def load_snapshot(path: str | Path) -> AccountSnapshot:
    """Read, validate and parse the snapshot file at *path*."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Snapshot file not found: {path}")
    raw = json.loads(path.read_text(encoding="utf-8"))
    validate_snapshot(raw, str(path))
    snapshot = AccountSnapshot.model_validate(raw)
    logger.info(
        "Loaded snapshot for account '%s' as of %s: %d position(s), %d operation(s), %d candle(s).",
        snapshot.account_id,
        snapshot.as_of.isoformat(),
        len(snapshot.positions),
        len(snapshot.operations),
        len(snapshot.candles),
    )
    return snapshot


# ------------------------------------------------------------------
# Building replay inputs
# ------------------------------------------------------------------

def year_start(year: int) -> datetime:
    return datetime(year, 1, 1, tzinfo=timezone.utc)


def price_window_end(tax_year: int, tail_months: int) -> datetime:
    """First instant after the kept price history."""
    months = tail_months
    return datetime(tax_year + 1 + months // 12, months % 12 + 1, 1, tzinfo=timezone.utc)


def prepare_account(snapshot: AccountSnapshot, config: ValuationConfig) -> PreparedAccount:
    """Resolve the snapshot into starting tables and replay inputs."""
    if config.account_id and snapshot.account_id != config.account_id:
        raise ValueError(
            f"Snapshot belongs to account '{snapshot.account_id}', "
            f"config expects '{config.account_id}'."
        )

    directory = InstrumentDirectory(snapshot.instruments, config.exchange_rates.keys())
    account = PreparedAccount(
        account_id=snapshot.account_id,
        as_of=snapshot.as_of,
        portfolio={},
        prices={},
        currencies={},
        operations=[],
        price_observations=[],
        directory=directory,
    )

    _load_positions(snapshot, account)
    _load_operations(snapshot, config, account)
    _load_candles(snapshot, config, account)

    logger.info(
        "Instruments: assets=%s tickers=%s",
        directory.assets,
        directory.tickers,
    )
    return account


def _load_positions(snapshot: AccountSnapshot, account: PreparedAccount) -> None:
    directory = account.directory
    for position in snapshot.positions:
        quantity = position.quantity.to_fraction()
        currency = directory.cash_currency(position.instrument_uid)
        if currency is not None:
            adjust(account.portfolio, currency, quantity)
            continue

        asset_uid = directory.asset_of(position.instrument_uid, context="a position")
        account.assets.add(asset_uid)
        if position.current_price is None:
            logger.warning(
                "Position in asset '%s' has no current price; it stays unvalued until a candle is seen.",
                asset_uid,
            )
        else:
            account.prices[asset_uid] = position.current_price.to_fraction()
            account.currencies[asset_uid] = position.current_price.currency
        adjust(account.portfolio, asset_uid, quantity)


def _load_operations(
    snapshot: AccountSnapshot,
    config: ValuationConfig,
    account: PreparedAccount,
) -> None:
    directory = account.directory
    start = year_start(config.tax_year)
    skipped = 0
    for operation in snapshot.operations:
        if not operation.is_executed or not (start <= operation.date <= snapshot.as_of):
            skipped += 1
            continue

        if operation.asset_uid and operation.instrument_uid:
            directory.learn(operation.instrument_uid, operation.asset_uid)
        elif operation.type in _SECURITY_TYPE_TAGS and not operation.asset_uid:
            asset_uid = directory.asset_of(
                operation.instrument_uid,
                context=f"operation '{operation.id}' ({operation.type})",
            )
            operation = operation.model_copy(update={"asset_uid": asset_uid})
        if operation.asset_uid:
            account.assets.add(operation.asset_uid)
        account.operations.append(operation)

    logger.info(
        "Kept %d operation(s) between %s and %s, skipped %d.",
        len(account.operations),
        start.date().isoformat(),
        snapshot.as_of.isoformat(),
        skipped,
    )


def _load_candles(
    snapshot: AccountSnapshot,
    config: ValuationConfig,
    account: PreparedAccount,
) -> None:
    directory = account.directory
    start = year_start(config.tax_year)
    end = price_window_end(config.tax_year, config.price_tail_months)
    seen: set[str] = set()
    for candle in snapshot.candles:
        if not (start <= candle.time < end):
            continue
        uid = candle.instrument_uid
        try:
            asset_uid = directory.asset_of(uid, context="a candle")
            currency = directory.currency_of(uid, context="a candle")
        except UnknownInstrumentError:
            logger.warning("Skipping candle for unknown instrument '%s'.", uid)
            continue
        seen.add(uid)
        account.price_observations.append(
            PriceObservation(candle.time, asset_uid, candle.high.to_fraction(), currency)
        )

    tickers = directory.tickers
    for uid in directory.security_instruments():
        if uid not in seen:
            asset_uid = directory.asset_of(uid)
            logger.warning(
                "No candles found for instrument '%s' (asset '%s', ticker '%s').",
                uid,
                asset_uid,
                tickers.get(asset_uid, ""),
            )
