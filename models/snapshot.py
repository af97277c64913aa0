"""Account snapshot: current positions, operation history and price candles.

This is the data contract with the collaborators that talk to the broker.
The valuation core never fetches anything itself; it receives one fully
materialised ``AccountSnapshot``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from models.instruments import Instrument
from models.quotation import MoneyValue, Quotation


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _strip_prefix(value: str, prefix: str) -> str:
    value = value.strip().upper()
    if value.startswith(prefix):
        value = value[len(prefix):]
    return value


class Position(BaseModel):
    """A currently held instrument with its latest price."""

    instrument_uid: str
    quantity: Quotation
    current_price: MoneyValue | None = Field(
        default=None,
        description="Latest known price. Absent for currency positions.",
    )


class OperationRecord(BaseModel):
    """One historical operation (trade, fee, dividend, transfer).

    ``quantity`` is the traded amount of the asset; ``payment`` is the signed
    cash movement (negative for money leaving the account).
    """

    id: str = ""
    type: str
    state: str = "EXECUTED"
    date: datetime
    instrument_uid: str = ""
    asset_uid: str = ""
    quantity: int = 0
    payment: MoneyValue
    description: str = ""

    @field_validator("type")
    @classmethod
    def _normalize_type(cls, value: str) -> str:
        return _strip_prefix(value, "OPERATION_TYPE_")

    @field_validator("state")
    @classmethod
    def _normalize_state(cls, value: str) -> str:
        return _strip_prefix(value, "OPERATION_STATE_")

    @field_validator("date")
    @classmethod
    def _utc_date(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @property
    def is_executed(self) -> bool:
        return self.state == "EXECUTED"


class Candle(BaseModel):
    """Historical price bar for one instrument."""

    instrument_uid: str
    time: datetime
    high: Quotation
    open: Quotation | None = None
    low: Quotation | None = None
    close: Quotation | None = None

    @field_validator("time")
    @classmethod
    def _utc_time(cls, value: datetime) -> datetime:
        return _as_utc(value)


class AccountSnapshot(BaseModel):
    """Everything the replay needs about one account."""

    account_id: str
    as_of: datetime = Field(description="Moment the positions were captured.")
    instruments: list[Instrument] = []
    positions: list[Position] = []
    operations: list[OperationRecord] = []
    candles: list[Candle] = []

    @field_validator("as_of")
    @classmethod
    def _utc_as_of(cls, value: datetime) -> datetime:
        return _as_utc(value)
