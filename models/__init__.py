"""Data models for the account valuation run.

Shared by the snapshot loader, the valuation core, and the report writer.
"""

from models.config import DEFAULT_EXCHANGE_RATES, ValuationConfig
from models.instruments import Instrument
from models.quotation import MoneyValue, Quotation
from models.report import ValuationPoint, ValuationReport
from models.snapshot import AccountSnapshot, Candle, OperationRecord, Position

__all__ = [
    # config
    "DEFAULT_EXCHANGE_RATES",
    "ValuationConfig",
    # instruments
    "Instrument",
    # quotation
    "MoneyValue",
    "Quotation",
    # report
    "ValuationPoint",
    "ValuationReport",
    # snapshot
    "AccountSnapshot",
    "Candle",
    "OperationRecord",
    "Position",
]
