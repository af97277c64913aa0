"""Turn operation records and candles into reversible updates."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum
from fractions import Fraction

from models.snapshot import OperationRecord
from valuation.errors import UnsupportedOperationTypeError
from valuation.updates import (
    PriceObservation,
    ReverseBuy,
    ReverseCashFlow,
    ReverseSecuritiesInput,
    ReverseSell,
    Update,
)

logger = logging.getLogger(__name__)


class OperationType(str, Enum):
    """Operation types the replay knows how to undo."""

    BUY = "BUY"
    SELL = "SELL"
    BROKER_FEE = "BROKER_FEE"
    DIVIDEND = "DIVIDEND"
    DIVIDEND_TAX = "DIVIDEND_TAX"
    INPUT = "INPUT"
    TAX = "TAX"
    INPUT_SECURITIES = "INPUT_SECURITIES"


CASH_ONLY_TYPES = frozenset(
    {
        OperationType.BROKER_FEE,
        OperationType.DIVIDEND,
        OperationType.DIVIDEND_TAX,
        OperationType.INPUT,
        OperationType.TAX,
    }
)

# Types whose reversal touches an asset holding.
SECURITY_TYPES = frozenset({OperationType.BUY, OperationType.SELL, OperationType.INPUT_SECURITIES})


def operation_to_update(operation: OperationRecord) -> Update:
    """Build the update that undoes *operation*.

    Raises ``UnsupportedOperationTypeError`` for type tags without a known
    reversal rule.
    """
    try:
        op_type = OperationType(operation.type)
    except ValueError:
        raise UnsupportedOperationTypeError(operation.type, operation.id) from None

    quantity = Fraction(operation.quantity)
    payment = operation.payment.to_fraction()
    currency = operation.payment.currency

    if op_type is OperationType.BUY:
        return ReverseBuy(operation.date, operation.asset_uid, quantity, payment, currency)
    if op_type is OperationType.SELL:
        return ReverseSell(operation.date, operation.asset_uid, quantity, payment, currency)
    if op_type is OperationType.INPUT_SECURITIES:
        return ReverseSecuritiesInput(operation.date, operation.asset_uid, quantity)
    return ReverseCashFlow(operation.date, payment, currency, op_type.value)


def build_updates(
    operations: Iterable[OperationRecord],
    prices: Iterable[PriceObservation] = (),
) -> list[Update]:
    """Convert the whole history into one list of updates.

    The first unsupported operation aborts the build: guessing a reversal
    rule would silently corrupt every earlier state.
    """
    updates: list[Update] = []
    for operation in operations:
        updates.append(operation_to_update(operation))
    num_operations = len(updates)
    updates.extend(prices)
    logger.info(
        "Built %d update(s): %d operation(s), %d price observation(s).",
        len(updates),
        num_operations,
        len(updates) - num_operations,
    )
    return updates
