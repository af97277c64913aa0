"""Error taxonomy for the valuation run.

None of these are recoverable: each one means the input data or the
configuration does not match what the replay understands, so the run stops
without producing a number.
"""

from __future__ import annotations

from datetime import datetime


class ValuationError(Exception):
    """Base class for all fatal valuation errors."""


class UnsupportedOperationTypeError(ValuationError):
    """An operation's type tag has no known reversal rule."""

    def __init__(self, operation_type: str, operation_id: str = "") -> None:
        self.operation_type = operation_type
        self.operation_id = operation_id
        where = f" (operation '{operation_id}')" if operation_id else ""
        super().__init__(f"Unsupported operation type '{operation_type}'{where}.")


class MissingExchangeRateError(ValuationError):
    """A cost mapping holds a currency that has no exchange rate."""

    def __init__(self, currency: str) -> None:
        self.currency = currency
        super().__init__(
            f"No exchange rate configured for currency '{currency}'. "
            "Add it to exchange_rates in the config."
        )


class NoEligibleCandidateError(ValuationError):
    """The backward walk never produced a positive value inside the tax year."""

    def __init__(self, tax_year: int, steps: int, earliest: datetime | None = None) -> None:
        self.tax_year = tax_year
        self.steps = steps
        detail = f"; earliest step was {earliest.isoformat()}" if earliest else ""
        super().__init__(
            f"No portfolio state within tax year {tax_year} was found "
            f"after {steps} step(s){detail}. Check tax_year and the operation history."
        )


class UnknownInstrumentError(ValuationError):
    """An instrument uid could not be resolved to an asset."""

    def __init__(self, instrument_uid: str, context: str = "") -> None:
        self.instrument_uid = instrument_uid
        where = f" referenced by {context}" if context else ""
        super().__init__(f"Unknown instrument '{instrument_uid}'{where}.")


class SnapshotValidationError(ValuationError):
    """The account snapshot file does not match its JSON schema."""

    def __init__(self, path: str, errors: list[str]) -> None:
        self.path = path
        self.errors = errors
        listing = "\n".join(f"  - {e}" for e in errors)
        super().__init__(f"Snapshot validation failed for {path}:\n{listing}")
