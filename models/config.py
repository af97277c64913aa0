"""Valuation run configuration, loaded from YAML.

The exchange-rate table is fixed for the whole tax year and is never
discovered at runtime.
"""

from __future__ import annotations

from decimal import Decimal
from fractions import Fraction
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

# Treasury reporting rates of exchange, units of currency per 1 USD.
# https://fiscaldata.treasury.gov/datasets/treasury-reporting-rates-exchange/treasury-reporting-rates-of-exchange-source
DEFAULT_EXCHANGE_RATES: dict[str, Decimal] = {
    "amd": Decimal("380"),
    "chf": Decimal("0.792"),
    "cny": Decimal("6.998"),
    "eur": Decimal("0.851"),
    "gbp": Decimal("0.743"),
    "hkd": Decimal("7.784"),
    "jpy": Decimal("156.61"),
    "kgs": Decimal("87.412"),
    "kzt": Decimal("506.28"),
    "rub": Decimal("81.996"),
    "tjs": Decimal("9.2"),
    "try": Decimal("42.951"),
    "usd": Decimal("1"),
    "uzs": Decimal("11999.41"),
}


class ValuationConfig(BaseModel):
    """Top-level configuration for a valuation run."""

    tax_year: int = Field(ge=1970, description="Calendar year to report the maximum for.")
    reporting_currency: str = Field(
        default="usd",
        description="Currency the aggregate is expressed in; its rate must be 1.",
    )
    exchange_rates: dict[str, Decimal] = Field(
        default_factory=lambda: dict(DEFAULT_EXCHANGE_RATES),
        description="Units of each currency per one unit of the reporting currency.",
    )
    snapshot_path: str = Field(description="Path to the account snapshot JSON file.")
    price_tail_months: int = Field(
        default=1,
        ge=0,
        le=12,
        description="Months of price history kept after the tax year ends. "
        "Sparse candles near the year boundary are otherwise reused too far back.",
    )
    account_id: str | None = Field(
        default=None,
        description="If set, the snapshot must belong to this account.",
    )

    @field_validator("reporting_currency")
    @classmethod
    def _lower_currency(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("exchange_rates", mode="before")
    @classmethod
    def _exact_rates(cls, value: object) -> object:
        # YAML hands us floats; go through str() so 0.851 stays 0.851.
        if not isinstance(value, dict):
            return value
        return {
            str(k).strip().lower(): Decimal(str(v)) if isinstance(v, float) else v
            for k, v in value.items()
        }

    @model_validator(mode="after")
    def _check_rates(self) -> ValuationConfig:
        for currency, rate in self.exchange_rates.items():
            if rate <= 0:
                raise ValueError(f"Exchange rate for '{currency}' must be positive, got {rate}.")
        rate = self.exchange_rates.get(self.reporting_currency)
        if rate != 1:
            raise ValueError(
                f"Reporting currency '{self.reporting_currency}' must have exchange rate 1, "
                f"got {rate}."
            )
        return self

    def rates(self) -> dict[str, Fraction]:
        """Exchange-rate table as exact fractions."""
        return {currency: Fraction(rate) for currency, rate in self.exchange_rates.items()}

    @classmethod
    def from_yaml(cls, path: str | Path) -> ValuationConfig:
        """Load and validate a ``ValuationConfig`` from a YAML file.

        Raises ``FileNotFoundError`` if the file does not exist and
        ``ValueError`` if the content is not a valid YAML mapping.  A relative
        ``snapshot_path`` is resolved against the config file's directory.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with path.open(encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)

        if not isinstance(raw, dict):
            raise ValueError(
                f"Expected a YAML mapping in {path}, got {type(raw).__name__}."
            )

        snapshot = raw.get("snapshot_path")
        if isinstance(snapshot, str) and not Path(snapshot).is_absolute():
            raw["snapshot_path"] = str(path.parent / snapshot)

        return cls(**raw)
