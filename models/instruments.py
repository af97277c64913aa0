"""Instrument reference data supplied by the resolver."""

from __future__ import annotations

from pydantic import BaseModel, field_validator


class Instrument(BaseModel):
    """One tradable instrument and the underlying asset it belongs to.

    Several instruments may share an ``asset_uid`` (the same share listed in
    different currencies).  ``iso_currency`` is set only for currency
    instruments, whose positions are cash balances rather than holdings.
    """

    uid: str
    asset_uid: str
    ticker: str = ""
    currency: str
    iso_currency: str | None = None

    @field_validator("currency", "iso_currency")
    @classmethod
    def _lower(cls, value: str | None) -> str | None:
        return value.strip().lower() if value is not None else None
