"""Tests for ValuationConfig loading and validation."""

from decimal import Decimal
from fractions import Fraction
from pathlib import Path

import pytest
from pydantic import ValidationError

from models.config import DEFAULT_EXCHANGE_RATES, ValuationConfig

REPO_ROOT = Path(__file__).resolve().parents[2]


def test_defaults():
    config = ValuationConfig(tax_year=2025, snapshot_path="snap.json")
    assert config.reporting_currency == "usd"
    assert config.price_tail_months == 1
    assert config.exchange_rates == DEFAULT_EXCHANGE_RATES
    assert config.account_id is None


def test_rates_are_exact_fractions():
    rates = ValuationConfig(tax_year=2025, snapshot_path="s").rates()
    assert rates["eur"] == Fraction(851, 1000)
    assert rates["jpy"] == Fraction(15661, 100)
    assert rates["usd"] == 1


def test_float_rates_keep_their_decimal_value():
    config = ValuationConfig(
        tax_year=2025,
        snapshot_path="s",
        exchange_rates={"USD": 1, "EUR": 0.851},
    )
    assert config.exchange_rates == {"usd": Decimal("1"), "eur": Decimal("0.851")}
    assert config.rates()["eur"] == Fraction(851, 1000)


def test_reporting_currency_must_have_unit_rate():
    with pytest.raises(ValidationError, match="exchange rate 1"):
        ValuationConfig(tax_year=2025, snapshot_path="s", reporting_currency="eur")


def test_reporting_currency_must_be_present():
    with pytest.raises(ValidationError):
        ValuationConfig(tax_year=2025, snapshot_path="s", exchange_rates={"eur": 1})


def test_non_usd_reporting_currency():
    config = ValuationConfig(
        tax_year=2025,
        snapshot_path="s",
        reporting_currency="EUR",
        exchange_rates={"eur": 1, "usd": "1.175"},
    )
    assert config.reporting_currency == "eur"


def test_rates_must_be_positive():
    with pytest.raises(ValidationError, match="positive"):
        ValuationConfig(tax_year=2025, snapshot_path="s", exchange_rates={"usd": 1, "rub": 0})


def test_tail_months_bounds():
    with pytest.raises(ValidationError):
        ValuationConfig(tax_year=2025, snapshot_path="s", price_tail_months=13)


# =============================================================================
# YAML loading
# =============================================================================


def test_from_yaml_resolves_snapshot_relative_to_config(tmp_path: Path):
    path = tmp_path / "run.yaml"
    path.write_text(
        "tax_year: 2024\nsnapshot_path: data/snap.json\nexchange_rates:\n  usd: 1\n  eur: 0.851\n",
        encoding="utf-8",
    )
    config = ValuationConfig.from_yaml(path)
    assert config.tax_year == 2024
    assert config.snapshot_path == str(tmp_path / "data" / "snap.json")
    assert config.rates() == {"usd": Fraction(1), "eur": Fraction(851, 1000)}


def test_from_yaml_keeps_absolute_snapshot_path(tmp_path: Path):
    target = tmp_path / "elsewhere.json"
    path = tmp_path / "run.yaml"
    path.write_text(f"tax_year: 2025\nsnapshot_path: {target}\n", encoding="utf-8")
    assert ValuationConfig.from_yaml(path).snapshot_path == str(target)


def test_from_yaml_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        ValuationConfig.from_yaml(tmp_path / "missing.yaml")


def test_from_yaml_rejects_non_mapping(tmp_path: Path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError, match="YAML mapping"):
        ValuationConfig.from_yaml(path)


def test_example_config_matches_defaults():
    config = ValuationConfig.from_yaml(REPO_ROOT / "config" / "example.yaml")
    assert config.tax_year == 2025
    assert config.rates() == {k: Fraction(v) for k, v in DEFAULT_EXCHANGE_RATES.items()}
    assert Path(config.snapshot_path).resolve() == (REPO_ROOT / "data" / "example_snapshot.json").resolve()
