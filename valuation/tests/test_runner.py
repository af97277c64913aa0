"""End-to-end tests: snapshot file in, report out."""

import json
import sys
from pathlib import Path

import pytest

import run_valuation
from models.config import ValuationConfig
from valuation.errors import UnsupportedOperationTypeError
from valuation.runner import ValuationRunner

REPO_ROOT = Path(__file__).resolve().parents[2]
EXAMPLE_CONFIG = REPO_ROOT / "config" / "example.yaml"


def money(units, nano=0, currency="usd"):
    return {"units": units, "nano": nano, "currency": currency}


@pytest.fixture
def raw_snapshot() -> dict:
    return {
        "account_id": "acc-1",
        "as_of": "2026-01-10T00:00:00Z",
        "instruments": [
            {"uid": "usd-instr", "asset_uid": "usd-asset", "ticker": "USD000UTSTOM", "currency": "rub", "iso_currency": "usd"},
            {"uid": "x-instr", "asset_uid": "x-asset", "ticker": "XYZ", "currency": "usd"},
        ],
        "positions": [
            {"instrument_uid": "usd-instr", "quantity": {"units": 100}},
            {"instrument_uid": "x-instr", "quantity": {"units": 2}, "current_price": money(10)},
        ],
        "operations": [
            {"id": "buy", "type": "OPERATION_TYPE_BUY", "date": "2025-06-01T10:00:00Z",
             "instrument_uid": "x-instr", "asset_uid": "x-asset", "quantity": 2, "payment": money(-30)},
        ],
        "candles": [
            {"instrument_uid": "x-instr", "time": "2025-09-01T10:00:00Z", "high": {"units": 40}},
        ],
    }


def write_config(tmp_path: Path, raw_snapshot: dict) -> Path:
    snapshot = tmp_path / "snapshot.json"
    snapshot.write_text(json.dumps(raw_snapshot), encoding="utf-8")
    config = tmp_path / "acct.yaml"
    config.write_text("tax_year: 2025\nsnapshot_path: snapshot.json\n", encoding="utf-8")
    return config


# =============================================================================
# Runner
# =============================================================================


def test_runner_reports_best_state(tmp_path: Path, raw_snapshot: dict):
    config_path = write_config(tmp_path, raw_snapshot)
    config = ValuationConfig.from_yaml(config_path)
    report = ValuationRunner(config, config_yaml_path=config_path).run()

    assert report.run_name == "acct"
    assert report.steps == 2
    assert report.current.aggregate == "120"
    assert report.best.aggregate == "180"
    assert report.best.aggregate_rounded == "180.00"
    assert report.best.time.isoformat() == "2025-09-01T10:00:00+00:00"
    assert report.best.portfolio == {"XYZ": "2", "usd": "100"}
    assert report.best.prices == {"XYZ": "40"}
    assert report.best.cost == {"usd": "180"}


def test_runner_writes_report(tmp_path: Path, raw_snapshot: dict):
    config_path = write_config(tmp_path, raw_snapshot)
    config = ValuationConfig.from_yaml(config_path)
    out = tmp_path / "results"
    ValuationRunner(config, config_yaml_path=config_path, output_dir=out).run()

    run_dir = out / "acct"
    assert (run_dir / "config.yaml").exists()
    written = json.loads((run_dir / "report.json").read_text(encoding="utf-8"))
    assert written["best"]["aggregate"] == "180"
    assert written["tax_year"] == 2025

    # A second run gets its own directory.
    ValuationRunner(config, config_yaml_path=config_path, output_dir=out).run()
    assert (out / "acct_001" / "report.json").exists()


def test_runner_without_config_file(tmp_path: Path, raw_snapshot: dict):
    snapshot = tmp_path / "snapshot.json"
    snapshot.write_text(json.dumps(raw_snapshot), encoding="utf-8")
    config = ValuationConfig(tax_year=2025, snapshot_path=str(snapshot))
    out = tmp_path / "results"
    report = ValuationRunner(config, output_dir=out).run()
    assert report.run_name == "tax_year_2025"
    assert (out / "tax_year_2025" / "report.json").exists()
    assert not (out / "tax_year_2025" / "config.yaml").exists()


def test_failed_run_writes_nothing(tmp_path: Path, raw_snapshot: dict):
    raw_snapshot["operations"].append(
        {"id": "odd", "type": "OPERATION_TYPE_OVERNIGHT", "date": "2025-07-01T00:00:00Z", "payment": money(1)}
    )
    config_path = write_config(tmp_path, raw_snapshot)
    config = ValuationConfig.from_yaml(config_path)
    out = tmp_path / "results"
    with pytest.raises(UnsupportedOperationTypeError):
        ValuationRunner(config, config_yaml_path=config_path, output_dir=out).run()
    assert not out.exists()


def test_example_config_runs():
    config = ValuationConfig.from_yaml(EXAMPLE_CONFIG)
    report = ValuationRunner(config, config_yaml_path=EXAMPLE_CONFIG).run()
    assert report.tax_year == 2025
    assert (report.best.time.year, report.best.time.month) == (2025, 12)
    assert report.best.portfolio == {"AAPL": "10", "SBER": "100", "usd": "11999/4"}


# =============================================================================
# CLI
# =============================================================================


def test_cli_success(tmp_path: Path, raw_snapshot: dict, monkeypatch, capsys):
    config_path = write_config(tmp_path, raw_snapshot)
    monkeypatch.setattr(sys, "argv", ["run_valuation.py", "--config", str(config_path)])
    assert run_valuation.main() == 0
    assert "180.00 USD" in capsys.readouterr().out


def test_cli_failure_exit_code(tmp_path: Path, raw_snapshot: dict, monkeypatch):
    raw_snapshot["candles"] = []
    raw_snapshot["operations"] = []
    config_path = write_config(tmp_path, raw_snapshot)
    monkeypatch.setattr(sys, "argv", ["run_valuation.py", "--config", str(config_path)])
    assert run_valuation.main() == 1


def test_cli_config_from_environment(tmp_path: Path, raw_snapshot: dict, monkeypatch):
    config_path = write_config(tmp_path, raw_snapshot)
    monkeypatch.setenv("VALUATION_CONFIG", str(config_path))
    monkeypatch.setattr(sys, "argv", ["run_valuation.py", "--log-level", "DEBUG"])
    assert run_valuation.main() == 0
