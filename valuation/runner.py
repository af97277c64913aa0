"""Valuation runner: the end-to-end orchestration of one run.

Lifecycle:
    1. Load and validate the account snapshot.
    2. Resolve positions, operations and candles into replay inputs.
    3. Build the update set (one per operation, one per candle).
    4. Replay it backward and pick the best in-year state.
    5. Render the result by ticker and optionally write it to disk.

Every ``ValuationError`` propagates to the caller unchanged.
"""

from __future__ import annotations

import logging
from pathlib import Path

from models.config import ValuationConfig
from models.report import ValuationPoint, ValuationReport
from valuation.engine import Candidate, TimeReversalEngine
from valuation.interpreter import build_updates
from valuation.rational import format_decimal, to_strings
from valuation.report_writer import ReportWriter, run_name_from_config_path
from valuation.snapshot_loader import load_snapshot, prepare_account
from valuation.tickers import to_tickers

logger = logging.getLogger(__name__)


class ValuationRunner:
    """Runs one valuation for the account described by *config*."""

    def __init__(
        self,
        config: ValuationConfig,
        config_yaml_path: str | Path | None = None,
        output_dir: str | Path | None = None,
    ) -> None:
        self._config = config
        self._config_yaml_path = config_yaml_path
        self._output_dir = output_dir
        if config_yaml_path is not None:
            self._run_name = run_name_from_config_path(config_yaml_path)
        else:
            self._run_name = f"tax_year_{config.tax_year}"

    def run(self) -> ValuationReport:
        """Execute the valuation and return the report."""
        config = self._config
        snapshot = load_snapshot(config.snapshot_path)
        account = prepare_account(snapshot, config)
        updates = build_updates(account.operations, account.price_observations)

        engine = TimeReversalEngine(
            account.portfolio,
            account.prices,
            account.currencies,
            updates,
            config.rates(),
            config.tax_year,
            as_of=account.as_of,
            assets=account.assets,
        )
        result = engine.run()

        tickers = account.directory.tickers
        report = ValuationReport(
            run_name=self._run_name,
            account_id=account.account_id,
            tax_year=config.tax_year,
            reporting_currency=config.reporting_currency,
            steps=len(result.trace),
            current=_to_point(result.current, tickers),
            best=_to_point(result.best, tickers),
        )
        logger.info(
            "Best portfolio at %s: portfolio=%s prices=%s cost=%s aggregate=%s %s",
            report.best.time,
            report.best.portfolio,
            report.best.prices,
            report.best.cost,
            report.best.aggregate_rounded,
            config.reporting_currency,
        )

        if self._output_dir is not None:
            writer = ReportWriter(self._output_dir, self._run_name)
            writer.init_run(self._config_yaml_path)
            writer.write_report(report)
        return report


def _to_point(candidate: Candidate, tickers: dict[str, str]) -> ValuationPoint:
    """Render a candidate keyed by ticker."""
    return ValuationPoint(
        time=candidate.at,
        portfolio=to_strings(to_tickers(candidate.portfolio, tickers)),
        prices=to_strings(to_tickers(candidate.prices, tickers)),
        cost=to_strings(to_tickers(candidate.cost, tickers)),
        aggregate=str(candidate.aggregate),
        aggregate_rounded=format_decimal(candidate.aggregate),
    )
