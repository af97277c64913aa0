#!/usr/bin/env python3
"""CLI entrypoint for the maximum account value evaluator.

Usage::

    python run_valuation.py --config config/example.yaml
    python run_valuation.py --config config/example.yaml --output-dir results/

The run loads a YAML configuration file, replays the account snapshot it
points to backward through the tax year, and reports the highest aggregate
value found.  ``--config`` defaults to ``$VALUATION_CONFIG`` (a ``.env`` file
in the working directory is honoured).
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from dotenv import load_dotenv

from models.config import ValuationConfig
from valuation.errors import ValuationError
from valuation.runner import ValuationRunner


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Find the maximum value of a brokerage account during a tax year.",
    )
    parser.add_argument(
        "--config",
        default=os.environ.get("VALUATION_CONFIG"),
        type=str,
        help="Path to the YAML configuration file (default: $VALUATION_CONFIG).",
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        type=str,
        help="Directory where the report is written (default: log only).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity; DEBUG prints every replay step (default: INFO).",
    )
    args = parser.parse_args()
    if not args.config:
        parser.error("--config is required when VALUATION_CONFIG is not set.")
    return args


def _setup_logging(level: str) -> None:
    """Configure root logger with a clean format."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )


def main() -> int:
    load_dotenv()
    args = _parse_args()
    _setup_logging(args.log_level)

    logger = logging.getLogger(__name__)
    logger.info("Loading config from '%s'...", args.config)

    config = ValuationConfig.from_yaml(args.config)
    logger.info("Config loaded: tax_year=%d, snapshot='%s'", config.tax_year, config.snapshot_path)

    runner = ValuationRunner(
        config,
        config_yaml_path=args.config,
        output_dir=args.output_dir,
    )
    try:
        report = runner.run()
    except ValuationError as exc:
        logger.error("Valuation aborted: %s", exc)
        return 1

    print(
        f"Maximum value in {report.tax_year}: {report.best.aggregate_rounded} "
        f"{report.reporting_currency.upper()} at {report.best.time}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
