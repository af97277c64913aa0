"""Report output: persists the final valuation of a run.

The output directory structure is::

    {output_dir}/{run_name}/
    ├── config.yaml
    └── report.json

Intermediate replay steps are never written; they only go to the DEBUG log.
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any

from models.report import ValuationReport

logger = logging.getLogger(__name__)


def run_name_from_config_path(config_path: str | Path) -> str:
    """Derive a run name from the configuration file path (stem without extension)."""
    return Path(config_path).stem


class ReportWriter:
    """Manages on-disk output for a valuation run.

    Call ``init_run`` once at the start and ``write_report`` when the replay
    has produced a result.  A failed run leaves no ``report.json`` behind.
    """

    def __init__(self, output_dir: str | Path, run_name: str) -> None:
        self._run_dir = _unique_run_dir(Path(output_dir), run_name)

    def init_run(self, config_yaml_path: str | Path | None = None) -> None:
        """Create the output directory and optionally copy the config."""
        self._run_dir.mkdir(parents=True, exist_ok=True)
        if config_yaml_path is not None:
            dest = self._run_dir / "config.yaml"
            shutil.copy2(config_yaml_path, dest)
            logger.info("Copied config to %s", dest)

    def write_report(self, report: ValuationReport) -> Path:
        path = self._run_dir / "report.json"
        _write_json(path, report.model_dump(mode="json"))
        logger.info("Report written to %s", path)
        return path

    @property
    def run_dir(self) -> Path:
        return self._run_dir


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _unique_run_dir(output_dir: Path, run_name: str) -> Path:
    """Return a run directory that does not already exist.

    If ``output_dir/run_name`` is free, use it directly.  Otherwise append an
    incrementing suffix: ``run_name_001``, ``run_name_002``, etc.
    """
    candidate = output_dir / run_name
    if not candidate.exists():
        return candidate

    idx = 1
    while True:
        candidate = output_dir / f"{run_name}_{idx:03d}"
        if not candidate.exists():
            return candidate
        idx += 1


def _write_json(path: Path, data: Any) -> None:
    """Write *data* as pretty-printed JSON to *path*."""
    path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
