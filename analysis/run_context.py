"""Structured output directory and console capture for one analysis run.

Layout under the results root:

  <dataset>/<analysis>/README.md          primer, rewritten every run
  <dataset>/<analysis>/<date>/plots/      PNG figures
  <dataset>/<analysis>/<date>/data/       parquet tables
  <dataset>/<analysis>/<date>/run_log.txt everything printed during the run,
                                          stdout and stderr (warnings) interleaved
  <dataset>/<analysis>/<date>/run_info.json
  <dataset>/<analysis>/latest -> <date>   only moved on success

Usage:
    with RunContext("male-flight-attendants.tsv", "network", params=vars(args)) as ctx:
        node_stats.write_parquet(ctx.data_dir / "node_statistics.parquet")
        save_fig(fig, ctx.plots_dir / "degree_distribution.png")
"""

from __future__ import annotations

import io
import json
import re
import subprocess
import sys
from datetime import datetime, timezone
from pathlib import Path
from types import TracebackType
from typing import TextIO


class _LogTee:
    """Forwards writes to a console stream and appends them to a shared log."""

    def __init__(self, console: TextIO, log: io.StringIO) -> None:
        self._console = console
        self._log = log

    def write(self, data: str) -> int:
        self._console.write(data)
        self._log.write(data)
        return len(data)

    def flush(self) -> None:
        self._console.flush()


def _normalize_dataset(dataset: str) -> str:
    """Convert an input file name or path to a results directory name.

    Examples:
        "male-flight-attendants.tsv"        -> "male-flight-attendants"
        "data/Male Flight Attendants.txt"   -> "male_flight_attendants"
        "jobs_2024"                         -> "jobs_2024"
    """
    stem = Path(dataset).stem or dataset
    stem = stem.strip().lower()
    return re.sub(r"[^a-z0-9_-]+", "_", stem).strip("_") or "dataset"


def _git_commit_hash() -> str:
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"], capture_output=True, text=True, timeout=5
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return "unknown"
    return result.stdout.strip() if result.returncode == 0 else "unknown"


class RunContext:
    """Context manager that owns one dated run directory.

    Attributes:
        dataset: Normalized dataset name (e.g. "male-flight-attendants").
        analysis_name: Name of the analysis (e.g. "network").
        params: Script parameters recorded in run_info.json.
        run_dir, plots_dir, data_dir: Output directories, created on entry.
    """

    def __init__(
        self,
        dataset: str,
        analysis_name: str,
        params: dict | None = None,
        results_root: Path | None = None,
        primer: str | None = None,
    ) -> None:
        self.dataset = _normalize_dataset(dataset)
        self.analysis_name = analysis_name
        self.params = params or {}
        self.run_date = datetime.now(timezone.utc).strftime("%Y-%m-%d")

        self.analysis_dir = (results_root or Path("results")) / self.dataset / analysis_name
        self.run_dir = self.analysis_dir / self.run_date
        self.plots_dir = self.run_dir / "plots"
        self.data_dir = self.run_dir / "data"

        self._primer = primer
        self._log = io.StringIO()
        self._saved_streams: tuple[TextIO, TextIO] | None = None
        self._started: datetime | None = None

    def __enter__(self) -> RunContext:
        for d in (self.plots_dir, self.data_dir):
            d.mkdir(parents=True, exist_ok=True)
        if self._primer:
            (self.analysis_dir / "README.md").write_text(self._primer, encoding="utf-8")

        self._saved_streams = (sys.stdout, sys.stderr)
        sys.stdout = _LogTee(sys.stdout, self._log)  # type: ignore[assignment]
        sys.stderr = _LogTee(sys.stderr, self._log)  # type: ignore[assignment]
        self._started = datetime.now(timezone.utc)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._saved_streams is not None:
            sys.stdout, sys.stderr = self._saved_streams
            self._saved_streams = None

        failed = exc_type is not None
        (self.run_dir / "run_log.txt").write_text(self._log.getvalue(), encoding="utf-8")
        self._write_run_info(failed)
        if not failed:
            self._point_latest_here()

    def _write_run_info(self, failed: bool) -> None:
        run_info = {
            "analysis": self.analysis_name,
            "dataset": self.dataset,
            "run_date": self.run_date,
            "timestamp_start": self._started.isoformat() if self._started else None,
            "timestamp_end": datetime.now(timezone.utc).isoformat(),
            "status": "failed" if failed else "completed",
            "git_commit": _git_commit_hash(),
            "python_version": sys.version,
            "params": self.params,
        }
        with open(self.run_dir / "run_info.json", "w") as f:
            json.dump(run_info, f, indent=2, default=str)

    def _point_latest_here(self) -> None:
        latest = self.analysis_dir / "latest"
        if latest.is_symlink() or latest.exists():
            latest.unlink()
        latest.symlink_to(self.run_date)  # relative, so the tree can be moved
