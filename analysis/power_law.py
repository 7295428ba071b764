"""
Power-law analysis of per-node count distributions.

Summarizes a distribution (mean, population standard deviation, min, max),
fits a power-law exponent to its log-transformed positive values, and scores
the fit with a Kolmogorov-Smirnov statistic.

The estimator is the continuous power-law MLE

    alpha = 1 + n / (sum(x) - n * ln(x_min))

applied to data that has *already* been log-transformed, so x_min is the
smallest log-value and ln(x_min) takes a second logarithm. This is not the
textbook estimator on raw counts; it is kept as the reference convention for
these reports and its output should be read as a relative score only.

Used by analysis/network.py; no command-line entry point of its own.
"""

from __future__ import annotations

import math
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

import numpy as np
import polars as pl

# ── Constants ────────────────────────────────────────────────────────────────

KS_CLOSE_FIT = 0.05
KS_MODERATE_FIT = 0.1

STATUS_NO_DATA = "no_data"
STATUS_NON_FINITE_MEAN = "non_finite_mean"
STATUS_INSUFFICIENT_DATA = "insufficient_data"
STATUS_DEGENERATE_FIT = "degenerate_fit"
STATUS_FITTED = "fitted"


class FitQuality(Enum):
    """Qualitative reading of a KS statistic against the fixed cutoffs."""

    CLOSE = "closely follows a power-law"
    MODERATE = "moderately follows a power-law"
    WEAK = "does not strongly follow a power-law"


@dataclass(frozen=True)
class DistributionSummary:
    count: int
    mean: float
    std_dev: float
    minimum: float
    maximum: float


@dataclass(frozen=True)
class PowerLawFit:
    """Fitted exponent and cutoff. x_min is in log space; ks_statistic is None
    when the fit is degenerate."""

    alpha: float
    x_min: float
    ks_statistic: float | None = None

    @property
    def x_min_raw(self) -> float:
        """Cutoff on the original count scale."""
        return math.exp(self.x_min) if math.isfinite(self.x_min) else math.nan

    @property
    def is_defined(self) -> bool:
        return math.isfinite(self.alpha) and not math.isnan(self.x_min)


@dataclass(frozen=True)
class DistributionAnalysis:
    """Outcome of analyze_distribution(); status names the last guard reached."""

    name: str
    status: str
    summary: DistributionSummary | None = None
    fit: PowerLawFit | None = None
    quality: FitQuality | None = None


# ── Statistics ───────────────────────────────────────────────────────────────


def summarize_distribution(sample: Sequence[float]) -> DistributionSummary | None:
    """Mean, population standard deviation, min and max of a raw sample.

    Returns None for an empty sample.
    """
    if len(sample) == 0:
        return None
    values = np.asarray(sample, dtype=float)
    with np.errstate(invalid="ignore", over="ignore"):
        mean = float(values.mean())
        std_dev = float(values.std())
    minimum = min(sample)
    maximum = max(sample)
    return DistributionSummary(
        count=len(sample),
        mean=mean,
        std_dev=std_dev,
        minimum=minimum,
        maximum=maximum,
    )


def log_transform(sample: Sequence[float]) -> np.ndarray:
    """Natural log of the strictly positive values, in their original order."""
    values = np.asarray(sample, dtype=float)
    return np.log(values[values > 0])


def estimate_power_law_parameters(log_data: Sequence[float] | np.ndarray) -> tuple[float, float]:
    """Estimate (alpha, x_min) from log-transformed data.

    Fewer than two values give (nan, nan). A minimum log-value of 0 (a raw
    count of 1) makes ln(x_min) = -inf and drives alpha to exactly 1.
    """
    data = np.asarray(log_data, dtype=float)
    n = data.size
    if n <= 1:
        return math.nan, math.nan

    x_min = float(data.min())
    total = float(data.sum())
    with np.errstate(divide="ignore", invalid="ignore"):
        alpha = 1.0 + n / (total - n * np.log(x_min))
    return float(alpha), x_min


def ks_statistic(
    log_data: Sequence[float] | np.ndarray,
    alpha: float,
    x_min: float,
    sort: bool = True,
) -> float:
    """Maximum |theoretical CDF - empirical CDF| over the values >= x_min.

    Empirical CDF at position i is (i + 1) / m, so the values must be in
    ascending order for it to be meaningful. With sort=False the values keep
    their input order, which reproduces the historical unsorted reports.
    Positions where the theoretical CDF is undefined are skipped; an empty
    tail scores 0.
    """
    data = np.asarray(log_data, dtype=float)
    tail = data[data >= x_min]
    if sort:
        tail = np.sort(tail)
    m = tail.size
    if m == 0:
        return 0.0

    with np.errstate(divide="ignore", invalid="ignore"):
        theoretical = 1.0 - np.power(tail / x_min, 1.0 - alpha)
    empirical = np.arange(1, m + 1, dtype=float) / m
    return float(np.fmax.reduce(np.abs(theoretical - empirical), initial=0.0))


def classify_fit(statistic: float) -> FitQuality:
    if statistic < KS_CLOSE_FIT:
        return FitQuality.CLOSE
    if statistic < KS_MODERATE_FIT:
        return FitQuality.MODERATE
    return FitQuality.WEAK


def analyze_distribution(
    name: str,
    sample: Sequence[float],
    sort_ks: bool = True,
) -> DistributionAnalysis:
    """Summarize a distribution and fit a power law to it.

    Each precondition failure stops the analysis early and is recorded in
    the returned status; nothing here raises on degenerate data.
    """
    summary = summarize_distribution(sample)
    if summary is None:
        return DistributionAnalysis(name=name, status=STATUS_NO_DATA)

    if not math.isfinite(summary.mean):
        return DistributionAnalysis(name=name, status=STATUS_NON_FINITE_MEAN, summary=summary)

    log_data = log_transform(sample)
    if log_data.size == 0:
        return DistributionAnalysis(name=name, status=STATUS_INSUFFICIENT_DATA, summary=summary)

    alpha, x_min = estimate_power_law_parameters(log_data)
    fit = PowerLawFit(alpha=alpha, x_min=x_min)
    if not fit.is_defined:
        return DistributionAnalysis(
            name=name, status=STATUS_DEGENERATE_FIT, summary=summary, fit=fit
        )

    statistic = ks_statistic(log_data, alpha, x_min, sort=sort_ks)
    return DistributionAnalysis(
        name=name,
        status=STATUS_FITTED,
        summary=summary,
        fit=PowerLawFit(alpha=alpha, x_min=x_min, ks_statistic=statistic),
        quality=classify_fit(statistic),
    )


# ── Reporting ────────────────────────────────────────────────────────────────


def _format_number(value: float, digits: int = 2) -> str:
    return f"{value:.{digits}f}" if math.isfinite(value) else "undefined"


def print_distribution_analysis(analysis: DistributionAnalysis) -> None:
    """Console report for one distribution."""
    if analysis.status == STATUS_NO_DATA:
        print(f"  No data available for {analysis.name}")
        return

    if analysis.status == STATUS_NON_FINITE_MEAN:
        print(
            f"  WARNING: mean of {analysis.name} is NaN or infinite; skipping analysis",
            file=sys.stderr,
        )
        return

    summary = analysis.summary
    print(f"  {analysis.name} Analysis:")
    print(f"    Mean: {summary.mean:.2f}")
    print(f"    Standard Deviation: {summary.std_dev:.2f}")
    print(f"    Minimum: {summary.minimum}")
    print(f"    Maximum: {summary.maximum}")

    if analysis.status == STATUS_INSUFFICIENT_DATA:
        print("    Insufficient data for power-law analysis")
        return

    fit = analysis.fit
    print("    Estimated Power Law Parameters:")
    print(f"      α: {_format_number(fit.alpha)}")
    print(f"      x_min: {_format_number(fit.x_min_raw)}")

    if analysis.status == STATUS_DEGENERATE_FIT:
        print("    Power-law fit undefined (fewer than two positive values)")
        return

    print(f"    Kolmogorov-Smirnov Statistic: {fit.ks_statistic:.4f}")
    if analysis.quality is FitQuality.CLOSE:
        cutoff = f"KS < {KS_CLOSE_FIT}"
    elif analysis.quality is FitQuality.MODERATE:
        cutoff = f"{KS_CLOSE_FIT} ≤ KS < {KS_MODERATE_FIT}"
    else:
        cutoff = f"KS ≥ {KS_MODERATE_FIT}"
    print(f"    The distribution {analysis.quality.value} ({cutoff})")


def fit_summary_frame(analyses: list[DistributionAnalysis]) -> pl.DataFrame:
    """One row per analyzed distribution, with nulls where a stage was skipped."""
    rows = []
    for a in analyses:
        s = a.summary
        fit = a.fit if a.fit is not None and a.fit.is_defined else None
        rows.append(
            {
                "distribution": a.name,
                "status": a.status,
                "count": s.count if s else 0,
                "mean": s.mean if s and math.isfinite(s.mean) else None,
                "std_dev": s.std_dev if s and math.isfinite(s.std_dev) else None,
                "minimum": float(s.minimum) if s else None,
                "maximum": float(s.maximum) if s else None,
                "alpha": fit.alpha if fit else None,
                "x_min": fit.x_min_raw if fit else None,
                "ks_statistic": fit.ks_statistic if fit else None,
                "quality": a.quality.name.lower() if a.quality else None,
            }
        )
    return pl.DataFrame(
        rows,
        schema={
            "distribution": pl.Utf8,
            "status": pl.Utf8,
            "count": pl.Int64,
            "mean": pl.Float64,
            "std_dev": pl.Float64,
            "minimum": pl.Float64,
            "maximum": pl.Float64,
            "alpha": pl.Float64,
            "x_min": pl.Float64,
            "ks_statistic": pl.Float64,
            "quality": pl.Utf8,
        },
    )
