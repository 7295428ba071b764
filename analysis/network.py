"""
Job Categories: Similarity Network Analysis

Links job categories whose male-participation percentages differ by less than
a fixed threshold, computes each category's degree and exact two-hop
neighbor count, and tests both distributions for power-law behavior.

Usage:
  uv run python analysis/network.py [--input male-flight-attendants.tsv]
      [--threshold 10.0] [--unsorted-ks] [--skip-sweep]

Outputs (in results/<dataset>/network/<date>/):
  - data/:   Parquet files (node statistics, power-law fits, threshold sweep)
  - plots/:  PNG visualizations (degree, two-hop, edge weights)
  - run_info.json, run_log.txt
"""

from __future__ import annotations

import argparse
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import networkx as nx
import numpy as np
import polars as pl

from job_gender_network.config import (
    DEFAULT_INPUT_FILE,
    DEFAULT_RESULTS_DIR,
    SIMILARITY_THRESHOLD,
)
from job_gender_network.loader import load_job_categories
from job_gender_network.models import JobCategory

try:
    from analysis.run_context import RunContext
except ModuleNotFoundError:
    from run_context import RunContext  # type: ignore[no-redef]

try:
    from analysis.power_law import (
        analyze_distribution,
        fit_summary_frame,
        print_distribution_analysis,
    )
except ModuleNotFoundError:
    from power_law import (  # type: ignore[no-redef]
        analyze_distribution,
        fit_summary_frame,
        print_distribution_analysis,
    )


# ── Constants ────────────────────────────────────────────────────────────────

THRESHOLD_SENSITIVITY = [2.5, 5.0, 10.0, 15.0, 20.0]
PLOT_SIZE = (8, 6)
PLOT_DPI = 100
MARKER_COLOR = "#E81B23"
MARKER_ALPHA = 0.5

DEGREE_TITLE = "Degree Distribution"
TWO_HOP_TITLE = "Two-Hop Neighbors Distribution"
DEGREE_PLOT_FILE = "degree_distribution.png"
TWO_HOP_PLOT_FILE = "two_hop_distribution.png"

NETWORK_PRIMER = """\
# Similarity Network Analysis

## Purpose

Asks whether job categories that employ similar shares of men form a
scale-free network: a few categories similar to very many others, most
similar to few.

## Method

### Network Construction
- **Nodes:** One per input row, keyed by row number (duplicate names stay
  separate nodes), with `name` and `male_percentage` attributes.
- **Edges:** |difference in male percentage| < threshold (default 10.0).
  Weight = that difference. Every unordered pair is compared once.

### Node Statistics
- **Degree:** Number of directly similar categories.
- **Two-hop count:** Number of categories at shortest-path distance exactly
  2 (breadth-first search from every node; exact, not sampled).

### Power-Law Fit
- Zero counts are dropped and the rest are log-transformed.
- alpha = 1 + n / (sum - n * ln(x_min)) on the log values; x_min is the
  smallest log value (reported as exp(x_min)).
- Kolmogorov-Smirnov statistic against 1 - (x / x_min)^(1 - alpha).
  KS < 0.05 close fit, < 0.1 moderate, otherwise weak.

## Outputs

| File | Contents |
|------|----------|
| `node_statistics.parquet` | Degree and two-hop count per category |
| `power_law_fits.parquet` | Summary statistics and fit per distribution |
| `threshold_sweep.parquet` | Network size at each similarity threshold |
| `degree_distribution.png` | Log-log degree vs rank |
| `two_hop_distribution.png` | Log-log two-hop count vs rank |
| `edge_weights.png` | Histogram of similarity edge weights |

## Caveats

- The estimator is applied to already-logged values, so alpha is a relative
  score, not the textbook exponent.
- A count of 1 gives a log value of 0, which forces alpha = 1 and KS = 1.
- A threshold graph on a single scalar is close to an interval graph;
  heavy tails are not expected.
"""


# ── Helpers ──────────────────────────────────────────────────────────────────


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Job Category Similarity Network Analysis")
    parser.add_argument(
        "--input",
        type=Path,
        default=DEFAULT_INPUT_FILE,
        help=f"Job category table (default: {DEFAULT_INPUT_FILE})",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=SIMILARITY_THRESHOLD,
        help=(
            "Max percentage-point difference for an edge, exclusive "
            f"(default: {SIMILARITY_THRESHOLD})"
        ),
    )
    parser.add_argument(
        "--results-dir",
        type=Path,
        default=DEFAULT_RESULTS_DIR,
        help=f"Root of the results tree (default: {DEFAULT_RESULTS_DIR})",
    )
    parser.add_argument(
        "--unsorted-ks",
        action="store_true",
        help="Rank log values in input order for the KS statistic instead of sorting them",
    )
    parser.add_argument(
        "--skip-sweep",
        action="store_true",
        help="Skip the similarity threshold sensitivity sweep",
    )
    return parser.parse_args(argv)


def print_header(title: str) -> None:
    width = 80
    print(f"\n{'=' * width}")
    print(f"  {title}")
    print(f"{'=' * width}")


def save_fig(fig: plt.Figure, path: Path, dpi: int = PLOT_DPI) -> None:
    """Save at the figure's own size (PLOT_SIZE at PLOT_DPI is 800x600 px)."""
    fig.tight_layout()
    fig.savefig(path, dpi=dpi, facecolor="white")
    plt.close(fig)


# ── Network Construction ─────────────────────────────────────────────────────


def build_similarity_network(
    records: list[JobCategory],
    threshold: float = SIMILARITY_THRESHOLD,
    verbose: bool = True,
) -> nx.Graph:
    """Build an undirected weighted graph over job categories.

    Nodes: row index 0..n-1 in input order, with 'name' and 'male_percentage'.
    Edges: |p_i - p_j| < threshold; weight = |p_i - p_j|. No self-loops.
    """
    G = nx.Graph()
    for i, record in enumerate(records):
        G.add_node(i, name=record.name, male_percentage=record.male_percentage)

    n = len(records)
    for i in range(n):
        for j in range(i + 1, n):
            diff = abs(records[i].male_percentage - records[j].male_percentage)
            if not diff < threshold:  # also drops NaN percentages
                continue
            G.add_edge(i, j, weight=diff)

    if verbose:
        print(
            f"  Graph created with {G.number_of_nodes()} nodes "
            f"and {G.number_of_edges()} edges."
        )
    return G


def compute_network_summary(G: nx.Graph) -> dict:
    """Compute summary statistics for a network graph."""
    n_nodes = G.number_of_nodes()
    n_edges = G.number_of_edges()

    avg_clustering = nx.average_clustering(G) if n_edges > 0 else 0.0

    return {
        "n_nodes": n_nodes,
        "n_edges": n_edges,
        "density": round(nx.density(G), 4),
        "mean_degree": round(2 * n_edges / n_nodes, 4) if n_nodes else 0.0,
        "n_components": nx.number_connected_components(G),
        "n_isolated": nx.number_of_isolates(G),
        "avg_clustering": round(avg_clustering, 4),
    }


# ── Node Distributions ───────────────────────────────────────────────────────


def compute_degrees(G: nx.Graph) -> list[int]:
    """Neighbor count per node, in node order. Edge weights are ignored."""
    return [G.degree(n) for n in G.nodes()]


def compute_two_hop_counts(G: nx.Graph) -> list[int]:
    """Number of nodes at shortest-path distance exactly 2, per node.

    Unweighted breadth-first search from every node; unreachable nodes are
    never counted.
    """
    counts = []
    for n in G.nodes():
        distances = nx.single_source_shortest_path_length(G, n, cutoff=2)
        counts.append(sum(1 for d in distances.values() if d == 2))
    return counts


def build_node_statistics(
    G: nx.Graph,
    degrees: list[int],
    two_hop: list[int],
) -> pl.DataFrame:
    """Per-category table of both distributions, in node order."""
    rows = []
    for (n, attrs), degree, hops in zip(G.nodes(data=True), degrees, two_hop):
        rows.append(
            {
                "node_id": n,
                "name": attrs["name"],
                "male_percentage": attrs["male_percentage"],
                "degree": degree,
                "two_hop": hops,
            }
        )
    return pl.DataFrame(
        rows,
        schema={
            "node_id": pl.Int64,
            "name": pl.Utf8,
            "male_percentage": pl.Float64,
            "degree": pl.Int64,
            "two_hop": pl.Int64,
        },
    )


def run_threshold_sweep(
    records: list[JobCategory],
    thresholds: list[float] | None = None,
) -> pl.DataFrame:
    """Rebuild the network at each threshold and record its size."""
    if thresholds is None:
        thresholds = THRESHOLD_SENSITIVITY

    rows = []
    for t in thresholds:
        G = build_similarity_network(records, threshold=t, verbose=False)
        summary = compute_network_summary(G)
        degrees = compute_degrees(G)
        rows.append(
            {
                "threshold": float(t),
                "n_edges": summary["n_edges"],
                "density": summary["density"],
                "mean_degree": summary["mean_degree"],
                "max_degree": max(degrees, default=0),
                "n_components": summary["n_components"],
            }
        )
    return pl.DataFrame(
        rows,
        schema={
            "threshold": pl.Float64,
            "n_edges": pl.Int64,
            "density": pl.Float64,
            "mean_degree": pl.Float64,
            "max_degree": pl.Int64,
            "n_components": pl.Int64,
        },
    )


# ── Plots ────────────────────────────────────────────────────────────────────


def plot_distribution(title: str, data: list[int], out_path: Path) -> None:
    """Log-log scatter of each node's count (x) against its rank (y = index + 1).

    Zero counts cannot be placed on a log axis and are left out.
    """
    counts = np.asarray(data, dtype=float)
    ranks = np.arange(1, counts.size + 1, dtype=float)
    mask = counts > 0

    fig, ax = plt.subplots(1, 1, figsize=PLOT_SIZE)

    if mask.any():
        ax.scatter(
            counts[mask],
            ranks[mask],
            s=12,
            color=MARKER_COLOR,
            alpha=MARKER_ALPHA,
            label=f"Categories ({int(mask.sum())})",
        )
        ax.set_xscale("log")
        ax.set_yscale("log")
        ax.legend(fontsize=9)
    else:
        ax.text(
            0.5,
            0.5,
            "No positive values to plot",
            ha="center",
            va="center",
            transform=ax.transAxes,
        )

    ax.set_xlabel("Count", fontsize=11)
    ax.set_ylabel("Rank", fontsize=11)
    ax.set_title(title, fontsize=13, fontweight="bold")
    ax.grid(True, which="both", alpha=0.3)

    save_fig(fig, out_path)


def plot_edge_weight_distribution(
    G: nx.Graph,
    threshold: float,
    out_path: Path,
) -> None:
    """Histogram of similarity edge weights (percentage-point differences)."""
    weights = [d["weight"] for _, _, d in G.edges(data=True)]

    fig, ax = plt.subplots(1, 1, figsize=PLOT_SIZE)

    if weights:
        bins = np.linspace(0.0, threshold, 21)
        ax.hist(
            weights,
            bins=bins,
            alpha=0.6,
            color="#888888",
            label=f"Edges ({len(weights)})",
            edgecolor="white",
        )
        ax.legend(fontsize=9)
    else:
        ax.text(0.5, 0.5, "No edges", ha="center", va="center", transform=ax.transAxes)

    ax.set_xlabel("Difference in Male Percentage (Edge Weight)", fontsize=11)
    ax.set_ylabel("Count", fontsize=11)
    ax.set_title("Edge Weight Distribution", fontsize=13, fontweight="bold")
    ax.grid(True, alpha=0.3)

    save_fig(fig, out_path)


# ── Main ─────────────────────────────────────────────────────────────────────


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    with RunContext(
        dataset=args.input.name,
        analysis_name="network",
        params=vars(args),
        results_root=args.results_dir,
        primer=NETWORK_PRIMER,
    ) as ctx:
        print(f"Job Category Similarity Network: {args.input}")
        print(f"Output:      {ctx.run_dir}")
        print(f"Threshold:   {args.threshold}")
        print(f"KS ranking:  {'input order' if args.unsorted_ks else 'sorted'}")

        # ── Phase 1: Load data ──
        print_header("PHASE 1: LOADING DATA")
        records = load_job_categories(args.input)
        print(f"  Job categories: {len(records)}")

        # ── Phase 2: Build network ──
        print_header("PHASE 2: NETWORK CONSTRUCTION")
        G = build_similarity_network(records, threshold=args.threshold)
        summary = compute_network_summary(G)
        print(f"  Density: {summary['density']}")
        print(f"  Mean degree: {summary['mean_degree']}")
        print(f"  Components: {summary['n_components']}")
        print(f"  Isolated categories: {summary['n_isolated']}")
        print(f"  Avg clustering coeff: {summary['avg_clustering']}")

        plot_edge_weight_distribution(G, args.threshold, ctx.plots_dir / "edge_weights.png")
        print("  Saved: edge_weights.png")

        # ── Phase 3: Node distributions ──
        print_header("PHASE 3: NODE DISTRIBUTIONS")
        degrees = compute_degrees(G)
        two_hop = compute_two_hop_counts(G)
        node_stats = build_node_statistics(G, degrees, two_hop)
        node_stats.write_parquet(ctx.data_dir / "node_statistics.parquet")
        print("  Saved: node_statistics.parquet")

        if node_stats.height > 0:
            top5 = node_stats.sort("degree", descending=True).head(5)
            print("  Top 5 by degree:")
            for row in top5.iter_rows(named=True):
                print(
                    f"    {row['name']}: degree={row['degree']}, "
                    f"two_hop={row['two_hop']}, male={row['male_percentage']:.1f}%"
                )

        # ── Phase 4: Power-law analysis ──
        print_header("PHASE 4: POWER-LAW ANALYSIS")
        analyses = []
        for title, sample in [(DEGREE_TITLE, degrees), (TWO_HOP_TITLE, two_hop)]:
            analysis = analyze_distribution(title, sample, sort_ks=not args.unsorted_ks)
            print_distribution_analysis(analysis)
            analyses.append(analysis)

        fit_summary_frame(analyses).write_parquet(ctx.data_dir / "power_law_fits.parquet")
        print("  Saved: power_law_fits.parquet")

        # ── Phase 5: Plots ──
        print_header("PHASE 5: DISTRIBUTION PLOTS")
        plot_distribution(DEGREE_TITLE, degrees, ctx.plots_dir / DEGREE_PLOT_FILE)
        print(f"  Saved: {DEGREE_PLOT_FILE}")
        plot_distribution(TWO_HOP_TITLE, two_hop, ctx.plots_dir / TWO_HOP_PLOT_FILE)
        print(f"  Saved: {TWO_HOP_PLOT_FILE}")

        # ── Phase 6: Threshold sensitivity ──
        if not args.skip_sweep:
            print_header("PHASE 6: THRESHOLD SENSITIVITY")
            sweep = run_threshold_sweep(records)
            sweep.write_parquet(ctx.data_dir / "threshold_sweep.parquet")
            for row in sweep.iter_rows(named=True):
                print(
                    f"  threshold={row['threshold']:5.1f}  edges={row['n_edges']:6d}  "
                    f"density={row['density']:.4f}  max_degree={row['max_degree']}"
                )
            print("  Saved: threshold_sweep.parquet")


if __name__ == "__main__":
    main()
