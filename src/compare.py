"""Batch comparison of the line across workbench buffer sizes."""

from __future__ import annotations

import argparse
import logging
import math
from pathlib import Path
from typing import Iterable, List

import matplotlib.pyplot as plt
import pandas as pd
from tqdm import trange

try:
    from mfgsim import LineParams, run_replication
except ModuleNotFoundError:  # pragma: no cover
    from .mfgsim import LineParams, run_replication


def parse_buffer_list(spec: str) -> List[int]:
    values = []
    for chunk in spec.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        try:
            size = int(chunk)
        except ValueError as exc:
            raise argparse.ArgumentTypeError(f"Invalid buffer size '{chunk}'.") from exc
        if size < 1:
            raise argparse.ArgumentTypeError("Every buffer size must be >= 1.")
        values.append(size)
    if not values:
        raise argparse.ArgumentTypeError("Provide at least one size via --buffer-list.")
    return sorted(set(values))


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compare line performance across buffer sizes.")
    parser.add_argument(
        "--buffer-list",
        type=str,
        default="1,2,3,4",
        help='Comma-separated list of buffer sizes to evaluate (e.g. "1,2,3,4").',
    )
    parser.add_argument("--seed", type=int, default=123, help="Base random seed.")
    parser.add_argument("--interval", type=float, default=1.0, help="Seconds per tick.")
    parser.add_argument(
        "--service-times",
        type=int,
        default=300,
        dest="n_service_times",
        help="Service times generated per source.",
    )
    parser.add_argument("--replications", type=int, default=10, help="Replications per size.")
    parser.add_argument(
        "--results-out",
        type=Path,
        default=Path("outputs/compare_results.csv"),
        help="CSV where per-replication entity results will be stored.",
    )
    parser.add_argument(
        "--summary-out",
        type=Path,
        default=Path("outputs/compare_summary.csv"),
        help="CSV with aggregated statistics per buffer size.",
    )
    parser.add_argument(
        "--reports-dir",
        type=Path,
        default=Path("reports"),
        help="Directory where comparison figures will be written.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log replication progress.")
    return parser.parse_args()


def run_replications_for_size(size: int, args: argparse.Namespace) -> Iterable[dict]:
    for rep in trange(args.replications, desc=f"buffer={size}", unit="rep"):
        params = LineParams(
            seed=args.seed + rep,
            interval=args.interval,
            n_service_times=args.n_service_times,
            buffer_size=size,
        )
        result = run_replication(params, replication=rep + 1)
        for record in result.entities:
            payload = record.as_dict()
            payload["buffer_size"] = size
            payload["sim_time"] = result.sim_time
            yield payload


def summarize_by_size(df: pd.DataFrame) -> pd.DataFrame:
    rows = []
    for (size, name), group in df.groupby(["buffer_size", "name"]):
        series = group["quantity_of_interest"]
        mean = float(series.mean())
        std = float(series.std(ddof=1)) if len(series) > 1 else 0.0
        half = 1.96 * std / math.sqrt(len(series)) if len(series) > 1 else 0.0
        rows.append(
            {
                "buffer_size": int(size),
                "name": name,
                "entity_type": group["entity_type"].iloc[0],
                "replications": len(group),
                "qoi_mean": mean,
                "qoi_ci95": half,
                "services_completed_mean": float(group["services_completed"].mean()),
            }
        )
    return pd.DataFrame(rows).sort_values(["entity_type", "name", "buffer_size"])


def plot_qoi_vs_size(
    summary: pd.DataFrame, entity_type: str, ylabel: str, title: str, out: Path
) -> None:
    subset = summary[summary["entity_type"] == entity_type]
    if subset.empty:
        return
    fig, ax = plt.subplots(figsize=(8, 4))
    for name, group in subset.groupby("name"):
        ax.errorbar(
            group["buffer_size"],
            group["qoi_mean"],
            yerr=group["qoi_ci95"],
            marker="o",
            capsize=4,
            label=name,
        )
    ax.set_xlabel("Buffer size")
    ax.set_ylabel(ylabel)
    ax.set_title(title)
    ax.legend()
    fig.tight_layout()
    fig.savefig(out, dpi=150)
    plt.close(fig)


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    sizes = parse_buffer_list(args.buffer_list)

    all_results = []
    for size in sizes:
        all_results.extend(run_replications_for_size(size, args))

    if not all_results:
        raise SystemExit("No results were produced; check the parameters.")

    args.results_out.parent.mkdir(parents=True, exist_ok=True)
    args.summary_out.parent.mkdir(parents=True, exist_ok=True)

    results_df = pd.DataFrame(all_results)
    results_df.to_csv(args.results_out, index=False)

    summary_df = summarize_by_size(results_df)
    summary_df.to_csv(args.summary_out, index=False)

    args.reports_dir.mkdir(parents=True, exist_ok=True)
    plot_qoi_vs_size(
        summary_df,
        "WORKBENCH",
        "Products per hour",
        "Workbench throughput vs. buffer size (IC95)",
        args.reports_dir / "throughput_vs_buffer.png",
    )
    plot_qoi_vs_size(
        summary_df,
        "INSPECTOR",
        "Idle time (%)",
        "Inspector idle time vs. buffer size (IC95)",
        args.reports_dir / "idle_vs_buffer.png",
    )

    print(f"Per-replication results: {args.results_out.resolve()}")
    print(f"Comparison summary: {args.summary_out.resolve()}")
    print(f"Figures saved to {args.reports_dir.resolve()}")


if __name__ == "__main__":
    main()
