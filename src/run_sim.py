"""Command line interface to run replications of the assembly line."""

from __future__ import annotations

import argparse
import logging
import math
from pathlib import Path
from typing import Iterable, List, Tuple

import pandas as pd
from tqdm import trange

try:
    from mfgsim import LineParams, ReplicationResult, run_replication
except ModuleNotFoundError:  # pragma: no cover - fallback when executed as package
    from .mfgsim import LineParams, ReplicationResult, run_replication


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run replicated fixed-increment simulations of the assembly line."
    )
    parser.add_argument("--seed", type=int, default=123, help="Base random seed.")
    parser.add_argument("--replications", type=int, default=5, help="Number of replications.")
    parser.add_argument(
        "--interval", type=float, default=1.0, help="Simulated seconds per clock tick."
    )
    parser.add_argument(
        "--service-times",
        type=int,
        default=300,
        dest="n_service_times",
        help="Service times generated per source.",
    )
    parser.add_argument(
        "--buffer-size", type=int, default=2, help="Capacity of every workbench buffer."
    )
    parser.add_argument(
        "--max-duration",
        type=float,
        default=None,
        help="Optional cap on simulated seconds per replication.",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory with servinsp*.dat / ws*.dat files (minutes, one per line).",
    )
    parser.add_argument(
        "--fit",
        action="store_true",
        dest="fit_from_data",
        help="Draw exponential service times fitted to the --data-dir files.",
    )
    parser.add_argument(
        "--outputs",
        type=Path,
        default=Path("outputs"),
        help="Directory where the CSV files will be written.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log state transitions.")
    return parser.parse_args()


def run_replications(args: argparse.Namespace) -> Iterable[ReplicationResult]:
    """Yield a ReplicationResult for each replication."""
    for rep in trange(args.replications, desc="Simulating", unit="rep"):
        params = LineParams(
            seed=args.seed + rep,
            interval=args.interval,
            n_service_times=args.n_service_times,
            buffer_size=args.buffer_size,
            max_duration=args.max_duration,
            data_dir=args.data_dir,
            fit_from_data=args.fit_from_data,
        )
        yield run_replication(params, replication=rep + 1)


def to_frames(
    results: List[ReplicationResult],
) -> Tuple[pd.DataFrame, pd.DataFrame, pd.DataFrame, pd.DataFrame]:
    runs = pd.DataFrame([r.as_dict() for r in results])
    entities = pd.DataFrame([e.as_dict() for r in results for e in r.entities])
    littles = pd.DataFrame([c.as_dict() for r in results for c in r.littles_law])
    entity_littles = pd.DataFrame([c.as_dict() for r in results for c in r.entity_littles_law])
    return runs, entities, littles, entity_littles


def confidence_row(series: pd.Series) -> dict[str, float]:
    n = len(series)
    mean = float(series.mean())
    std = float(series.std(ddof=1)) if n > 1 else 0.0
    half = 1.96 * std / math.sqrt(n) if n > 1 else 0.0
    rel_half = (half / mean * 100) if mean else 0.0
    return {
        "mean": mean,
        "std": std,
        "ci95_halfwidth": half,
        "ci95_rel_pct": rel_half,
        "replications": n,
    }


def compute_summary(entities: pd.DataFrame) -> pd.DataFrame:
    """Mean and 95% CI of each entity's quantity of interest across replications."""
    if entities.empty:
        return pd.DataFrame()
    rows = []
    for (name, entity_type), group in entities.groupby(["name", "entity_type"], sort=True):
        metric = "idle_pct" if entity_type == "INSPECTOR" else "throughput_per_hour"
        row = {"name": name, "entity_type": entity_type, "metric": metric}
        row.update(confidence_row(group["quantity_of_interest"]))
        row["services_completed_mean"] = float(group["services_completed"].mean())
        rows.append(row)
    return pd.DataFrame(rows)


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.replications < 1:
        raise SystemExit("--replications must be >= 1.")

    results = list(run_replications(args))
    runs, entities, littles, entity_littles = to_frames(results)

    args.outputs.mkdir(parents=True, exist_ok=True)
    entities_path = args.outputs / "entities.csv"
    littles_path = args.outputs / "littles_law.csv"
    entity_littles_path = args.outputs / "entity_littles_law.csv"
    summary_path = args.outputs / "summary.csv"
    entities.to_csv(entities_path, index=False)
    littles.to_csv(littles_path, index=False)
    entity_littles.to_csv(entity_littles_path, index=False)
    summary = compute_summary(entities)
    summary.to_csv(summary_path, index=False)

    print("\nReplications:")
    for _, row in runs.iterrows():
        print(
            f"  #{int(row['replication']):<3} seed={int(row['seed']):<6} "
            f"ticks={int(row['ticks']):>9d} sim_time={row['sim_time']:>11.1f}s "
            f"({row['stop_reason']})"
        )

    if not littles.empty:
        print("\nLittle's Law verification (whole line):")
        for _, row in littles.iterrows():
            print(
                f"  rep {int(row['replication']):<3} [{row['component']}] "
                f"L={row['L']:>7.3f}  lambda={row['arrival_rate']:>7.3f}/h  "
                f"W={row['W']:>7.4f}h  lambda*W={row['little_product']:>7.3f}  "
                f"error={row['little_error'] * 100:>7.2f}%"
            )

    if not entity_littles.empty:
        print("\nLittle's Law verification (per entity):")
        for _, row in entity_littles.iterrows():
            print(
                f"  rep {int(row['replication']):<3} {row['entity']:<11} [{row['component']}] "
                f"L={row['L']:>7.3f}  lambda*W={row['little_product']:>7.3f}  "
                f"error={row['little_error'] * 100:>7.2f}%"
            )

    if not summary.empty:
        print("\nQuantity of interest (mean +/- IC95):")
        for _, row in summary.iterrows():
            print(
                f"  {row['name']:<11} {row['metric']:<20}: {row['mean']:>9.3f} "
                f"+/-{row['ci95_halfwidth']:>8.3f} ({row['ci95_rel_pct']:>6.2f}% of mean)"
            )

    print(f"\nResults saved to {entities_path.resolve()}")
    print(f"Little's Law checks saved to {littles_path.resolve()}")
    print(f"Per-entity Little's Law checks saved to {entity_littles_path.resolve()}")
    print(f"Summary saved to {summary_path.resolve()}")


if __name__ == "__main__":
    main()
