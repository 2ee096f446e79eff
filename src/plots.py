"""Utility to generate figures from the run_sim outputs."""

from __future__ import annotations

import argparse
import math
from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate plots from simulation results.")
    parser.add_argument(
        "--outputs",
        type=Path,
        default=Path("outputs"),
        help="Directory holding entities.csv and littles_law.csv from src.run_sim.",
    )
    parser.add_argument(
        "--reports-dir",
        type=Path,
        default=Path("reports"),
        help="Directory where PNG files will be saved.",
    )
    return parser.parse_args()


def load_csv(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"Results file not found: {path}")
    df = pd.read_csv(path)
    if df.empty:
        raise ValueError(f"{path.name} is empty. Run the simulation first.")
    return df


def ci95(series: pd.Series) -> float:
    if len(series) < 2:
        return 0.0
    return 1.96 * float(series.std(ddof=1)) / math.sqrt(len(series))


def plot_quantity_of_interest(entities: pd.DataFrame, entity_type: str, ylabel: str, out: Path) -> None:
    subset = entities[entities["entity_type"] == entity_type]
    if subset.empty:
        return
    grouped = subset.groupby("name")["quantity_of_interest"]
    names = list(grouped.groups.keys())
    means = [float(grouped.get_group(n).mean()) for n in names]
    errors = [ci95(grouped.get_group(n)) for n in names]

    fig, ax = plt.subplots(figsize=(8, 4))
    ax.bar(names, means, yerr=errors, capsize=5, color="#4c72b0")
    ax.set_ylabel(ylabel)
    ax.set_title(f"{ylabel} per {entity_type.lower()} (IC95)")
    fig.tight_layout()
    fig.savefig(out, dpi=150)
    plt.close(fig)


def plot_littles_law(littles: pd.DataFrame, out: Path) -> None:
    fig, ax = plt.subplots(figsize=(6, 6))
    for component, group in littles.groupby("component"):
        ax.scatter(group["L"], group["little_product"], label=component)
    upper = float(max(littles["L"].max(), littles["little_product"].max())) * 1.1
    ax.plot([0, upper], [0, upper], linestyle="--", color="gray", label="L = lambda W")
    ax.set_xlabel("Sampled L")
    ax.set_ylabel("lambda * W")
    ax.set_title("Little's Law check per replication")
    ax.legend()
    fig.tight_layout()
    fig.savefig(out, dpi=150)
    plt.close(fig)


def plot_replication_series(entities: pd.DataFrame, out: Path) -> None:
    fig, ax = plt.subplots(figsize=(8, 4))
    for name, group in entities.groupby("name"):
        ax.plot(group["replication"], group["services_completed"], marker="o", label=name)
    ax.set_xlabel("Replication")
    ax.set_ylabel("Services completed")
    ax.set_title("Services completed per replication")
    ax.legend()
    fig.tight_layout()
    fig.savefig(out, dpi=150)
    plt.close(fig)


def main() -> None:
    args = parse_args()
    entities = load_csv(args.outputs / "entities.csv")
    littles = load_csv(args.outputs / "littles_law.csv")

    args.reports_dir.mkdir(parents=True, exist_ok=True)

    plot_quantity_of_interest(
        entities, "WORKBENCH", "Products per hour", args.reports_dir / "throughput.png"
    )
    plot_quantity_of_interest(
        entities, "INSPECTOR", "Idle time (%)", args.reports_dir / "idle.png"
    )
    plot_littles_law(littles, args.reports_dir / "littles_law.png")
    plot_replication_series(entities, args.reports_dir / "services_completed.png")

    print(f"Figures saved to {args.reports_dir.resolve()}")


if __name__ == "__main__":
    main()
