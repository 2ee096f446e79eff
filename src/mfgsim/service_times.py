"""Pre-generated service-time sequences (seconds)."""

from __future__ import annotations

from pathlib import Path
from typing import List

import numpy as np

from .errors import EmptySampleError

SECONDS_PER_MINUTE = 60.0


def exponential_times(rng: np.random.Generator, n: int, rate: float) -> List[float]:
    """Draw `n` exponential service times for a rate given per minute."""
    if n < 0:
        raise ValueError("Number of service times must be non-negative.")
    if rate <= 0:
        raise ValueError("Service rate must be strictly positive.")
    draws = rng.exponential(1.0 / rate, size=n) * SECONDS_PER_MINUTE
    return draws.tolist()


def read_service_time_file(path: Path) -> List[float]:
    """Read one service time per line (minutes) and return them in seconds."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Service time file not found: {path}")
    if not path.read_text(encoding="utf-8").strip():
        return []
    values = np.loadtxt(path, dtype=float, ndmin=1)
    return (values * SECONDS_PER_MINUTE).tolist()


def fitted_exponential_times(path: Path, n: int, rng: np.random.Generator) -> List[float]:
    """Fit an exponential rate to a data file and draw `n` fresh service times."""
    observed = read_service_time_file(path)
    if not observed:
        raise EmptySampleError(f"No service times in {path}.")
    mean_minutes = float(np.mean(observed)) / SECONDS_PER_MINUTE
    if mean_minutes <= 0:
        raise ValueError(f"Mean service time in {path} must be strictly positive.")
    return exponential_times(rng, n, rate=1.0 / mean_minutes)
