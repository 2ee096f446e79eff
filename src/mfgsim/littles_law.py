"""Little's Law check (L = lambda * W) over retired component tokens."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Mapping, Optional, Sequence

import numpy as np

from .component import Component
from .enums import EntityType
from .errors import EmptySampleError

SECONDS_PER_HOUR = 3600.0


@dataclass(frozen=True)
class LittlesLawResult:
    """Arrival rate (per hour), mean system time (hours) and their product."""

    L: float
    arrival_rate: float
    W: float
    little_product: float
    little_error: float
    n_samples: int

    def as_dict(self) -> Mapping[str, float]:
        return asdict(self)


def relative_error(sim_value: float, reference_value: float) -> float:
    """Return |sim-ref| / ref guarding division by zero."""
    if reference_value == 0:
        return 0.0 if sim_value == 0 else float("inf")
    return abs(sim_value - reference_value) / abs(reference_value)


def mean_inter_arrival_time(
    components: Sequence[Component], entity_type: EntityType = EntityType.INSPECTOR
) -> float:
    """Mean gap (seconds) between arrivals of the tokens at `entity_type`."""
    if not components:
        raise EmptySampleError("Mean inter-arrival time of zero components is undefined.")
    return float(np.mean([c.inter_arrival_time(entity_type) for c in components]))


def mean_system_time(
    components: Sequence[Component], entity_type: Optional[EntityType] = None
) -> float:
    """Mean system time (seconds).

    With `entity_type=None` the whole journey through the line is used,
    otherwise only the time spent at that entity type.
    """
    if not components:
        raise EmptySampleError("Mean system time of zero components is undefined.")
    if entity_type is None:
        samples = [c.total_system_time() for c in components]
    else:
        samples = [c.system_time(entity_type) for c in components]
        if any(s is None for s in samples):
            raise ValueError(f"Every component must be retired at {entity_type.value}.")
    return float(np.mean(samples))


def evaluate_littles_law(
    components: Sequence[Component],
    avg_number_in_system: float,
    entity_type: Optional[EntityType] = None,
) -> LittlesLawResult:
    """
    Compare a sampled average occupancy against lambda * W.

    Arrivals are measured where tokens enter: at `entity_type` when given,
    at the inspectors otherwise.

    Raises:
        EmptySampleError: when `components` is empty.
    """
    if not components:
        raise EmptySampleError("Little's Law needs at least one completed component.")

    arrival_type = entity_type if entity_type is not None else EntityType.INSPECTOR
    inter_arrival = mean_inter_arrival_time(components, arrival_type)
    if inter_arrival <= 0:
        raise ValueError("Mean inter-arrival time must be strictly positive.")

    arrival_rate = SECONDS_PER_HOUR / inter_arrival
    W = mean_system_time(components, entity_type) / SECONDS_PER_HOUR
    product = arrival_rate * W
    return LittlesLawResult(
        L=avg_number_in_system,
        arrival_rate=arrival_rate,
        W=W,
        little_product=product,
        little_error=relative_error(product, avg_number_in_system),
        n_samples=len(components),
    )
