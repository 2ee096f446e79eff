"""Canonical configuration of the three-product assembly line."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np

from .entity import Entity
from .enums import ComponentName, Product
from .inspector import Inspector
from .service_times import exponential_times, fitted_exponential_times, read_service_time_file
from .workbench import WorkBench


@dataclass(frozen=True)
class LineParams:
    """Parameters of one replication of the line."""

    seed: int = 123
    interval: float = 1.0
    n_service_times: int = 300
    buffer_size: int = 2
    max_duration: Optional[float] = None
    data_dir: Optional[Path] = None
    fit_from_data: bool = False

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ValueError("Tick interval must be strictly positive.")
        if self.n_service_times < 1:
            raise ValueError("At least one service time per source is required.")
        if self.buffer_size < 0:
            raise ValueError("Buffer size must be non-negative.")
        if self.max_duration is not None and self.max_duration <= 0:
            raise ValueError("max_duration must be positive when given.")
        if self.fit_from_data and self.data_dir is None:
            raise ValueError("fit_from_data needs a data_dir to fit against.")


@dataclass(frozen=True)
class ServiceSource:
    key: str
    rate: float  # exponential rate, per minute
    filename: str


SERVICE_SOURCES: Dict[str, ServiceSource] = {
    "servinsp1": ServiceSource("servinsp1", 0.09654457318, "servinsp1.dat"),
    "servinsp22": ServiceSource("servinsp22", 0.06436288999, "servinsp22.dat"),
    "servinsp23": ServiceSource("servinsp23", 0.04846662112, "servinsp23.dat"),
    "ws1": ServiceSource("ws1", 0.2171827774, "ws1.dat"),
    "ws2": ServiceSource("ws2", 0.09015013604, "ws2.dat"),
    "ws3": ServiceSource("ws3", 0.1136934688, "ws3.dat"),
}


def list_sources() -> List[str]:
    return sorted(SERVICE_SOURCES.keys())


def service_times_for(key: str, params: LineParams, rng: np.random.Generator) -> List[float]:
    """Service times (seconds) of a named source.

    Read as-is from `data_dir`, drawn from an exponential fitted to the file
    when `fit_from_data` is set, or generated from the canonical rate.
    """
    if key not in SERVICE_SOURCES:
        raise KeyError(f"Service source '{key}' is not defined. Available: {list_sources()}")
    source = SERVICE_SOURCES[key]
    if params.data_dir is not None:
        path = Path(params.data_dir) / source.filename
        if params.fit_from_data:
            return fitted_exponential_times(path, params.n_service_times, rng)
        return read_service_time_file(path)
    return exponential_times(rng, params.n_service_times, source.rate)


def build_line(params: LineParams, rng: Optional[np.random.Generator] = None) -> List[Entity]:
    """Wire the canonical line and return its entities, inspectors first."""
    rng = rng if rng is not None else np.random.default_rng(seed=params.seed)

    wb1 = WorkBench("WorkBench1", Product.P1, params.buffer_size)
    wb1.register_component(ComponentName.C1)
    wb1.set_service_times(service_times_for("ws1", params, rng))

    wb2 = WorkBench("WorkBench2", Product.P2, params.buffer_size)
    wb2.register_component(ComponentName.C1)
    wb2.register_component(ComponentName.C2)
    wb2.set_service_times(service_times_for("ws2", params, rng))

    wb3 = WorkBench("WorkBench3", Product.P3, params.buffer_size)
    wb3.register_component(ComponentName.C1)
    wb3.register_component(ComponentName.C3)
    wb3.set_service_times(service_times_for("ws3", params, rng))

    inspector1 = Inspector("Inspector1", rng=rng)
    for priority, wb in enumerate((wb1, wb2, wb3), start=1):
        inspector1.register_route(ComponentName.C1, wb)
        inspector1.register_priority(wb, priority)
    inspector1.register_service_times(
        ComponentName.C1, service_times_for("servinsp1", params, rng)
    )

    inspector2 = Inspector("Inspector2", rng=rng)
    inspector2.register_route(ComponentName.C2, wb2)
    inspector2.register_route(ComponentName.C3, wb3)
    inspector2.register_priority(wb2, 1)
    inspector2.register_priority(wb3, 2)
    inspector2.register_service_times(
        ComponentName.C2, service_times_for("servinsp22", params, rng)
    )
    inspector2.register_service_times(
        ComponentName.C3, service_times_for("servinsp23", params, rng)
    )

    return [inspector1, inspector2, wb1, wb2, wb3]
