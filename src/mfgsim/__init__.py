"""Fixed-increment simulation of an inspector/workbench assembly line."""

from .component import Component, Visit
from .driver import LINE, EntityRecord, LittleRecord, ReplicationResult, run_replication, system_occupancy
from .entity import Entity
from .enums import ComponentName, EntityState, EntityType, Product
from .errors import BufferFullError, EmptySampleError, SimulationError
from .inspector import Inspector
from .littles_law import LittlesLawResult, evaluate_littles_law, relative_error
from .scenarios import SERVICE_SOURCES, LineParams, ServiceSource, build_line, list_sources
from .service_times import exponential_times, fitted_exponential_times, read_service_time_file
from .workbench import WorkBench

__all__ = [
    "BufferFullError",
    "LINE",
    "Component",
    "ComponentName",
    "EmptySampleError",
    "Entity",
    "EntityRecord",
    "EntityState",
    "EntityType",
    "Inspector",
    "LineParams",
    "LittleRecord",
    "LittlesLawResult",
    "Product",
    "ReplicationResult",
    "SERVICE_SOURCES",
    "ServiceSource",
    "SimulationError",
    "Visit",
    "WorkBench",
    "build_line",
    "evaluate_littles_law",
    "exponential_times",
    "fitted_exponential_times",
    "list_sources",
    "read_service_time_file",
    "relative_error",
    "run_replication",
    "system_occupancy",
]
