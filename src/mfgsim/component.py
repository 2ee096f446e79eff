"""Component tokens flowing from inspectors to workbenches."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from .enums import ComponentName, EntityType
from .errors import SimulationError


@dataclass
class Visit:
    """Timestamps of one component at one entity type (seconds)."""

    arrival_time: float
    inter_arrival_time: float
    system_time: Optional[float] = None

    @property
    def retired(self) -> bool:
        return self.system_time is not None


@dataclass
class Component:
    """A part moving through the line.

    A token gets one `Visit` per entity type it passes through. The
    inter-arrival time of a visit is measured against the previous token of
    the same name seen by the same entity; the first one uses the absolute
    arrival clock.
    """

    name: ComponentName
    visits: Dict[EntityType, Visit] = field(default_factory=dict)

    def arrive(
        self, entity_type: EntityType, clock: float, previous_arrival: Optional[float]
    ) -> Visit:
        if previous_arrival is None:
            inter_arrival = clock
        else:
            inter_arrival = clock - previous_arrival
        visit = Visit(arrival_time=clock, inter_arrival_time=inter_arrival)
        self.visits[entity_type] = visit
        return visit

    def retire(self, entity_type: EntityType, clock: float) -> float:
        """Finalize the system time at `entity_type` and return it."""
        visit = self.visit(entity_type)
        if visit.retired:
            raise SimulationError(f"{self.name.value} already retired at {entity_type.value}.")
        visit.system_time = clock - visit.arrival_time
        return visit.system_time

    def visit(self, entity_type: EntityType) -> Visit:
        try:
            return self.visits[entity_type]
        except KeyError:
            raise SimulationError(
                f"{self.name.value} never arrived at {entity_type.value}."
            ) from None

    def arrival_time(self, entity_type: EntityType) -> float:
        return self.visit(entity_type).arrival_time

    def inter_arrival_time(self, entity_type: EntityType) -> float:
        return self.visit(entity_type).inter_arrival_time

    def system_time(self, entity_type: EntityType) -> Optional[float]:
        return self.visit(entity_type).system_time

    def total_system_time(self) -> float:
        """Time spent across every retired visit (inspection plus buffering/assembly)."""
        return sum(v.system_time for v in self.visits.values() if v.system_time is not None)
