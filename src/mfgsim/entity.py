"""Shared fixed-increment state machine for inspectors and workbenches."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Deque, Dict, List, Optional

from .component import Component
from .enums import ComponentName, EntityState, EntityType
from .errors import EmptySampleError

logger = logging.getLogger(__name__)


class Entity(ABC):
    """Base class holding state, timers, buffers and occupancy samples.

    Subclasses implement `advance`, which must start with `_begin_tick`
    and finish with `sample_buffers` so that time-in-state, the logical
    clock and the buffer samples move exactly once per tick.
    """

    entity_type: EntityType

    def __init__(self, name: str):
        self.name = name
        self.state = EntityState.INITIALIZED
        self.clock = 0.0
        self.service_time_remaining: Optional[float] = None
        self.services_completed = 0
        self.state_timer: Dict[EntityState, float] = {s: 0.0 for s in EntityState}
        self.buffers: Dict[ComponentName, Deque[Component]] = {}
        self.buffer_sample_sum: Dict[ComponentName, int] = {}
        self.buffer_sample_count = 0
        self.completed_components: Dict[ComponentName, List[Component]] = {}
        # Arrival clock of the latest token per name, used for inter-arrival deltas.
        self.last_arrival: Dict[ComponentName, float] = {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, state={self.state.value})"

    def register_component(self, name: ComponentName) -> None:
        """Create an empty buffer and zeroed accumulators for `name` (setup only)."""
        self.buffers[name] = deque()
        self.buffer_sample_sum[name] = 0
        self.completed_components.setdefault(name, [])

    @abstractmethod
    def advance(self, interval: float) -> None:
        """Move this entity forward by one tick of `interval` seconds."""

    @abstractmethod
    def quantity_of_interest(self) -> float:
        """Scalar aggregated across replications."""

    def current_state(self) -> EntityState:
        return self.state

    def total_time_in_state(self, state: EntityState) -> float:
        return self.state_timer[state]

    def total_elapsed_time(self) -> float:
        return sum(self.state_timer.values())

    def buffer_size(self, name: ComponentName) -> int:
        return len(self.buffers[name])

    def sample_buffers(self) -> None:
        for name, buffer in self.buffers.items():
            self.buffer_sample_sum[name] += len(buffer)
        self.buffer_sample_count += 1

    def average_buffer_occupancy(self, name: ComponentName) -> float:
        if self.buffer_sample_count == 0:
            raise EmptySampleError(f"{self.name} has no buffer samples yet.")
        return self.buffer_sample_sum[name] / self.buffer_sample_count

    def summary(self) -> Dict[str, object]:
        """Counters, timers and quantity of interest as a flat dictionary.

        Raises `EmptySampleError` before the first tick.
        """
        return {
            "name": self.name,
            "entity_type": self.entity_type.value,
            "state": self.state.value,
            "services_completed": self.services_completed,
            "time_active": self.state_timer[EntityState.ACTIVE],
            "time_blocked": self.state_timer[EntityState.BLOCKED],
            "time_done": self.state_timer[EntityState.DONE],
            "elapsed": self.total_elapsed_time(),
            "quantity_of_interest": self.quantity_of_interest(),
        }

    def _begin_tick(self, interval: float) -> EntityState:
        """Charge `interval` to the state held at tick start and move the clock."""
        if interval <= 0:
            raise ValueError("Tick interval must be strictly positive.")
        state = self.state
        self.state_timer[state] += interval
        self.clock += interval
        return state

    def _set_state(self, state: EntityState) -> None:
        if self.state is EntityState.DONE:
            return
        if state is not self.state:
            logger.debug("%s %s -> %s at t=%.2f", self.name, self.state.value, state.value, self.clock)
        self.state = state

    def _draw(self, source: Deque[float]) -> None:
        """Start a service from `source` or finish the entity when it is exhausted."""
        if source:
            self.service_time_remaining = source.popleft()
            self._set_state(EntityState.ACTIVE)
        else:
            self.service_time_remaining = None
            logger.debug("%s exhausted its service times at t=%.2f", self.name, self.clock)
            self._set_state(EntityState.DONE)

    def _record_completed(self, component: Component) -> None:
        self.completed_components.setdefault(component.name, []).append(component)
