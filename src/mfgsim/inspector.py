"""Inspector: produces components and routes them to workbenches."""

from __future__ import annotations

import logging
import math
from collections import deque
from typing import TYPE_CHECKING, Deque, Dict, Iterable, List, Optional

import numpy as np

from .component import Component
from .entity import Entity
from .enums import ComponentName, EntityState, EntityType
from .errors import EmptySampleError

if TYPE_CHECKING:
    from .workbench import WorkBench

logger = logging.getLogger(__name__)


class Inspector(Entity):
    """Inspects one component at a time and hands it to the least-loaded workbench.

    Routing picks, among the workbenches registered for the component with
    room left, the one with the shortest buffer for that component. Ties go
    to the smallest registered priority, then to registration order.
    """

    entity_type = EntityType.INSPECTOR

    def __init__(self, name: str, rng: Optional[np.random.Generator] = None):
        super().__init__(name)
        self.rng = rng if rng is not None else np.random.default_rng()
        self.routes: Dict[ComponentName, List["WorkBench"]] = {}
        self.service_times: Dict[ComponentName, Deque[float]] = {}
        self.priorities: Dict["WorkBench", int] = {}
        self.current_component: Optional[ComponentName] = None

    def register_route(self, name: ComponentName, workbench: "WorkBench") -> None:
        """Allow components called `name` to be handed to `workbench`."""
        if name not in self.buffers:
            self.register_component(name)
        self.routes.setdefault(name, []).append(workbench)

    def register_priority(self, workbench: "WorkBench", priority: int) -> None:
        """Lower values win routing ties."""
        self.priorities[workbench] = priority

    def register_service_times(self, name: ComponentName, service_times: Iterable[float]) -> None:
        values = [float(t) for t in service_times]
        if any(t <= 0 for t in values):
            raise ValueError("Service times must be strictly positive.")
        self.service_times[name] = deque(values)

    def advance(self, interval: float) -> None:
        state = self._begin_tick(interval)

        if state is EntityState.ACTIVE and self.service_time_remaining <= 0:
            self._hand_off()
        elif state is EntityState.ACTIVE:
            self.service_time_remaining -= interval
        elif state is EntityState.BLOCKED:
            self._hand_off()
        elif state is EntityState.DONE:
            pass
        else:
            self._select_next_component()

        self.sample_buffers()

    def get_next_workbench(self) -> Optional["WorkBench"]:
        """Return the workbench that should receive the current component, if any."""
        name = self.current_component
        candidates = [
            wb for wb in self.routes.get(name, []) if wb.buffer_available(name)
        ]
        if not candidates:
            return None
        return min(
            candidates,
            key=lambda wb: (wb.buffer_size(name), self.priorities.get(wb, math.inf)),
        )

    def quantity_of_interest(self) -> float:
        """Percentage of elapsed time spent blocked (idle)."""
        elapsed = self.total_elapsed_time()
        if elapsed == 0:
            raise EmptySampleError(f"{self.name} has not been advanced yet.")
        return 100.0 * self.state_timer[EntityState.BLOCKED] / elapsed

    def _select_next_component(self) -> None:
        names = list(self.routes)
        if not names:
            raise ValueError(f"{self.name} has no registered routes.")
        if len(names) == 1:
            name = names[0]
        else:
            name = names[int(self.rng.integers(len(names)))]
        if name not in self.service_times:
            raise KeyError(f"{self.name} has no service times for {name.value}.")

        component = Component(name)
        component.arrive(self.entity_type, self.clock, self.last_arrival.get(name))
        self.last_arrival[name] = self.clock

        buffer = self.buffers[name]
        buffer.clear()
        buffer.append(component)
        self.current_component = name
        self._draw(self.service_times[name])

    def _hand_off(self) -> None:
        workbench = self.get_next_workbench()
        if workbench is None:
            self._set_state(EntityState.BLOCKED)
            return

        name = self.current_component
        component = self.buffers[name].popleft()
        component.retire(self.entity_type, self.clock)
        workbench.accept(component)
        self._record_completed(component)
        self.services_completed += 1
        logger.debug("%s -> %s: %s at t=%.2f", self.name, workbench.name, name.value, self.clock)
        self._select_next_component()
