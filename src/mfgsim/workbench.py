"""WorkBench: assembles a product from one unit of every required component."""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Iterable

from .component import Component
from .entity import Entity
from .enums import ComponentName, EntityState, EntityType, Product
from .errors import BufferFullError, EmptySampleError

logger = logging.getLogger(__name__)


class WorkBench(Entity):
    """Buffer-limited assembly station.

    Every registered component gets its own FIFO buffer capped at
    `max_buffer_size`. Assembly starts only when all buffers hold at least
    one token and consumes exactly one token from each when it finishes.
    """

    entity_type = EntityType.WORKBENCH

    def __init__(self, name: str, product: Product, max_buffer_size: int):
        super().__init__(name)
        if max_buffer_size < 0:
            raise ValueError("max_buffer_size must be non-negative.")
        self.product = product
        self.max_buffer_size = max_buffer_size
        self.service_times: Deque[float] = deque()

    def set_service_times(self, service_times: Iterable[float]) -> None:
        values = [float(t) for t in service_times]
        if any(t <= 0 for t in values):
            raise ValueError("Service times must be strictly positive.")
        self.service_times = deque(values)

    def buffer_available(self, name: ComponentName) -> bool:
        return name in self.buffers and len(self.buffers[name]) < self.max_buffer_size

    def accept(self, component: Component) -> None:
        """Place an inspected component in its buffer.

        Callers must check `buffer_available` first; pushing into a full or
        unknown buffer raises `BufferFullError`.
        """
        name = component.name
        if not self.buffer_available(name):
            raise BufferFullError(f"{self.name} has no room for {name.value}.")
        component.arrive(self.entity_type, self.clock, self.last_arrival.get(name))
        self.last_arrival[name] = self.clock
        self.buffers[name].append(component)

    def advance(self, interval: float) -> None:
        state = self._begin_tick(interval)

        if state is EntityState.ACTIVE and self.service_time_remaining <= 0:
            self._complete_assembly()
            self._start_assembly()
        elif state is EntityState.ACTIVE:
            self.service_time_remaining -= interval
        elif state is EntityState.BLOCKED:
            self._start_assembly()
        elif state is EntityState.DONE:
            pass
        else:
            self._start_assembly()

        self.sample_buffers()

    def can_assemble(self) -> bool:
        return bool(self.buffers) and all(self.buffers.values())

    def quantity_of_interest(self) -> float:
        """Assembled products per hour."""
        elapsed = self.total_elapsed_time()
        if elapsed == 0:
            raise EmptySampleError(f"{self.name} has not been advanced yet.")
        return self.services_completed / (elapsed / 3600.0)

    def _start_assembly(self) -> None:
        if self.can_assemble():
            self._draw(self.service_times)
        else:
            self._set_state(EntityState.BLOCKED)

    def _complete_assembly(self) -> None:
        for buffer in self.buffers.values():
            component = buffer.popleft()
            component.retire(self.entity_type, self.clock)
            self._record_completed(component)
        self.services_completed += 1
        logger.debug("%s assembled %s at t=%.2f", self.name, self.product.value, self.clock)
