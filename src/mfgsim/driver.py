"""Fixed-increment driver: ticks every entity in order until the run ends."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import simpy

from .component import Component
from .entity import Entity
from .enums import ComponentName, EntityState, EntityType
from .errors import EmptySampleError
from .littles_law import evaluate_littles_law
from .scenarios import LineParams, build_line

logger = logging.getLogger(__name__)

# Entity label of checks that cover the whole line.
LINE = "LINE"


@dataclass
class EntityRecord:
    replication: int
    seed: int
    name: str
    entity_type: str
    state: str
    services_completed: int
    time_active: float
    time_blocked: float
    time_done: float
    elapsed: float
    quantity_of_interest: float

    def as_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass
class LittleRecord:
    """Little's Law check for one component, over the line or one entity."""

    replication: int
    seed: int
    entity: str
    component: str
    L: float
    arrival_rate: float
    W: float
    little_product: float
    little_error: float
    n_samples: int

    def as_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass
class ReplicationResult:
    """Outputs of one replication of the line."""

    replication: int
    seed: int
    interval: float
    ticks: int
    sim_time: float
    stop_reason: str
    entities: List[EntityRecord] = field(default_factory=list)
    littles_law: List[LittleRecord] = field(default_factory=list)
    entity_littles_law: List[LittleRecord] = field(default_factory=list)

    def as_dict(self) -> Dict[str, object]:
        return {
            "replication": self.replication,
            "seed": self.seed,
            "interval": self.interval,
            "ticks": self.ticks,
            "sim_time": self.sim_time,
            "stop_reason": self.stop_reason,
        }


class LineRunner:
    """Owns the SimPy clock process that advances the entities tick by tick.

    Entities are advanced in list order, so a hand-off made by an inspector
    is already visible to the workbenches that follow it in the same tick.
    """

    def __init__(self, env: simpy.Environment, entities: Sequence[Entity], params: LineParams):
        self.env = env
        self.entities = list(entities)
        self.params = params
        self.ticks = 0
        self.stop_reason = ""

    def clock(self):
        while True:
            for entity in self.entities:
                entity.advance(self.params.interval)
            self.ticks += 1
            yield self.env.timeout(self.params.interval)
            if self._finished():
                return

    def _finished(self) -> bool:
        states = [entity.current_state() for entity in self.entities]
        if any(s is EntityState.DONE for s in states):
            self.stop_reason = "done"
            return True
        if all(s is EntityState.BLOCKED for s in states):
            logger.warning("Every entity is blocked after %d ticks; stopping.", self.ticks)
            self.stop_reason = "deadlock"
            return True
        if (
            self.params.max_duration is not None
            and self.ticks * self.params.interval >= self.params.max_duration
        ):
            self.stop_reason = "max_duration"
            return True
        return False


def completed_at(entities: Iterable[Entity], entity_type: EntityType) -> Dict[ComponentName, List[Component]]:
    """Gather the retired tokens of every entity of `entity_type` by component name."""
    gathered: Dict[ComponentName, List[Component]] = {}
    for entity in entities:
        if entity.entity_type is not entity_type:
            continue
        for name, components in entity.completed_components.items():
            gathered.setdefault(name, []).extend(components)
    return gathered


def system_occupancy(entities: Iterable[Entity], name: ComponentName, ticks: int) -> float:
    """Average number of `name` tokens held anywhere in the line per tick."""
    if ticks <= 0:
        raise EmptySampleError("System occupancy needs at least one tick.")
    total = sum(entity.buffer_sample_sum.get(name, 0) for entity in entities)
    return total / ticks


def little_record(
    replication: int,
    seed: int,
    entity: str,
    name: ComponentName,
    components: Sequence[Component],
    L: float,
    entity_type: Optional[EntityType] = None,
) -> LittleRecord:
    check = evaluate_littles_law(components, L, entity_type)
    return LittleRecord(
        replication=replication,
        seed=seed,
        entity=entity,
        component=name.value,
        L=check.L,
        arrival_rate=check.arrival_rate,
        W=check.W,
        little_product=check.little_product,
        little_error=check.little_error,
        n_samples=check.n_samples,
    )


def run_replication(params: LineParams, replication: int = 0) -> ReplicationResult:
    """Run one replication of the canonical line and collect its statistics."""
    rng = np.random.default_rng(seed=params.seed)
    entities = build_line(params, rng)

    env = simpy.Environment()
    runner = LineRunner(env, entities, params)
    logger.info("Replication %d started (seed=%d).", replication, params.seed)
    env.run(until=env.process(runner.clock()))

    result = ReplicationResult(
        replication=replication,
        seed=params.seed,
        interval=params.interval,
        ticks=runner.ticks,
        sim_time=runner.ticks * params.interval,
        stop_reason=runner.stop_reason,
    )

    for entity in entities:
        result.entities.append(
            EntityRecord(replication=replication, seed=params.seed, **entity.summary())
        )
        for name, components in entity.completed_components.items():
            if not components:
                continue
            result.entity_littles_law.append(
                little_record(
                    replication,
                    params.seed,
                    entity.name,
                    name,
                    components,
                    entity.average_buffer_occupancy(name),
                    entity.entity_type,
                )
            )

    for name, components in sorted(
        completed_at(entities, EntityType.WORKBENCH).items(), key=lambda kv: kv[0].value
    ):
        if not components:
            logger.warning("No %s completed the line in replication %d.", name.value, replication)
            continue
        L = system_occupancy(entities, name, runner.ticks)
        result.littles_law.append(
            little_record(replication, params.seed, LINE, name, components, L)
        )

    logger.info(
        "Replication %d finished after %d ticks (%s).",
        replication,
        runner.ticks,
        runner.stop_reason,
    )
    return result
