from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from time import perf_counter
from typing import Callable, List, Optional, Sequence, Tuple, Union

from pygame.math import Vector2

from .boid import Boid
from .config import SimulationConfig, apply_setting
from .flock import Flock
from .rng import DeterministicRng
from ..types.metrics import TickMetrics
from ..types.snapshot import Snapshot

logger = logging.getLogger(__name__)

Point = Union[Vector2, Tuple[float, float], Sequence[float]]


@dataclass
class SimulationContext:
    """Mode flags and anchor shared between input handlers and the stepper."""

    anchor_position: Optional[Vector2] = None
    paused: bool = False
    solo: bool = False
    cross_flock_collisions: bool = False


class Stepper:
    """Advances every flock once per frame.

    All boids eligible for a tick compute their new velocity from the state at
    the start of the tick; velocities and positions are written afterwards, so
    member order does not change the outcome.
    """

    def __init__(self, config: SimulationConfig, clock: Callable[[], float] = perf_counter):
        self.config = config
        self.context = SimulationContext(solo=config.solo, cross_flock_collisions=config.cross_flock_collisions)
        self._clock = clock
        self._rng = DeterministicRng(config.seed)
        self._flocks: List[Flock] = [Flock(boid_type, config, self._rng) for boid_type in config.flocks]
        for flock in self._flocks:
            flock.reconcile_population()
        if self._flocks:
            self.select_flock(config.active_flock)
        self._tick = 0
        self._metrics: TickMetrics | None = None
        self._last_timestamp = clock()

    @property
    def flocks(self) -> List[Flock]:
        return self._flocks

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    @property
    def paused(self) -> bool:
        return self.context.paused

    @property
    def active_flock(self) -> Flock | None:
        for flock in self._flocks:
            if flock.active:
                return flock
        return None

    @property
    def population(self) -> int:
        return sum(flock.size for flock in self._flocks)

    def step(self, timestamp: float) -> TickMetrics | None:
        """Advance by the time elapsed since the previous tick, in seconds."""
        if self.context.paused:
            return None
        dt = max(0.0, timestamp - self._last_timestamp)
        self._last_timestamp = timestamp
        return self._advance(dt)

    def advance(self, dt: float) -> TickMetrics | None:
        """Advance by an explicit time delta, ignoring the clock."""
        if self.context.paused:
            return None
        return self._advance(dt)

    def _is_eligible(self, flock: Flock) -> bool:
        return flock.active or not self.context.solo

    def _advance(self, dt: float) -> TickMetrics:
        start = perf_counter()
        context = self.context
        anchor = context.anchor_position
        world = self.config

        everyone: List[Boid] | None = None
        if context.cross_flock_collisions and not context.solo:
            everyone = [boid for flock in self._flocks for boid in flock.members]

        pending: List[Tuple[Boid, Vector2]] = []
        neighbor_checks = 0
        for flock in self._flocks:
            if not self._is_eligible(flock):
                continue
            members = flock.members
            collidable = everyone if everyone is not None else members
            for boid in members:
                velocity, checks = boid.compute_velocity(members, collidable, flock.active, anchor, world)
                pending.append((boid, velocity))
                neighbor_checks += checks

        speed_sum = 0.0
        for boid, velocity in pending:
            boid.velocity = velocity
            boid.update_position(dt)
            speed_sum += math.hypot(velocity.x, velocity.y)

        self._tick += 1
        self._metrics = TickMetrics(
            tick=self._tick,
            population=self.population,
            updated=len(pending),
            neighbor_checks=neighbor_checks,
            average_speed=speed_sum / len(pending) if pending else 0.0,
            delta_time=dt,
            tick_duration_ms=(perf_counter() - start) * 1000.0,
        )
        return self._metrics

    def reset_clock(self) -> None:
        """Forget the time elapsed since the last tick."""
        self._last_timestamp = self._clock()

    def toggle_pause(self) -> bool:
        self.context.paused = not self.context.paused
        if not self.context.paused:
            self.reset_clock()
        logger.debug("Simulation %s", "paused" if self.context.paused else "resumed")
        return self.context.paused

    def toggle_solo(self) -> bool:
        self.context.solo = not self.context.solo
        logger.debug("Solo mode %s", "on" if self.context.solo else "off")
        return self.context.solo

    def toggle_collisions(self) -> bool:
        self.context.cross_flock_collisions = not self.context.cross_flock_collisions
        logger.debug("Cross-flock collisions %s", "on" if self.context.cross_flock_collisions else "off")
        return self.context.cross_flock_collisions

    def set_anchor_position(self, point: Point | None) -> None:
        if point is None:
            self.context.anchor_position = None
        else:
            self.context.anchor_position = Vector2(point[0], point[1])

    def clear_anchor(self) -> None:
        self.set_anchor_position(None)

    def select_flock(self, index: int) -> Flock:
        selected = self._flocks[index]
        for flock in self._flocks:
            flock.active = flock is selected
        return selected

    def scatter_active(self) -> None:
        flock = self.active_flock
        if flock is not None:
            flock.scatter()

    def update_setting(self, index: int, name: str, value: float) -> float:
        """Apply a settings-panel edit to flock ``index``; resizes the flock if needed."""
        flock = self._flocks[index]
        stored = apply_setting(flock.config, name, value, self.config.canvas_height)
        if name == "flock_size":
            flock.reconcile_population()
        return stored

    def resize(self, width: float, height: float) -> None:
        self.config.canvas_width = width
        self.config.canvas_height = height

    def snapshot(self) -> Snapshot:
        context = self.context
        anchor = context.anchor_position
        return Snapshot(
            tick=self._tick,
            width=self.config.canvas_width,
            height=self.config.canvas_height,
            anchor=None if anchor is None else (anchor.x, anchor.y),
            paused=context.paused,
            solo=context.solo,
            cross_flock_collisions=context.cross_flock_collisions,
            flocks=[flock.snapshot() for flock in self._flocks if self._is_eligible(flock)],
        )
