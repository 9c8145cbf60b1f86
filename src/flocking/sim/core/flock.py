from __future__ import annotations

import logging
from typing import List

from .boid import Boid
from .config import BoidTypeConfig, SimulationConfig
from .rng import DeterministicRng
from ..types.snapshot import FlockSnapshot

logger = logging.getLogger(__name__)


class Flock:
    """Boids sharing one :class:`BoidTypeConfig`.

    ``active`` marks the flock selected by the settings collaborator; keeping it
    exclusive across flocks is the caller's job.
    """

    def __init__(self, config: BoidTypeConfig, world: SimulationConfig, rng: DeterministicRng):
        self.config = config
        self.members: List[Boid] = []
        self.active = False
        self._world = world
        self._rng = rng

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def size(self) -> int:
        return len(self.members)

    def add_member(self) -> Boid:
        world = self._world
        boid = Boid(position=self._rng.next_position(world.canvas_width, world.canvas_height), config=self.config)
        boid.randomize_velocity(self._rng)
        self.members.append(boid)
        return boid

    def reconcile_population(self) -> None:
        """Trim from the end or append new boids until the size matches ``flock_size``."""
        target = max(0, int(self.config.flock_size))
        before = len(self.members)
        while len(self.members) > target:
            self.members.pop()
        while len(self.members) < target:
            self.add_member()
        if before != target:
            logger.debug("Flock %s resized %d -> %d", self.name, before, target)

    def scatter(self) -> None:
        world = self._world
        for boid in self.members:
            boid.randomize_position(self._rng, world.canvas_width, world.canvas_height)
            boid.randomize_velocity(self._rng)

    def snapshot(self) -> FlockSnapshot:
        return FlockSnapshot(name=self.name, active=self.active, boids=[boid.snapshot() for boid in self.members])
