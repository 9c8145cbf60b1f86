from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from pygame.math import Vector2

from .config import BoidTypeConfig, SimulationConfig
from .rng import DeterministicRng
from ..systems import steering
from ..types.snapshot import BoidSnapshot
from ..utils.math2d import heading, lower_limit_ip, normalize_ip, upper_limit_ip


@dataclass(slots=True)
class Boid:
    position: Vector2
    config: BoidTypeConfig
    velocity: Vector2 = field(default_factory=Vector2)

    def randomize_velocity(self, rng: DeterministicRng) -> None:
        """Random direction with magnitude equal to the minimum speed."""
        direction = normalize_ip(rng.next_direction())
        self.velocity = direction * self.config.min_speed

    def randomize_position(self, rng: DeterministicRng, width: float, height: float) -> None:
        self.position = rng.next_position(width, height)

    def compute_velocity(
        self,
        flockmates: Sequence[Boid],
        collidable: Sequence[Boid],
        active: bool,
        anchor: Optional[Vector2],
        world: SimulationConfig,
    ) -> Tuple[Vector2, int]:
        """Velocity after this tick's forces, without writing it back.

        Min speed is applied before max speed so the maximum wins when the
        range is inverted.
        """
        force, checks = steering.total_force(self, flockmates, collidable, active, anchor, world)
        velocity = self.velocity + force
        lower_limit_ip(velocity, self.config.min_speed)
        upper_limit_ip(velocity, self.config.max_speed)
        return velocity, checks

    def update_forces(
        self,
        flockmates: Sequence[Boid],
        collidable: Sequence[Boid],
        active: bool,
        anchor: Optional[Vector2],
        world: SimulationConfig,
    ) -> int:
        self.velocity, checks = self.compute_velocity(flockmates, collidable, active, anchor, world)
        return checks

    def update_position(self, dt: float) -> None:
        self.position = self.position + self.velocity * dt

    def snapshot(self) -> BoidSnapshot:
        config = self.config
        return BoidSnapshot(
            x=self.position.x,
            y=self.position.y,
            vx=self.velocity.x,
            vy=self.velocity.y,
            heading=heading(self.velocity),
            size=config.size,
            shape=config.shape,
            color=config.color,
        )
