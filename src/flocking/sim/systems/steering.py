from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple, TYPE_CHECKING

from pygame.math import Vector2

from ..utils.math2d import normalize_ip

if TYPE_CHECKING:
    from ..core.boid import Boid
    from ..core.config import SimulationConfig


def flock_force(
    boid: Boid,
    flockmates: Sequence[Boid],
    active: bool,
    anchor: Optional[Vector2],
) -> Tuple[Vector2, int]:
    """Weighted alignment plus cohesion over flockmates inside the perception radius.

    Returns the force and the number of distance checks made.
    """
    config = boid.config
    radius = config.perception_radius
    position = boid.position
    velocity_x = 0.0
    velocity_y = 0.0
    position_x = 0.0
    position_y = 0.0
    count = 0
    checks = 0

    for other in flockmates:
        if other is boid:
            continue
        checks += 1
        dx = other.position.x - position.x
        dy = other.position.y - position.y
        if math.hypot(dx, dy) > radius:
            continue
        velocity_x += other.velocity.x
        velocity_y += other.velocity.y
        position_x += other.position.x
        position_y += other.position.y
        count += 1

    if count == 0:
        return Vector2(), checks

    alignment = Vector2(velocity_x / count - boid.velocity.x, velocity_y / count - boid.velocity.y)
    cohesion = Vector2(position_x / count - position.x, position_y / count - position.y)

    if active and anchor is not None:
        # Anchored flocks stop aligning and use their own cohesion weight
        return cohesion * config.anchored_cohesion_weight, checks
    return alignment * config.alignment_weight + cohesion * config.cohesion_weight, checks


def separation_force(boid: Boid, collidable: Sequence[Boid]) -> Tuple[Vector2, int]:
    config = boid.config
    radius = config.separation_radius
    position = boid.position
    force_x = 0.0
    force_y = 0.0
    checks = 0

    for other in collidable:
        if other is boid:
            continue
        checks += 1
        dx = position.x - other.position.x
        dy = position.y - other.position.y
        dist = math.hypot(dx, dy)
        # Coincident boids are skipped
        if dist >= radius or dist <= 0:
            continue
        scale = (radius - dist) / dist
        force_x += dx * scale
        force_y += dy * scale

    weight = config.separation_weight
    return Vector2(force_x * weight, force_y * weight), checks


def edge_force(boid: Boid, world: SimulationConfig) -> Vector2:
    margin = world.edge_margin
    position = boid.position
    force = Vector2()

    if position.x < margin:
        force.x += 1
    elif position.x > world.canvas_width - margin:
        force.x -= 1

    if position.y < margin:
        force.y += 1
    elif position.y > world.canvas_height - margin:
        force.y -= 1

    normalize_ip(force)
    return force * boid.config.turn_factor


def seek_force(boid: Boid, target: Vector2) -> Vector2:
    """Raw offset to ``target``; grows with distance, zero inside the anchor radius."""
    delta = Vector2(target.x - boid.position.x, target.y - boid.position.y)
    if delta.length() < boid.config.anchor_radius:
        return Vector2()
    return delta


def total_force(
    boid: Boid,
    flockmates: Sequence[Boid],
    collidable: Sequence[Boid],
    active: bool,
    anchor: Optional[Vector2],
    world: SimulationConfig,
) -> Tuple[Vector2, int]:
    force, flock_checks = flock_force(boid, flockmates, active, anchor)
    separation, separation_checks = separation_force(boid, collidable)
    force += separation
    force += edge_force(boid, world)
    if active and anchor is not None:
        force += seek_force(boid, anchor)
    return force, flock_checks + separation_checks
