from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..core.config import Shape


@dataclass(slots=True)
class BoidSnapshot:
    x: float
    y: float
    vx: float
    vy: float
    heading: float
    size: int
    shape: Shape
    color: str


@dataclass(slots=True)
class FlockSnapshot:
    name: str
    active: bool
    boids: List[BoidSnapshot]


@dataclass(slots=True)
class Snapshot:
    tick: int
    width: float
    height: float
    anchor: Optional[Tuple[float, float]]
    paused: bool
    solo: bool
    cross_flock_collisions: bool
    flocks: List[FlockSnapshot]
