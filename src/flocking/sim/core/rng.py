from __future__ import annotations

import random
from typing import Optional

from pygame.math import Vector2


class DeterministicRng:
    def __init__(self, seed: Optional[int] = None):
        self._seed = seed
        self._random = random.Random(seed)

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_position(self, width: float, height: float) -> Vector2:
        return Vector2(self._random.random() * width, self._random.random() * height)

    def next_direction(self) -> Vector2:
        # Square-sampled components in [-1, 1); not normalized here
        return Vector2(self._random.random() * 2 - 1, self._random.random() * 2 - 1)
