from __future__ import annotations

import math

from pygame.math import Vector2


def distance(a: Vector2, b: Vector2) -> float:
    return math.hypot(b.x - a.x, b.y - a.y)


def angle_between(a: Vector2, b: Vector2) -> float:
    """Angle between two vectors in degrees, in [0, 180].

    Returns 0.0 when either vector has zero length.
    """
    magnitudes = math.sqrt(a.length_squared() * b.length_squared())
    if magnitudes == 0:
        return 0.0
    cos_theta = (a.x * b.x + a.y * b.y) / magnitudes
    cos_theta = max(-1.0, min(1.0, cos_theta))
    return math.degrees(math.acos(cos_theta))


def normalize_ip(vector: Vector2) -> Vector2:
    # pygame raises on zero-length normalize; a zero vector stays zero
    magnitude = vector.length()
    if magnitude != 0:
        vector.x /= magnitude
        vector.y /= magnitude
    return vector


def upper_limit_ip(vector: Vector2, max_length: float) -> Vector2:
    if vector.length() > max_length:
        normalize_ip(vector)
        vector.x *= max_length
        vector.y *= max_length
    return vector


def lower_limit_ip(vector: Vector2, min_length: float) -> Vector2:
    if vector.length() < min_length:
        normalize_ip(vector)
        vector.x *= min_length
        vector.y *= min_length
    return vector


def heading(vector: Vector2) -> float:
    if vector.length_squared() < 1e-12:
        return 0.0
    return math.atan2(vector.y, vector.x)


def _clamp_value(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, value))
