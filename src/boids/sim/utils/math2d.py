from __future__ import annotations

import math

from pygame.math import Vector2


def _rescale_to_band_xy(x: float, y: float, min_length: float, max_length: float) -> tuple[float, float]:
    """Rescale ``(x, y)`` so its length lies in ``[min_length, max_length]``.

    A zero vector has no heading to preserve and is returned unchanged. The
    length is measured once and both bounds are checked against it.
    """
    length = math.sqrt(x * x + y * y)
    if length == 0.0:
        return x, y
    if length < min_length:
        x = (x / length) * min_length
        y = (y / length) * min_length
    if length > max_length:
        x = (x / length) * max_length
        y = (y / length) * max_length
    return x, y


def _clamp_axis(value: float, half_extent: float) -> float:
    # Upper edge is exclusive of the bound, lower edge inclusive.
    if value > half_extent:
        return half_extent
    if value <= -half_extent:
        return -half_extent
    return value


def _heading_from_velocity(vector: Vector2) -> float:
    if vector.length_squared() < 1e-12:
        return 0.0
    return math.atan2(vector.y, vector.x)
