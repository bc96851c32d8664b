from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class ArenaBounds:
    width: float
    height: float

    @property
    def half_width(self) -> float:
        return self.width / 2.0

    @property
    def half_height(self) -> float:
        return self.height / 2.0

    @staticmethod
    def from_viewport(width: Optional[float], height: Optional[float]) -> Optional["ArenaBounds"]:
        """Bounds for a viewport size, or ``None`` while the viewport is not ready."""
        if width is None or height is None:
            return None
        if not (math.isfinite(width) and math.isfinite(height)):
            return None
        if width <= 0 or height <= 0:
            return None
        return ArenaBounds(float(width), float(height))
