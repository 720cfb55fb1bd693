# delve/world/distance.py
from enum import Enum
from typing import Tuple

import numpy as np


class DistanceAlg(Enum):
    PYTHAGORAS = "pythagoras"
    MANHATTAN = "manhattan"
    CHEBYSHEV = "chebyshev"

    def distance2d(self, start: Tuple[int, int], end: Tuple[int, int]) -> float:
        dx = abs(start[0] - end[0])
        dy = abs(start[1] - end[1])
        if self is DistanceAlg.PYTHAGORAS:
            return float(np.hypot(dx, dy))
        if self is DistanceAlg.MANHATTAN:
            return float(dx + dy)
        return float(max(dx, dy))

    def distance_field(
        self, xs: np.ndarray, ys: np.ndarray, x: int, y: int
    ) -> np.ndarray:
        """Vectorised :meth:`distance2d` from ``(x, y)`` to every ``(xs, ys)``."""
        dx = np.abs(xs - x).astype(np.float64)
        dy = np.abs(ys - y).astype(np.float64)
        if self is DistanceAlg.PYTHAGORAS:
            return np.hypot(dx, dy)
        if self is DistanceAlg.MANHATTAN:
            return dx + dy
        return np.maximum(dx, dy)


__all__ = ["DistanceAlg"]
