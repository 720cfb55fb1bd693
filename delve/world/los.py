"""delve/world/los.py

Numba-accelerated Bresenham line rasterisation.
Shared by the field-of-view calculator and the central-attractor DLA
builder so both walk exactly the same cells between two points.
"""

from __future__ import annotations

import numpy as np
from numba import njit


@njit(cache=True)
def bresenham_line(x0: int, y0: int, x1: int, y1: int) -> np.ndarray:
    """Return the cells from ``(x0, y0)`` to ``(x1, y1)`` inclusive.

    The result is an ``(n, 2)`` int64 array of ``(x, y)`` rows, starting at
    the origin and ending at the target.
    """
    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    points = np.empty((dx - dy + 1, 2), dtype=np.int64)
    count = 0
    x, y = x0, y0
    while True:
        points[count, 0] = x
        points[count, 1] = y
        count += 1
        if x == x1 and y == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x += sx
        if e2 <= dx:
            err += dx
            y += sy
    return points[:count]
