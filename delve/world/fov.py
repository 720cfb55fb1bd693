# delve/world/fov.py
"""Ray-cast field of view.

For every tile inside the observer's radius a Bresenham line is cast from the
observer. Cells along the ray are visible until the first opaque cell, which
is itself visible and stops the ray.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
import structlog
from numba import njit

from delve.constants import TileType
from delve.world.los import bresenham_line

if TYPE_CHECKING:
    from delve.world.game_map import GameMap

log = structlog.get_logger(__name__)


@dataclass
class Viewshed:
    """Per-observer view state.

    ``dirty`` is carried for callers that track movement, but
    :func:`update_viewshed` always recomputes and never reads or clears it.
    """

    range: int
    visible_tiles: set[tuple[int, int]] = field(default_factory=set)
    dirty: bool = True


@njit(cache=True)
def _cast_rays(
    cx: int, cy: int, radius: int, opaque: np.ndarray, visible: np.ndarray
) -> None:
    height, width = opaque.shape
    radius_sq = radius * radius
    for tx in range(cx - radius, cx + radius + 1):
        for ty in range(cy - radius, cy + radius + 1):
            dx = tx - cx
            dy = ty - cy
            if dx * dx + dy * dy > radius_sq:
                continue
            line = bresenham_line(cx, cy, tx, ty)
            for i in range(line.shape[0]):
                x = line[i, 0]
                y = line[i, 1]
                # Rays are monotone, so once off the map they stay off it
                if x < 0 or x >= width or y < 0 or y >= height:
                    break
                visible[y, x] = True
                if opaque[y, x]:
                    break


def field_of_view(
    game_map: "GameMap", x: int, y: int, radius: int
) -> set[tuple[int, int]]:
    """Return the in-bounds ``(x, y)`` tiles visible from ``(x, y)``."""
    opaque = game_map.grid == TileType.WALL
    visible = np.zeros_like(opaque)
    _cast_rays(x, y, max(radius, 0), opaque, visible)
    ys, xs = np.nonzero(visible)
    return set(zip(xs.tolist(), ys.tolist()))


def update_viewshed(game_map: "GameMap", viewshed: Viewshed, x: int, y: int) -> None:
    viewshed.visible_tiles = field_of_view(game_map, x, y, viewshed.range)
    log.debug(
        "Viewshed updated",
        origin=(x, y),
        range=viewshed.range,
        visible=len(viewshed.visible_tiles),
    )


__all__ = ["Viewshed", "field_of_view", "update_viewshed"]
