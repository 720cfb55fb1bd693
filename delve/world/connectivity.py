# delve/world/connectivity.py
"""Flood-fill reachability analysis over a generated level.

Builders use :func:`dijkstra_map` three ways once carving is done: to wall off
floor the start cannot reach, to put the down stairs as far from the start as
possible, and to bucket the remaining floor into spawn regions.
"""

from __future__ import annotations

import heapq
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final, Iterable

import numpy as np
import structlog

from delve.constants import DIRECTIONS_8, TileType

if TYPE_CHECKING:
    from delve.world.game_map import GameMap

log = structlog.get_logger(__name__)

UNREACHABLE: Final[float] = np.inf
SPAWN_SECTIONS: Final[int] = 4


@dataclass(frozen=True)
class TileRegion:
    """A spawn region made of loose tile indices."""

    tiles: tuple[int, ...]

    def __len__(self) -> int:
        return len(self.tiles)


def dijkstra_map(game_map: "GameMap", sources: Iterable[int]) -> np.ndarray:
    """Distance from the nearest source to every tile, ``inf`` if unreachable.

    Every step to any of the 8 neighbours costs 1.0 and any non-wall tile can
    be entered. Sources get distance 0 whatever they are standing on.
    """
    width, height = game_map.width, game_map.height
    passable = (game_map.tiles != TileType.WALL).tolist()
    distances = [UNREACHABLE] * len(game_map)

    pq: list[tuple[float, int]] = []
    for src in sources:
        if distances[src] != 0.0:
            distances[src] = 0.0
            heapq.heappush(pq, (0.0, src))

    while pq:
        cost, idx = heapq.heappop(pq)
        if cost > distances[idx]:
            continue
        x, y = idx % width, idx // width
        new_cost = cost + 1.0
        for dx, dy in DIRECTIONS_8:
            nx, ny = x + dx, y + dy
            if not (0 <= nx < width and 0 <= ny < height):
                continue
            nidx = ny * width + nx
            if passable[nidx] and new_cost < distances[nidx]:
                distances[nidx] = new_cost
                heapq.heappush(pq, (new_cost, nidx))

    return np.asarray(distances, dtype=np.float64)


def cull_unreachable(game_map: "GameMap", distances: np.ndarray) -> int:
    """Turns floor with no finite distance back into wall. Returns the count."""
    unreachable = np.isinf(distances) & (game_map.tiles == TileType.FLOOR)
    culled = int(np.count_nonzero(unreachable))
    game_map.tiles[unreachable] = TileType.WALL
    return culled


def place_distant_exit(game_map: "GameMap", distances: np.ndarray) -> int:
    """Puts the down stairs on the lowest-index tile at maximum finite distance."""
    finite = np.where(np.isfinite(distances), distances, -1.0)
    exit_idx = int(np.argmax(finite))
    game_map.tiles[exit_idx] = TileType.DOWN_STAIRS
    return exit_idx


def sectioned_spawn_regions(
    game_map: "GameMap",
    distances: np.ndarray,
    start_idx: int,
    sections: int = SPAWN_SECTIONS,
) -> list[TileRegion]:
    """Groups reachable floor (minus the start) into a ``sections`` x ``sections`` grid.

    Only whole sections are used, so a remainder strip along the right and
    bottom edges never spawns anything. Empty sections are dropped.
    """
    width, height = game_map.width, game_map.height
    section_w = width // sections
    section_h = height // sections

    candidates = (game_map.tiles == TileType.FLOOR) & np.isfinite(distances)
    candidates[start_idx] = False
    candidates = candidates.reshape(height, width)

    regions: list[TileRegion] = []
    for sy in range(sections):
        for sx in range(sections):
            min_x, min_y = sx * section_w, sy * section_h
            block = candidates[min_y : min_y + section_h, min_x : min_x + section_w]
            ys, xs = np.nonzero(block)
            if ys.size == 0:
                continue
            tiles = (ys + min_y) * width + (xs + min_x)
            regions.append(TileRegion(tuple(tiles.tolist())))
    return regions


def finalize_reachability(
    game_map: "GameMap", start_idx: int
) -> tuple[int, list[TileRegion]]:
    """Cull, place the exit and build spawn regions from ``start_idx``.

    Returns the exit index and the spawn regions.
    """
    distances = dijkstra_map(game_map, [start_idx])
    culled = cull_unreachable(game_map, distances)
    exit_idx = place_distant_exit(game_map, distances)
    regions = sectioned_spawn_regions(game_map, distances, start_idx)
    log.debug(
        "Reachability finalized",
        culled=culled,
        exit=game_map.idx_xy(exit_idx),
        exit_distance=float(distances[exit_idx]),
        regions=len(regions),
    )
    return exit_idx, regions


__all__ = [
    "UNREACHABLE",
    "TileRegion",
    "dijkstra_map",
    "cull_unreachable",
    "place_distant_exit",
    "sectioned_spawn_regions",
    "finalize_reachability",
]
