# delve/systems/pathfinding/astar.py
"""A* search over ``GameMap.get_exits``.

The heuristic is Chebyshev distance. Every step costs at least 1.0 and moves
Chebyshev distance by at most 1, so it never overestimates even though
diagonal steps cost 1.45.
"""

from __future__ import annotations

import heapq
import itertools
from typing import TYPE_CHECKING, Dict, List, Optional

import structlog

if TYPE_CHECKING:
    from delve.world.game_map import GameMap

log = structlog.get_logger(__name__)

Path = List[int]


def _reconstruct_path(came_from: Dict[int, int], current: int) -> Path:
    path = [current]
    while current in came_from:
        current = came_from[current]
        path.append(current)
    path.reverse()
    return path


def a_star_search(
    game_map: "GameMap", start: int, end: int, entity_aware: bool = True
) -> Optional[Path]:
    """Return tile indices from ``start`` to ``end`` inclusive, or ``None``.

    ``entity_aware`` is forwarded to :meth:`GameMap.get_exits`.
    """
    if start == end:
        return [start]

    tie_breaker = itertools.count()
    # Min-heap: [(f_score, insertion_order, g_score, idx)]
    open_set = [(game_map.pathing_distance(start, end), next(tie_breaker), 0.0, start)]
    came_from: Dict[int, int] = {}
    g_score: Dict[int, float] = {start: 0.0}

    while open_set:
        _, _, current_g, current = heapq.heappop(open_set)
        if current == end:
            return _reconstruct_path(came_from, current)
        if current_g > g_score[current]:
            continue

        for neighbor, cost in game_map.get_exits(current, entity_aware):
            tentative_g = current_g + cost
            if tentative_g < g_score.get(neighbor, float("inf")):
                came_from[neighbor] = current
                g_score[neighbor] = tentative_g
                f_score = tentative_g + game_map.pathing_distance(neighbor, end)
                heapq.heappush(
                    open_set, (f_score, next(tie_breaker), tentative_g, neighbor)
                )

    log.debug(
        "No path found",
        start=game_map.idx_xy(start),
        end=game_map.idx_xy(end),
        entity_aware=entity_aware,
    )
    return None


def find_path(game_map: "GameMap", start: int, end: int) -> Optional[Path]:
    """Path that treats every ``blocked`` tile, occupants included, as solid."""
    return a_star_search(game_map, start, end, entity_aware=True)


def find_path_ignoring_entities(
    game_map: "GameMap", start: int, end: int
) -> Optional[Path]:
    """Path that only avoids walls, for planners that walk through other agents."""
    return a_star_search(game_map, start, end, entity_aware=False)


__all__ = ["Path", "a_star_search", "find_path", "find_path_ignoring_entities"]
