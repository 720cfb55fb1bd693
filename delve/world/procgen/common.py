# delve/world/procgen/common.py
"""Carving primitives shared by the builders."""

from enum import Enum
from typing import TYPE_CHECKING, List

from delve.constants import TileType
from delve.world.rect import Rect

if TYPE_CHECKING:
    from delve.world.game_map import GameMap


class Symmetry(Enum):
    NONE = "none"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    BOTH = "both"


def apply_paint(game_map: "GameMap", brush_size: int, x: int, y: int) -> None:
    """Carves a ``(2 * brush_size + 1)`` square around ``(x, y)``, border excluded."""
    grid = game_map.grid
    x_start = max(x - brush_size, 1)
    x_end = min(x + brush_size, game_map.width - 2)
    y_start = max(y - brush_size, 1)
    y_end = min(y + brush_size, game_map.height - 2)
    if x_start <= x_end and y_start <= y_end:
        grid[y_start : y_end + 1, x_start : x_end + 1] = TileType.FLOOR


def paint(
    game_map: "GameMap", symmetry: Symmetry, brush_size: int, x: int, y: int
) -> None:
    """:func:`apply_paint`, mirrored about the map centre lines per ``symmetry``."""
    center_x = game_map.width // 2
    center_y = game_map.height // 2
    if symmetry is Symmetry.NONE:
        apply_paint(game_map, brush_size, x, y)
    elif symmetry is Symmetry.HORIZONTAL:
        if x == center_x:
            apply_paint(game_map, brush_size, x, y)
        else:
            dist = abs(center_x - x)
            apply_paint(game_map, brush_size, center_x + dist, y)
            apply_paint(game_map, brush_size, center_x - dist, y)
    elif symmetry is Symmetry.VERTICAL:
        if y == center_y:
            apply_paint(game_map, brush_size, x, y)
        else:
            dist = abs(center_y - y)
            apply_paint(game_map, brush_size, x, center_y + dist)
            apply_paint(game_map, brush_size, x, center_y - dist)
    else:
        dist_x = abs(center_x - x)
        dist_y = abs(center_y - y)
        apply_paint(game_map, brush_size, center_x + dist_x, center_y + dist_y)
        apply_paint(game_map, brush_size, center_x - dist_x, center_y + dist_y)
        apply_paint(game_map, brush_size, center_x + dist_x, center_y - dist_y)
        apply_paint(game_map, brush_size, center_x - dist_x, center_y - dist_y)


def apply_room_to_map(game_map: "GameMap", room: Rect) -> None:
    game_map.grid[room.y1 + 1 : room.y2 + 1, room.x1 + 1 : room.x2 + 1] = TileType.FLOOR


def _carve(game_map: "GameMap", x: int, y: int, carved: List[int]) -> None:
    if not game_map.in_bounds(x, y):
        return
    idx = game_map.xy_idx(x, y)
    if game_map.tiles[idx] != TileType.FLOOR:
        game_map.tiles[idx] = TileType.FLOOR
        carved.append(idx)


def apply_horizontal_tunnel(game_map: "GameMap", x1: int, x2: int, y: int) -> List[int]:
    """Carves ``x1..x2`` inclusive on row ``y``; returns newly opened tiles."""
    carved: List[int] = []
    for x in range(min(x1, x2), max(x1, x2) + 1):
        _carve(game_map, x, y, carved)
    return carved


def apply_vertical_tunnel(game_map: "GameMap", y1: int, y2: int, x: int) -> List[int]:
    carved: List[int] = []
    for y in range(min(y1, y2), max(y1, y2) + 1):
        _carve(game_map, x, y, carved)
    return carved


def draw_corridor(game_map: "GameMap", x1: int, y1: int, x2: int, y2: int) -> List[int]:
    """Staircase corridor: close the x gap first, then the y gap.

    The starting tile is not carved.
    """
    carved: List[int] = []
    x, y = x1, y1
    while x != x2 or y != y2:
        if x < x2:
            x += 1
        elif x > x2:
            x -= 1
        elif y < y2:
            y += 1
        else:
            y -= 1
        _carve(game_map, x, y, carved)
    return carved


__all__ = [
    "Symmetry",
    "apply_paint",
    "paint",
    "apply_room_to_map",
    "apply_horizontal_tunnel",
    "apply_vertical_tunnel",
    "draw_corridor",
]
