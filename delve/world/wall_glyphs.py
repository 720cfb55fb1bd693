# delve/world/wall_glyphs.py
"""Box-drawing glyph selection for wall tiles.

A wall's glyph depends on which of its four orthogonal neighbours are walls
that border open ground. Bits: north 1, south 2, west 4, east 8.
"""

from typing import TYPE_CHECKING, Final

from delve.constants import DIRECTIONS_8, TileType

if TYPE_CHECKING:
    from delve.world.game_map import GameMap

MASK_NORTH: Final[int] = 1
MASK_SOUTH: Final[int] = 2
MASK_WEST: Final[int] = 4
MASK_EAST: Final[int] = 8

PILLAR_GLYPH: Final[str] = "○"

WALL_GLYPHS: Final[dict[int, str]] = {
    0: PILLAR_GLYPH,
    1: "║",
    2: "║",
    3: "║",
    4: "═",
    5: "╝",
    6: "╗",
    7: "╣",
    8: "═",
    9: "╚",
    10: "╔",
    11: "╠",
    12: "═",
    13: "╩",
    14: "╦",
    15: "╬",
}


def is_wall_facing_floor(game_map: "GameMap", x: int, y: int) -> bool:
    """True for an in-bounds wall with open ground among its 8 neighbours."""
    if not game_map.in_bounds(x, y):
        return False
    if game_map.tiles[game_map.xy_idx(x, y)] != TileType.WALL:
        return False
    for dx, dy in DIRECTIONS_8:
        nx, ny = x + dx, y + dy
        if (
            game_map.in_bounds(nx, ny)
            and game_map.tiles[game_map.xy_idx(nx, ny)] != TileType.WALL
        ):
            return True
    return False


def wall_mask(game_map: "GameMap", x: int, y: int) -> int:
    mask = 0
    if is_wall_facing_floor(game_map, x, y - 1):
        mask |= MASK_NORTH
    if is_wall_facing_floor(game_map, x, y + 1):
        mask |= MASK_SOUTH
    if is_wall_facing_floor(game_map, x - 1, y):
        mask |= MASK_WEST
    if is_wall_facing_floor(game_map, x + 1, y):
        mask |= MASK_EAST
    return mask


def wall_glyph(mask: int) -> str:
    return WALL_GLYPHS[mask & 0b1111]


__all__ = [
    "is_wall_facing_floor",
    "wall_mask",
    "wall_glyph",
    "WALL_GLYPHS",
    "PILLAR_GLYPH",
]
