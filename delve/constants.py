from enum import IntEnum
from typing import Final, NamedTuple


class TileType(IntEnum):
    """Tile classifications stored in ``GameMap.tiles``."""

    FLOOR = 0
    WALL = 1
    DOWN_STAIRS = 2


class TileDef(NamedTuple):
    walkable: bool
    transparent: bool
    char: str


TILE_DEFS: Final[dict[int, TileDef]] = {
    TileType.FLOOR: TileDef(walkable=True, transparent=True, char="."),
    TileType.WALL: TileDef(walkable=False, transparent=False, char="#"),
    TileType.DOWN_STAIRS: TileDef(walkable=True, transparent=True, char=">"),
}

# Default level size
MAP_WIDTH: Final[int] = 80
MAP_HEIGHT: Final[int] = 43

CARDINAL_MOVE_COST: Final[float] = 1.0
DIAGONAL_MOVE_COST: Final[float] = 1.45

# (dx, dy) in exit enumeration order: W, E, N, S, then NW, NE, SW, SE
CARDINAL_DIRECTIONS: Final[tuple[tuple[int, int], ...]] = (
    (-1, 0),
    (1, 0),
    (0, -1),
    (0, 1),
)
DIAGONAL_DIRECTIONS: Final[tuple[tuple[int, int], ...]] = (
    (-1, -1),
    (1, -1),
    (-1, 1),
    (1, 1),
)
DIRECTIONS_8: Final[tuple[tuple[int, int], ...]] = (
    CARDINAL_DIRECTIONS + DIAGONAL_DIRECTIONS
)

__all__ = [
    "TileType",
    "TileDef",
    "TILE_DEFS",
    "MAP_WIDTH",
    "MAP_HEIGHT",
    "CARDINAL_MOVE_COST",
    "DIAGONAL_MOVE_COST",
    "CARDINAL_DIRECTIONS",
    "DIAGONAL_DIRECTIONS",
    "DIRECTIONS_8",
]
