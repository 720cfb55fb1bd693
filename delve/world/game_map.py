# delve/world/game_map.py
from typing import Iterable, Optional

import numpy as np
import structlog

from delve.constants import (
    CARDINAL_DIRECTIONS,
    CARDINAL_MOVE_COST,
    DIAGONAL_DIRECTIONS,
    DIAGONAL_MOVE_COST,
    TILE_DEFS,
    TileType,
)
from delve.world.fov import field_of_view

log = structlog.get_logger(__name__)


class GameMap:
    """Flat, row-major tile grid plus the per-tile state layered on top of it.

    Every per-tile array has ``width * height`` entries addressed through
    :meth:`xy_idx`. :attr:`grid` exposes a ``(height, width)`` view of the
    tile array for vectorised carving; writes through it land in
    :attr:`tiles`.
    """

    def __init__(self, width: int, height: int, depth: int = 1):
        if width <= 0 or height <= 0:
            log.error("Invalid map dimensions", width=width, height=height)
            raise ValueError("Map width and height must be positive integers.")
        self._width = width
        self._height = height
        self.depth = depth

        size = width * height
        self.tiles: np.ndarray = np.full(size, TileType.WALL, dtype=np.uint8)
        self.revealed: np.ndarray = np.zeros(size, dtype=bool)
        self.visible: np.ndarray = np.zeros(size, dtype=bool)
        self.blocked: np.ndarray = np.zeros(size, dtype=bool)
        # Occupant identifiers, rebuilt by the indexing step every update
        self.tile_content: list[list[int]] = [[] for _ in range(size)]
        self.bloodstains: set[int] = set()

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def grid(self) -> np.ndarray:
        """``(height, width)`` view of :attr:`tiles`."""
        return self.tiles.reshape(self._height, self._width)

    def __len__(self) -> int:
        return self.tiles.shape[0]

    # ------------------------------------------------------------------
    # Index arithmetic
    # ------------------------------------------------------------------
    def xy_idx(self, x: int, y: int) -> int:
        """Flat index of ``(x, y)``. Callers must bounds-check first."""
        assert 0 <= x < self._width and 0 <= y < self._height, (x, y)
        return y * self._width + x

    def idx_xy(self, idx: int) -> tuple[int, int]:
        return idx % self._width, idx // self._width

    def in_bounds(self, x: int, y: int) -> bool:
        """Checks if the given coordinates are within the map boundaries."""
        return 0 <= x < self._width and 0 <= y < self._height

    # ------------------------------------------------------------------
    # Tile access
    # ------------------------------------------------------------------
    def get_tile(self, x: int, y: int) -> TileType:
        return TileType(int(self.tiles[self.xy_idx(x, y)]))

    def set_tile(self, x: int, y: int, tile: TileType) -> None:
        self.tiles[self.xy_idx(x, y)] = tile

    def is_walkable(self, x: int, y: int) -> bool:
        if not self.in_bounds(x, y):
            return False
        return TILE_DEFS[int(self.tiles[self.xy_idx(x, y)])].walkable

    def is_opaque(self, idx: int) -> bool:
        return self.tiles[idx] == TileType.WALL

    def count(self, tile: TileType) -> int:
        return int(np.count_nonzero(self.tiles == tile))

    # ------------------------------------------------------------------
    # Movement graph
    # ------------------------------------------------------------------
    def _is_exit_valid(self, x: int, y: int, entity_aware: bool) -> bool:
        if not self.in_bounds(x, y):
            return False
        idx = y * self._width + x
        if self.tiles[idx] == TileType.WALL:
            return False
        return not (entity_aware and self.blocked[idx])

    def get_exits(
        self, idx: int, entity_aware: bool = True
    ) -> list[tuple[int, float]]:
        """Neighbours reachable in one step from ``idx`` with their move cost.

        Walls are never exits. With ``entity_aware`` the ``blocked`` bitmap
        also rules tiles out, so live occupants are obstacles. Without it only
        walls are, which lets AI planners path through each other.
        """
        x, y = self.idx_xy(idx)
        w = self._width
        exits: list[tuple[int, float]] = []
        for dx, dy in CARDINAL_DIRECTIONS:
            if self._is_exit_valid(x + dx, y + dy, entity_aware):
                exits.append((idx + dy * w + dx, CARDINAL_MOVE_COST))
        for dx, dy in DIAGONAL_DIRECTIONS:
            if self._is_exit_valid(x + dx, y + dy, entity_aware):
                exits.append((idx + dy * w + dx, DIAGONAL_MOVE_COST))
        return exits

    def pathing_distance(self, idx1: int, idx2: int) -> float:
        """Chebyshev distance between two tiles; A* guidance only."""
        x1, y1 = self.idx_xy(idx1)
        x2, y2 = self.idx_xy(idx2)
        return float(max(abs(x1 - x2), abs(y1 - y2)))

    # ------------------------------------------------------------------
    # Occupancy
    # ------------------------------------------------------------------
    def populate_blocked(self) -> None:
        """Resets ``blocked`` so that exactly the wall tiles block."""
        np.equal(self.tiles, TileType.WALL, out=self.blocked)

    def clear_content_index(self) -> None:
        for content in self.tile_content:
            content.clear()

    # ------------------------------------------------------------------
    # Visibility
    # ------------------------------------------------------------------
    def compute_fov(self, x: int, y: int, radius: int) -> set[tuple[int, int]]:
        """Recomputes ``visible`` for an observer and marks those tiles revealed."""
        visible_tiles = field_of_view(self, x, y, radius)
        self.visible[:] = False
        for vx, vy in visible_tiles:
            idx = vy * self._width + vx
            self.visible[idx] = True
            self.revealed[idx] = True
        return visible_tiles

    # ------------------------------------------------------------------
    # Misc
    # ------------------------------------------------------------------
    def clone(self) -> "GameMap":
        copy = GameMap(self._width, self._height, self.depth)
        copy.tiles = self.tiles.copy()
        copy.revealed = self.revealed.copy()
        copy.visible = self.visible.copy()
        copy.blocked = self.blocked.copy()
        copy.tile_content = [list(content) for content in self.tile_content]
        copy.bloodstains = set(self.bloodstains)
        return copy

    def to_lines(
        self, marks: Optional[Iterable[tuple[int, int, str]]] = None
    ) -> list[str]:
        """ASCII dump of the map, one string per row, for logs and the CLI."""
        rows = [
            [TILE_DEFS[int(tile)].char for tile in row] for row in self.grid
        ]
        for mx, my, char in marks or ():
            if self.in_bounds(mx, my):
                rows[my][mx] = char
        return ["".join(row) for row in rows]


__all__ = ["GameMap"]
