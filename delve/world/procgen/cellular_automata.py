# delve/world/procgen/cellular_automata.py
from typing import Final

import numpy as np
import structlog

from delve.constants import TileType
from delve.game_rng import GameRNG
from delve.world.procgen.base import MapBuilder

log = structlog.get_logger(__name__)

# --- Configuration ---
# A roll in 0..99 above this makes the cell a wall
WALL_ROLL_THRESHOLD: Final[int] = 55
SMOOTHING_ITERATIONS: Final[int] = 15
CROWDED_WALL_COUNT: Final[int] = 4

_NEIGHBOUR_OFFSETS: Final[tuple[tuple[int, int], ...]] = tuple(
    (dy, dx) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dy, dx) != (0, 0)
)


def count_wall_neighbours(grid: np.ndarray) -> np.ndarray:
    """Number of wall tiles among each tile's 8 neighbours.

    Off-map neighbours count as walls.
    """
    padded = np.pad(grid == TileType.WALL, 1, constant_values=True).astype(np.int8)
    height, width = grid.shape
    counts = np.zeros((height, width), dtype=np.int8)
    for dy, dx in _NEIGHBOUR_OFFSETS:
        counts += padded[1 + dy : 1 + dy + height, 1 + dx : 1 + dx + width]
    return counts


def smooth_caves(grid: np.ndarray) -> None:
    """One automaton step over the interior, applied simultaneously."""
    counts = count_wall_neighbours(grid)[1:-1, 1:-1]
    becomes_wall = (counts > CROWDED_WALL_COUNT) | (counts == 0)
    grid[1:-1, 1:-1] = np.where(becomes_wall, TileType.WALL, TileType.FLOOR)


class CellularAutomataBuilder(MapBuilder):
    """Random noise smoothed into caverns."""

    def name(self) -> str:
        return "Cellular Automata"

    def _generate(self, rng: GameRNG) -> None:
        self._carve_caves(rng)
        self._finish_from_start()

    def _carve_caves(self, rng: GameRNG) -> None:
        """Noise, smoothing and the start tile; no reachability pass yet."""
        grid = self.map.grid
        height, width = grid.shape
        self.take_snapshot()

        rolls = rng.get_ints_array(0, 99, (height - 2) * (width - 2))
        grid[1:-1, 1:-1] = np.where(
            rolls.reshape(height - 2, width - 2) > WALL_ROLL_THRESHOLD,
            TileType.WALL,
            TileType.FLOOR,
        )
        self.take_snapshot()

        for _ in range(SMOOTHING_ITERATIONS):
            smooth_caves(grid)
            self.take_snapshot()

        start_x, start_y = width // 2, height // 2
        while start_x > 1 and grid[start_y, start_x] != TileType.FLOOR:
            start_x -= 1
        self.starting_position = (start_x, start_y)
        log.debug(
            "Cave start located", builder=self.name(), start=self.starting_position
        )
