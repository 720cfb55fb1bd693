# delve/world/procgen/maze.py
from typing import Final, List

import structlog

from delve.constants import TileType
from delve.game_rng import GameRNG
from delve.world.game_map import GameMap
from delve.world.procgen.base import MapBuilder

log = structlog.get_logger(__name__)

# Wall slots in Cell.walls
TOP: Final[int] = 0
RIGHT: Final[int] = 1
BOTTOM: Final[int] = 2
LEFT: Final[int] = 3

SNAPSHOT_EVERY: Final[int] = 50
MAZE_START: Final[tuple[int, int]] = (2, 2)


class Cell:
    __slots__ = ("row", "column", "walls", "visited")

    def __init__(self, row: int, column: int):
        self.row = row
        self.column = column
        self.walls = [True, True, True, True]
        self.visited = False

    @property
    def tile(self) -> tuple[int, int]:
        """Map coordinates of this cell's centre."""
        return (self.column + 1) * 2, (self.row + 1) * 2


class MazeGrid:
    """Logical cell grid carved with a randomised depth-first growing tree."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.cells: List[Cell] = [
            Cell(row, column) for row in range(height) for column in range(width)
        ]
        self.backtrace: List[int] = []
        self.current = 0
        self.passages = 0

    def cell_index(self, row: int, column: int) -> int:
        return row * self.width + column

    def available_neighbours(self) -> List[int]:
        """Unvisited neighbours of the current cell: top, bottom, left, right."""
        cell = self.cells[self.current]
        row, column = cell.row, cell.column
        candidates = []
        if row > 0:
            candidates.append(self.cell_index(row - 1, column))
        if row < self.height - 1:
            candidates.append(self.cell_index(row + 1, column))
        if column > 0:
            candidates.append(self.cell_index(row, column - 1))
        if column < self.width - 1:
            candidates.append(self.cell_index(row, column + 1))
        return [idx for idx in candidates if not self.cells[idx].visited]

    def remove_walls(self, current_idx: int, next_idx: int) -> None:
        current = self.cells[current_idx]
        nxt = self.cells[next_idx]
        dx = current.column - nxt.column
        dy = current.row - nxt.row
        if dx == 1:
            current.walls[LEFT] = nxt.walls[RIGHT] = False
        elif dx == -1:
            current.walls[RIGHT] = nxt.walls[LEFT] = False
        elif dy == 1:
            current.walls[TOP] = nxt.walls[BOTTOM] = False
        elif dy == -1:
            current.walls[BOTTOM] = nxt.walls[TOP] = False
        else:
            raise ValueError(f"Cells {current_idx} and {next_idx} are not adjacent")
        self.passages += 1

    def step(self, rng: GameRNG) -> bool:
        """Advances the carve by one move. Returns ``False`` once finished."""
        neighbours = self.available_neighbours()
        if neighbours:
            nxt = rng.choice(neighbours)
            self.backtrace.append(self.current)
            self.remove_walls(self.current, nxt)
            self.current = nxt
            self.cells[nxt].visited = True
            return True
        if self.backtrace:
            self.current = self.backtrace.pop()
            return True
        return False

    def copy_to_map(self, game_map: GameMap) -> None:
        for cell in self.cells:
            x, y = cell.tile
            game_map.set_tile(x, y, TileType.FLOOR)
            if not cell.walls[TOP]:
                game_map.set_tile(x, y - 1, TileType.FLOOR)
            if not cell.walls[RIGHT]:
                game_map.set_tile(x + 1, y, TileType.FLOOR)
            if not cell.walls[BOTTOM]:
                game_map.set_tile(x, y + 1, TileType.FLOOR)
            if not cell.walls[LEFT]:
                game_map.set_tile(x - 1, y, TileType.FLOOR)


class MazeBuilder(MapBuilder):
    """Perfect maze at half map resolution, entered at its top-left cell."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.grid = MazeGrid(
            max(self.map.width // 2 - 2, 0), max(self.map.height // 2 - 2, 0)
        )

    def name(self) -> str:
        return "Maze"

    def _generate(self, rng: GameRNG) -> None:
        self.take_snapshot()
        grid = self.grid

        if grid.cells:
            grid.cells[0].visited = True
            iterations = 0
            while grid.step(rng):
                iterations += 1
                if self.snapshots_enabled and iterations % SNAPSHOT_EVERY == 0:
                    grid.copy_to_map(self.map)
                    self.take_snapshot()
            grid.copy_to_map(self.map)
            self.take_snapshot()
            log.debug(
                "Maze carved",
                builder=self.name(),
                cells=len(grid.cells),
                passages=grid.passages,
                iterations=iterations,
            )

        self.starting_position = MAZE_START
        self._finish_from_start()
