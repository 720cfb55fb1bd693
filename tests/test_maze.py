import pytest

from delve.constants import TileType
from delve.game_rng import GameRNG
from delve.world.connectivity import dijkstra_map
from delve.world.procgen.maze import MAZE_START, MazeBuilder, MazeGrid


def carve(width, height, seed):
    grid = MazeGrid(width, height)
    grid.cells[0].visited = True
    rng = GameRNG(seed=seed)
    while grid.step(rng):
        pass
    return grid


@pytest.mark.parametrize("seed", [1, 2, 3])
def test_perfect_maze_passage_count(seed):
    grid = carve(9, 6, seed)
    assert grid.passages == len(grid.cells) - 1
    assert all(cell.visited for cell in grid.cells)


def test_remove_walls_requires_adjacent_cells():
    grid = MazeGrid(3, 3)
    with pytest.raises(ValueError):
        grid.remove_walls(0, 8)


def test_remove_walls_opens_both_sides():
    grid = MazeGrid(2, 1)
    grid.remove_walls(0, 1)
    assert not grid.cells[0].walls[1]
    assert not grid.cells[1].walls[3]


def test_cell_tile_mapping():
    grid = MazeGrid(4, 4)
    assert grid.cells[0].tile == MAZE_START
    assert grid.cells[grid.cell_index(1, 2)].tile == (6, 4)


@pytest.mark.parametrize("seed", [4, 5])
def test_maze_builder_opens_cells_and_passages(seed):
    builder = MazeBuilder(width=40, height=30)
    builder.build(GameRNG(seed=seed))
    game_map = builder.get_map()
    cells = len(builder.grid.cells)
    assert cells == (40 // 2 - 2) * (30 // 2 - 2)
    # One floor per cell plus one per removed wall; nothing is culled
    assert len(game_map) - game_map.count(TileType.WALL) == 2 * cells - 1
    assert builder.get_starting_position() == MAZE_START

    distances = dijkstra_map(game_map, [game_map.xy_idx(*MAZE_START)])
    for cell in builder.grid.cells:
        assert distances[game_map.xy_idx(*cell.tile)] != float("inf")


def test_single_cell_maze():
    builder = MazeBuilder(width=6, height=6)
    builder.build(GameRNG(seed=1))
    game_map = builder.get_map()
    assert builder.exit_idx == game_map.xy_idx(*MAZE_START)
    assert game_map.count(TileType.DOWN_STAIRS) == 1
