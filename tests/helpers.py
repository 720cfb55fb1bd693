from delve.constants import TileType
from delve.world.game_map import GameMap


def open_map(width: int = 10, height: int = 10) -> GameMap:
    """A map with a one-tile wall border around open floor."""
    game_map = GameMap(width, height)
    game_map.grid[1:-1, 1:-1] = TileType.FLOOR
    game_map.populate_blocked()
    return game_map


def map_from_rows(rows: list[str]) -> GameMap:
    """Builds a map from ASCII rows using ``#``, ``.`` and ``>``."""
    chars = {"#": TileType.WALL, ".": TileType.FLOOR, ">": TileType.DOWN_STAIRS}
    game_map = GameMap(len(rows[0]), len(rows))
    for y, row in enumerate(rows):
        for x, char in enumerate(row):
            game_map.set_tile(x, y, chars[char])
    game_map.populate_blocked()
    return game_map
