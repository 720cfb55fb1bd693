# delve/world/procgen/bsp_interior.py
from typing import Final, List

import structlog

from delve.constants import TileType
from delve.game_rng import GameRNG
from delve.world.procgen.base import MapBuilder
from delve.world.procgen.common import draw_corridor
from delve.world.rect import Rect

log = structlog.get_logger(__name__)

# --- Configuration ---
MIN_ROOM_SIZE: Final[int] = 8


def _subdivide(rect: Rect, rng: GameRNG, leaves: List[Rect]) -> None:
    """Splits ``rect`` in two, recursing while the halves are large enough.

    Leaves are appended depth-first, first half before second half.
    """
    half_width = rect.width // 2
    half_height = rect.height // 2

    if rng.get_int(0, 1) == 0:
        halves = (
            Rect.from_size(rect.x1, rect.y1, half_width - 1, rect.height),
            Rect.from_size(rect.x1 + half_width, rect.y1, half_width, rect.height),
        )
        recurse = half_width > MIN_ROOM_SIZE
    else:
        halves = (
            Rect.from_size(rect.x1, rect.y1, rect.width, half_height - 1),
            Rect.from_size(rect.x1, rect.y1 + half_height, rect.width, half_height),
        )
        recurse = half_height > MIN_ROOM_SIZE

    for half in halves:
        if recurse:
            _subdivide(half, rng, leaves)
        else:
            leaves.append(half)


def random_interior_point(rng: GameRNG, room: Rect) -> tuple[int, int]:
    x = room.x1 + 1 + rng.get_randrange(max(room.x2 - room.x1 - 1, 1))
    y = room.y1 + 1 + rng.get_randrange(max(room.y2 - room.y1 - 1, 1))
    return x, y


class BspInteriorBuilder(MapBuilder):
    """Building interior: the whole map is bisected into abutting rooms."""

    def name(self) -> str:
        return "BSP Interior"

    def _generate(self, rng: GameRNG) -> None:
        self.take_snapshot()

        leaves: List[Rect] = []
        _subdivide(
            Rect.from_size(1, 1, self.map.width - 2, self.map.height - 2), rng, leaves
        )

        grid = self.map.grid
        for rect in leaves:
            # Leaf edges stay wall, so neighbouring rooms share a partition
            if rect.x2 - rect.x1 < 2 or rect.y2 - rect.y1 < 2:
                continue
            grid[rect.y1 + 1 : rect.y2, rect.x1 + 1 : rect.x2] = TileType.FLOOR
            self.rooms.append(rect)
            self.take_snapshot()

        self.rooms.sort(key=lambda room: room.x1)
        for room, next_room in zip(self.rooms, self.rooms[1:]):
            start_x, start_y = random_interior_point(rng, room)
            end_x, end_y = random_interior_point(rng, next_room)
            draw_corridor(self.map, start_x, start_y, end_x, end_y)
            self.take_snapshot()

        log.debug("Interior partitioned", builder=self.name(), rooms=len(self.rooms))
        self._finish_rooms()
