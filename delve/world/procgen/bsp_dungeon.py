# delve/world/procgen/bsp_dungeon.py
from typing import Final, List

import numpy as np
import structlog

from delve.constants import TileType
from delve.game_rng import GameRNG
from delve.world.procgen.base import MapBuilder
from delve.world.procgen.common import apply_room_to_map, draw_corridor
from delve.world.rect import Rect

log = structlog.get_logger(__name__)

# --- Configuration ---
PLACEMENT_ATTEMPTS: Final[int] = 240
MIN_ROOM_SIDE: Final[int] = 3
MAX_ROOM_SIDE: Final[int] = 10
MAX_ROOM_OFFSET: Final[int] = 6
ROOM_BUFFER: Final[int] = 2


def random_point_in_room(rng: GameRNG, room: Rect) -> tuple[int, int]:
    """A random tile of ``room``'s carved floor."""
    x = room.x1 + 1 + rng.get_randrange(max(room.x2 - room.x1, 1))
    y = room.y1 + 1 + rng.get_randrange(max(room.y2 - room.y1, 1))
    return x, y


class BspDungeonBuilder(MapBuilder):
    """Rooms dropped into a quartered space-partition, joined left to right."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.rects: List[Rect] = []

    def name(self) -> str:
        return "BSP Dungeon"

    def _add_subrects(self, rect: Rect) -> None:
        half_width = max(rect.width // 2, 1)
        half_height = max(rect.height // 2, 1)
        self.rects.append(Rect.from_size(rect.x1, rect.y1, half_width, half_height))
        self.rects.append(
            Rect.from_size(rect.x1, rect.y1 + half_height, half_width, half_height)
        )
        self.rects.append(
            Rect.from_size(rect.x1 + half_width, rect.y1, half_width, half_height)
        )
        self.rects.append(
            Rect.from_size(
                rect.x1 + half_width, rect.y1 + half_height, half_width, half_height
            )
        )

    def _random_sub_rect(self, rect: Rect, rng: GameRNG) -> Rect:
        w = max(MIN_ROOM_SIDE, rng.get_int(1, min(rect.width, MAX_ROOM_SIDE)))
        h = max(MIN_ROOM_SIDE, rng.get_int(1, min(rect.height, MAX_ROOM_SIDE)))
        x_offset = rng.get_randrange(MAX_ROOM_OFFSET)
        y_offset = rng.get_randrange(MAX_ROOM_OFFSET)
        return Rect.from_size(rect.x1 + x_offset, rect.y1 + y_offset, w, h)

    def _is_possible(self, rect: Rect) -> bool:
        """True when ``rect`` plus its buffer stays off the border and is all wall."""
        x1, y1 = rect.x1 - ROOM_BUFFER, rect.y1 - ROOM_BUFFER
        x2, y2 = rect.x2 + ROOM_BUFFER, rect.y2 + ROOM_BUFFER
        if x1 < 1 or y1 < 1 or x2 > self.map.width - 2 or y2 > self.map.height - 2:
            return False
        region = self.map.grid[y1 : y2 + 1, x1 : x2 + 1]
        return bool(np.all(region == TileType.WALL))

    def _generate(self, rng: GameRNG) -> None:
        width, height = self.map.width, self.map.height
        self.take_snapshot()

        self.rects = [Rect.from_size(2, 2, width - 5, height - 5)]
        self._add_subrects(self.rects[0])

        for _ in range(PLACEMENT_ATTEMPTS):
            parent = rng.choice(self.rects)
            candidate = self._random_sub_rect(parent, rng)
            if self._is_possible(candidate):
                apply_room_to_map(self.map, candidate)
                self.rooms.append(candidate)
                self._add_subrects(parent)
                self.take_snapshot()

        self.rooms.sort(key=lambda room: room.x1)
        for room, next_room in zip(self.rooms, self.rooms[1:]):
            start_x, start_y = random_point_in_room(rng, room)
            end_x, end_y = random_point_in_room(rng, next_room)
            draw_corridor(self.map, start_x, start_y, end_x, end_y)
            self.take_snapshot()

        log.debug("Rooms placed", builder=self.name(), rooms=len(self.rooms))
        self._finish_rooms()
