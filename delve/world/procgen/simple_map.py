# delve/world/procgen/simple_map.py
from typing import Final

import structlog

from delve.game_rng import GameRNG
from delve.world.procgen.base import MapBuilder
from delve.world.procgen.common import (
    apply_horizontal_tunnel,
    apply_room_to_map,
    apply_vertical_tunnel,
)
from delve.world.rect import Rect

log = structlog.get_logger(__name__)

# --- Configuration ---
MAX_ROOMS: Final[int] = 30
MIN_SIZE: Final[int] = 6
MAX_SIZE: Final[int] = 10


class SimpleMapBuilder(MapBuilder):
    """Non-overlapping random rooms chained together by L-shaped tunnels."""

    def name(self) -> str:
        return "Simple Map"

    def _generate(self, rng: GameRNG) -> None:
        width, height = self.map.width, self.map.height
        self.take_snapshot()

        for _ in range(MAX_ROOMS):
            w = rng.get_int(MIN_SIZE, MAX_SIZE)
            h = rng.get_int(MIN_SIZE, MAX_SIZE)
            if width - w - 1 <= 1 or height - h - 1 <= 1:
                continue
            x = rng.get_randrange(1, width - w - 1)
            y = rng.get_randrange(1, height - h - 1)
            new_room = Rect.from_size(x, y, w, h)
            if any(new_room.intersects(other) for other in self.rooms):
                continue

            apply_room_to_map(self.map, new_room)
            self.take_snapshot()

            if self.rooms:
                new_x, new_y = new_room.center
                prev_x, prev_y = self.rooms[-1].center
                if rng.coin_flip():
                    apply_horizontal_tunnel(self.map, prev_x, new_x, prev_y)
                    apply_vertical_tunnel(self.map, prev_y, new_y, new_x)
                else:
                    apply_vertical_tunnel(self.map, prev_y, new_y, prev_x)
                    apply_horizontal_tunnel(self.map, prev_x, new_x, new_y)
                self.take_snapshot()
            self.rooms.append(new_room)

        log.debug("Rooms placed", builder=self.name(), rooms=len(self.rooms))
        self._finish_rooms()
