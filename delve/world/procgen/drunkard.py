# delve/world/procgen/drunkard.py
from dataclasses import dataclass
from enum import Enum
from typing import Final

import numpy as np
import structlog

from delve.constants import TileType
from delve.game_rng import GameRNG
from delve.world.procgen.base import MapBuilder
from delve.world.procgen.common import Symmetry, paint

log = structlog.get_logger(__name__)

# --- Configuration ---
MAX_DRUNKARDS: Final[int] = 10_000
SNAPSHOT_EVERY: Final[int] = 10


class DrunkSpawnMode(Enum):
    STARTING_POINT = "starting_point"
    RANDOM = "random"


@dataclass(frozen=True)
class DrunkardSettings:
    spawn_mode: DrunkSpawnMode
    lifetime: int
    floor_percent: float
    brush_size: int = 0
    symmetry: Symmetry = Symmetry.NONE
    label: str = "Drunkard"


OPEN_AREA: Final = DrunkardSettings(
    DrunkSpawnMode.STARTING_POINT, 400, 0.5, label="Drunkard (Open Area)"
)
OPEN_HALLS: Final = DrunkardSettings(
    DrunkSpawnMode.RANDOM, 400, 0.5, label="Drunkard (Open Halls)"
)
WINDING_PASSAGES: Final = DrunkardSettings(
    DrunkSpawnMode.RANDOM, 100, 0.4, label="Drunkard (Winding)"
)
FAT_PASSAGES: Final = DrunkardSettings(
    DrunkSpawnMode.RANDOM, 100, 0.4, brush_size=1, label="Drunkard (Fat Passages)"
)
FEARFUL_SYMMETRY: Final = DrunkardSettings(
    DrunkSpawnMode.RANDOM,
    100,
    0.4,
    symmetry=Symmetry.BOTH,
    label="Drunkard (Symmetry)",
)


class DrunkardsWalkBuilder(MapBuilder):
    """Random walkers carve from the centre until enough of the map is open."""

    def __init__(self, settings: DrunkardSettings = OPEN_AREA, **kwargs):
        super().__init__(**kwargs)
        self.settings = settings

    def name(self) -> str:
        return self.settings.label

    def _spawn_point(self, rng: GameRNG) -> tuple[int, int]:
        if self.settings.spawn_mode is DrunkSpawnMode.STARTING_POINT:
            return self.starting_position
        floors = np.flatnonzero(self.map.tiles == TileType.FLOOR)
        if floors.size == 1:
            return self.starting_position
        return self.map.idx_xy(int(floors[rng.get_randrange(floors.size)]))

    def _generate(self, rng: GameRNG) -> None:
        width, height = self.map.width, self.map.height
        settings = self.settings
        self.take_snapshot()

        self.starting_position = (width // 2, height // 2)
        self.map.set_tile(*self.starting_position, TileType.FLOOR)

        target_floor = int(width * height * settings.floor_percent)
        drunkards = 0
        while (
            self.map.count(TileType.FLOOR) < target_floor and drunkards < MAX_DRUNKARDS
        ):
            x, y = self._spawn_point(rng)
            # 0 up, 1 down, 2 left, 3 right; the walker never touches the border
            for direction in rng.get_ints_array(0, 3, settings.lifetime).tolist():
                if direction == 0:
                    if y > 1:
                        y -= 1
                elif direction == 1:
                    if y < height - 2:
                        y += 1
                elif direction == 2:
                    if x > 1:
                        x -= 1
                elif x < width - 2:
                    x += 1
                paint(self.map, settings.symmetry, settings.brush_size, x, y)

            drunkards += 1
            if drunkards % SNAPSHOT_EVERY == 0:
                self.take_snapshot()

        log.debug(
            "Drunkards finished",
            builder=self.name(),
            drunkards=drunkards,
            floors=self.map.count(TileType.FLOOR),
            target=target_floor,
        )
        self._finish_from_start()
