# delve/world/procgen/dla.py
"""Diffusion-limited aggregation.

Particles wander until they hit the growing floor mass and stick there, which
gives branching, coral-like caves around the map centre.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Final, Optional

import numpy as np
import structlog
from numba import njit

from delve.constants import TileType
from delve.game_rng import GameRNG
from delve.world.los import bresenham_line
from delve.world.procgen.base import MapBuilder
from delve.world.procgen.common import Symmetry, paint

log = structlog.get_logger(__name__)

# --- Configuration ---
MAX_PARTICLES: Final[int] = 50_000
SNAPSHOT_EVERY: Final[int] = 10
# Directions are drawn in batches; a particle that has not settled after
# MAX_WALK_STEPS is dropped without painting.
WALK_BATCH: Final[int] = 1024
MAX_WALK_STEPS: Final[int] = 200 * WALK_BATCH
# Particles stay at least this far from the map edge
WALK_MARGIN: Final[int] = 2


class DLAAlgorithm(Enum):
    WALK_INWARDS = "walk_inwards"
    WALK_OUTWARDS = "walk_outwards"
    CENTRAL_ATTRACTOR = "central_attractor"


@dataclass(frozen=True)
class DLASettings:
    algorithm: DLAAlgorithm
    brush_size: int = 0
    symmetry: Symmetry = Symmetry.NONE
    floor_percent: float = 0.25
    label: str = "DLA"


WALK_INWARDS: Final = DLASettings(DLAAlgorithm.WALK_INWARDS, label="DLA (Walk Inwards)")
WALK_OUTWARDS: Final = DLASettings(
    DLAAlgorithm.WALK_OUTWARDS, label="DLA (Walk Outwards)"
)
CENTRAL_ATTRACTOR: Final = DLASettings(
    DLAAlgorithm.CENTRAL_ATTRACTOR, label="DLA (Central Attractor)"
)
INSECTOID: Final = DLASettings(
    DLAAlgorithm.CENTRAL_ATTRACTOR,
    symmetry=Symmetry.HORIZONTAL,
    label="DLA (Insectoid)",
)


@njit(cache=True)
def _random_walk(
    grid: np.ndarray,
    x: int,
    y: int,
    prev_x: int,
    prev_y: int,
    directions: np.ndarray,
    walk_on: int,
    max_x: int,
    max_y: int,
):
    """Steps through ``directions`` while standing on ``walk_on`` tiles.

    Returns ``(x, y, prev_x, prev_y, stopped)`` where ``stopped`` tells whether
    the walker left ``walk_on`` ground before running out of directions.
    """
    for i in range(directions.shape[0]):
        if grid[y, x] != walk_on:
            return x, y, prev_x, prev_y, True
        prev_x = x
        prev_y = y
        d = directions[i]
        if d == 0:
            if x > 2:
                x -= 1
        elif d == 1:
            if x < max_x:
                x += 1
        elif d == 2:
            if y > 2:
                y -= 1
        else:
            if y < max_y:
                y += 1
    return x, y, prev_x, prev_y, grid[y, x] != walk_on


class DLABuilder(MapBuilder):
    def __init__(self, settings: DLASettings = WALK_INWARDS, **kwargs):
        super().__init__(**kwargs)
        self.settings = settings

    def name(self) -> str:
        return self.settings.label

    def _walk(
        self, rng: GameRNG, x: int, y: int, walk_on: TileType
    ) -> Optional[tuple[int, int, int, int]]:
        grid = self.map.grid
        prev_x, prev_y = x, y
        for _ in range(MAX_WALK_STEPS // WALK_BATCH):
            directions = rng.get_ints_array(0, 3, WALK_BATCH)
            x, y, prev_x, prev_y, stopped = _random_walk(
                grid,
                x,
                y,
                prev_x,
                prev_y,
                directions,
                int(walk_on),
                self.map.width - WALK_MARGIN,
                self.map.height - WALK_MARGIN,
            )
            if stopped:
                return int(x), int(y), int(prev_x), int(prev_y)
        return None

    def _random_start(self, rng: GameRNG) -> tuple[int, int]:
        x = rng.get_randrange(WALK_MARGIN, self.map.width - WALK_MARGIN)
        y = rng.get_randrange(WALK_MARGIN, self.map.height - WALK_MARGIN)
        return x, y

    def _attract(self, rng: GameRNG, center_x: int, center_y: int) -> tuple[int, int]:
        """Last wall cell on the line from a random point to the centre.

        When the line starts on floor the start point itself is returned.
        """
        start_x, start_y = self._random_start(rng)
        path = bresenham_line(start_x, start_y, center_x, center_y)
        on_wall = self.map.grid[path[:, 1], path[:, 0]] == TileType.WALL
        if on_wall.all():
            return int(path[-1, 0]), int(path[-1, 1])
        first_open = int(np.argmin(on_wall))
        if first_open == 0:
            return start_x, start_y
        return int(path[first_open - 1, 0]), int(path[first_open - 1, 1])

    def _generate(self, rng: GameRNG) -> None:
        settings = self.settings
        width, height = self.map.width, self.map.height
        self.take_snapshot()

        center_x, center_y = width // 2, height // 2
        for dx, dy in ((0, 0), (-1, 0), (1, 0), (0, -1), (0, 1)):
            if self.map.in_bounds(center_x + dx, center_y + dy):
                self.map.set_tile(center_x + dx, center_y + dy, TileType.FLOOR)
        self.starting_position = (center_x, center_y)

        target_floor = int(width * height * settings.floor_percent)
        particles = 0
        dropped = 0
        while (
            self.map.count(TileType.FLOOR) < target_floor
            and particles < MAX_PARTICLES
        ):
            target: Optional[tuple[int, int]] = None
            if settings.algorithm is DLAAlgorithm.WALK_INWARDS:
                start_x, start_y = self._random_start(rng)
                walked = self._walk(rng, start_x, start_y, TileType.WALL)
                if walked is not None:
                    target = (walked[2], walked[3])
            elif settings.algorithm is DLAAlgorithm.WALK_OUTWARDS:
                walked = self._walk(rng, center_x, center_y, TileType.FLOOR)
                if walked is not None:
                    target = (walked[0], walked[1])
            else:
                target = self._attract(rng, center_x, center_y)

            if target is None:
                dropped += 1
            else:
                paint(self.map, settings.symmetry, settings.brush_size, *target)

            particles += 1
            if particles % SNAPSHOT_EVERY == 0:
                self.take_snapshot()

        log.debug(
            "Aggregation finished",
            builder=self.name(),
            particles=particles,
            dropped=dropped,
            floors=self.map.count(TileType.FLOOR),
            target=target_floor,
        )
        self._finish_from_start()
