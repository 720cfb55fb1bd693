# delve/world/procgen/voronoi.py
from typing import Final, List

import numpy as np
import structlog

from delve.constants import TileType
from delve.game_rng import GameRNG
from delve.world.distance import DistanceAlg
from delve.world.procgen.base import MapBuilder
from delve.world.procgen.common import draw_corridor

log = structlog.get_logger(__name__)

# --- Configuration ---
DEFAULT_SEEDS: Final[int] = 64
NEIGHBOURS_TO_JOIN: Final[int] = 2
START_SEARCH_RADIUS: Final[int] = 20

_NEIGHBOUR_OFFSETS: Final[tuple[tuple[int, int], ...]] = tuple(
    (dy, dx) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dy, dx) != (0, 0)
)


def nearest_seed_map(
    seeds: List[tuple[int, int]], width: int, height: int, metric: DistanceAlg
) -> np.ndarray:
    """``(height, width)`` array of the index of each tile's nearest seed.

    Ties go to the seed listed first.
    """
    ys, xs = np.mgrid[0:height, 0:width]
    distances = np.stack([metric.distance_field(xs, ys, sx, sy) for sx, sy in seeds])
    return np.argmin(distances, axis=0)


def region_boundaries(memberships: np.ndarray) -> np.ndarray:
    """Interior mask of tiles with a neighbour in another seed's region."""
    height, width = memberships.shape
    centre = memberships[1:-1, 1:-1]
    boundary = np.zeros(centre.shape, dtype=bool)
    for dy, dx in _NEIGHBOUR_OFFSETS:
        neighbour = memberships[1 + dy : height - 1 + dy, 1 + dx : width - 1 + dx]
        boundary |= neighbour != centre
    return boundary


class VoronoiCellBuilder(MapBuilder):
    """Walled Voronoi cells, each joined to its nearest neighbours."""

    def __init__(
        self,
        metric: DistanceAlg = DistanceAlg.PYTHAGORAS,
        n_seeds: int = DEFAULT_SEEDS,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.metric = metric
        self.n_seeds = n_seeds
        self.seeds: List[tuple[int, int]] = []

    def name(self) -> str:
        if self.metric is DistanceAlg.PYTHAGORAS:
            label = "Euclidean"
        else:
            label = self.metric.name.title()
        return f"Voronoi ({label})"

    def _scatter_seeds(self, rng: GameRNG) -> None:
        width, height = self.map.width, self.map.height
        wanted = min(self.n_seeds, (width - 2) * (height - 2))
        taken = set()
        while len(self.seeds) < wanted:
            seed = (rng.get_randrange(1, width - 1), rng.get_randrange(1, height - 1))
            if seed not in taken:
                taken.add(seed)
                self.seeds.append(seed)

    def _find_start(self) -> tuple[int, int]:
        """Map centre if open, else the first floor found on growing square rings."""
        width, height = self.map.width, self.map.height
        cx, cy = width // 2, height // 2
        grid = self.map.grid
        if grid[cy, cx] == TileType.FLOOR:
            return cx, cy
        for radius in range(1, START_SEARCH_RADIUS):
            for dy in range(-radius, radius + 1):
                for dx in range(-radius, radius + 1):
                    x, y = cx + dx, cy + dy
                    if not (0 < x < width - 1 and 0 < y < height - 1):
                        continue
                    if grid[y, x] == TileType.FLOOR:
                        return x, y
        log.warning("No floor near the map centre", builder=self.name())
        return cx, cy

    def _nearest_seeds(self, i: int) -> List[int]:
        origin = self.seeds[i]
        others = [
            (j, self.metric.distance2d(origin, seed))
            for j, seed in enumerate(self.seeds)
            if j != i
        ]
        others.sort(key=lambda pair: pair[1])
        return [j for j, _ in others[:NEIGHBOURS_TO_JOIN]]

    def _generate(self, rng: GameRNG) -> None:
        width, height = self.map.width, self.map.height
        self.take_snapshot()

        self._scatter_seeds(rng)
        if not self.seeds:
            self.starting_position = (width // 2, height // 2)
            self._finish_from_start()
            return

        memberships = nearest_seed_map(self.seeds, width, height, self.metric)
        self.map.grid[1:-1, 1:-1] = np.where(
            region_boundaries(memberships), TileType.WALL, TileType.FLOOR
        )
        self.take_snapshot()

        for i, (x1, y1) in enumerate(self.seeds):
            for j in self._nearest_seeds(i):
                x2, y2 = self.seeds[j]
                draw_corridor(self.map, x1, y1, x2, y2)
        self.take_snapshot()

        self.starting_position = self._find_start()
        log.debug(
            "Voronoi cells drawn",
            builder=self.name(),
            seeds=len(self.seeds),
            start=self.starting_position,
        )
        self._finish_from_start()
