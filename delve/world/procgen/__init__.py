"""Level builders and the dispatcher that picks one.

Every builder satisfies :class:`~delve.world.procgen.base.MapBuilder`.
:class:`BuilderType` names each concrete preset so callers (config files,
the CLI, tests) can select one explicitly, and :func:`random_builder` picks
one of the implemented presets for a new level.
"""

from __future__ import annotations

from enum import Enum
from functools import partial
from typing import Callable, Dict, Final, Optional

import structlog

from delve.constants import MAP_HEIGHT, MAP_WIDTH
from delve.game_rng import GameRNG
from delve.world.distance import DistanceAlg
from delve.world.procgen import dla, drunkard
from delve.world.procgen.base import MapBuilder
from delve.world.procgen.bsp_dungeon import BspDungeonBuilder
from delve.world.procgen.bsp_interior import BspInteriorBuilder
from delve.world.procgen.cellular_automata import CellularAutomataBuilder
from delve.world.procgen.dla import DLABuilder
from delve.world.procgen.drunkard import DrunkardsWalkBuilder
from delve.world.procgen.maze import MazeBuilder
from delve.world.procgen.prefab import PrefabBuilder, PrefabMode
from delve.world.procgen.simple_map import SimpleMapBuilder
from delve.world.procgen.voronoi import VoronoiCellBuilder
from delve.world.procgen.wfc import WaveFunctionCollapseBuilder

log = structlog.get_logger(__name__)


class BuilderType(Enum):
    SIMPLE_MAP = "simple_map"
    BSP_DUNGEON = "bsp_dungeon"
    BSP_INTERIOR = "bsp_interior"
    CELLULAR_AUTOMATA = "cellular_automata"
    DRUNKARD_OPEN_AREA = "drunkard_open_area"
    DRUNKARD_OPEN_HALLS = "drunkard_open_halls"
    DRUNKARD_WINDING = "drunkard_winding"
    DRUNKARD_FAT_PASSAGES = "drunkard_fat_passages"
    DRUNKARD_SYMMETRY = "drunkard_symmetry"
    MAZE = "maze"
    DLA_WALK_INWARDS = "dla_walk_inwards"
    DLA_WALK_OUTWARDS = "dla_walk_outwards"
    DLA_CENTRAL_ATTRACTOR = "dla_central_attractor"
    DLA_INSECTOID = "dla_insectoid"
    VORONOI_EUCLIDEAN = "voronoi_euclidean"
    VORONOI_MANHATTAN = "voronoi_manhattan"
    VORONOI_CHEBYSHEV = "voronoi_chebyshev"
    PREFAB_VAULTS = "prefab_vaults"
    PREFAB_SECTIONAL = "prefab_sectional"
    WFC = "wfc"

    def create(
        self,
        depth: int = 1,
        width: int = MAP_WIDTH,
        height: int = MAP_HEIGHT,
        snapshots: bool = False,
    ) -> MapBuilder:
        return BUILDER_FACTORIES[self](
            depth=depth, width=width, height=height, snapshots=snapshots
        )

    @property
    def implemented(self) -> bool:
        return self is not BuilderType.WFC


# Mapping from builder type to the callable that constructs it.
BUILDER_FACTORIES: Final[Dict[BuilderType, Callable[..., MapBuilder]]] = {
    BuilderType.SIMPLE_MAP: SimpleMapBuilder,
    BuilderType.BSP_DUNGEON: BspDungeonBuilder,
    BuilderType.BSP_INTERIOR: BspInteriorBuilder,
    BuilderType.CELLULAR_AUTOMATA: CellularAutomataBuilder,
    BuilderType.DRUNKARD_OPEN_AREA: partial(DrunkardsWalkBuilder, drunkard.OPEN_AREA),
    BuilderType.DRUNKARD_OPEN_HALLS: partial(DrunkardsWalkBuilder, drunkard.OPEN_HALLS),
    BuilderType.DRUNKARD_WINDING: partial(
        DrunkardsWalkBuilder, drunkard.WINDING_PASSAGES
    ),
    BuilderType.DRUNKARD_FAT_PASSAGES: partial(
        DrunkardsWalkBuilder, drunkard.FAT_PASSAGES
    ),
    BuilderType.DRUNKARD_SYMMETRY: partial(
        DrunkardsWalkBuilder, drunkard.FEARFUL_SYMMETRY
    ),
    BuilderType.MAZE: MazeBuilder,
    BuilderType.DLA_WALK_INWARDS: partial(DLABuilder, dla.WALK_INWARDS),
    BuilderType.DLA_WALK_OUTWARDS: partial(DLABuilder, dla.WALK_OUTWARDS),
    BuilderType.DLA_CENTRAL_ATTRACTOR: partial(DLABuilder, dla.CENTRAL_ATTRACTOR),
    BuilderType.DLA_INSECTOID: partial(DLABuilder, dla.INSECTOID),
    BuilderType.VORONOI_EUCLIDEAN: partial(VoronoiCellBuilder, DistanceAlg.PYTHAGORAS),
    BuilderType.VORONOI_MANHATTAN: partial(VoronoiCellBuilder, DistanceAlg.MANHATTAN),
    BuilderType.VORONOI_CHEBYSHEV: partial(VoronoiCellBuilder, DistanceAlg.CHEBYSHEV),
    BuilderType.PREFAB_VAULTS: partial(PrefabBuilder, PrefabMode.VAULTS),
    BuilderType.PREFAB_SECTIONAL: partial(PrefabBuilder, PrefabMode.SECTIONAL),
    BuilderType.WFC: WaveFunctionCollapseBuilder,
}

IMPLEMENTED_BUILDERS: Final[tuple[BuilderType, ...]] = tuple(
    builder_type for builder_type in BuilderType if builder_type.implemented
)
DEFAULT_BUILDER: Final[BuilderType] = BuilderType.BSP_DUNGEON


def builder_type_from_name(name: str) -> BuilderType:
    """Resolves ``"bsp_dungeon"``, ``"BSP_DUNGEON"`` or ``"bsp-dungeon"``."""
    key = name.strip().lower().replace("-", "_").replace(" ", "_")
    try:
        return BuilderType(key)
    except ValueError:
        log.error("Unknown map algorithm", algorithm=name)
        raise ValueError(
            f"Unknown map algorithm {name!r}; expected one of "
            f"{', '.join(t.value for t in BuilderType)}"
        ) from None


def random_builder(
    rng: GameRNG,
    depth: int = 1,
    width: int = MAP_WIDTH,
    height: int = MAP_HEIGHT,
    snapshots: bool = False,
) -> MapBuilder:
    builder_type = rng.choice(IMPLEMENTED_BUILDERS)
    log.debug("Random builder chosen", builder_type=builder_type.value, depth=depth)
    return builder_type.create(depth, width, height, snapshots)


def generate_level(
    algorithm: str = "random",
    seed: Optional[int] = None,
    depth: int = 1,
    width: int = MAP_WIDTH,
    height: int = MAP_HEIGHT,
    snapshots: bool = False,
    rng: Optional[GameRNG] = None,
) -> MapBuilder:
    """Builds one level with the named algorithm (or ``"random"``).

    Returns the finished builder; read its map, start and spawn regions.
    """
    if rng is None:
        rng = GameRNG(seed)
    if algorithm == "random":
        builder = random_builder(rng, depth, width, height, snapshots)
    else:
        builder = builder_type_from_name(algorithm).create(
            depth, width, height, snapshots
        )
    builder.build(rng)
    return builder


__all__ = [
    "BuilderType",
    "BUILDER_FACTORIES",
    "IMPLEMENTED_BUILDERS",
    "DEFAULT_BUILDER",
    "MapBuilder",
    "builder_type_from_name",
    "random_builder",
    "generate_level",
]
