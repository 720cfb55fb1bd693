# delve/world/procgen/base.py
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

import structlog

from delve.constants import MAP_HEIGHT, MAP_WIDTH, TileType
from delve.game_rng import GameRNG
from delve.world.connectivity import (
    cull_unreachable,
    dijkstra_map,
    finalize_reachability,
)
from delve.world.game_map import GameMap
from delve.world.procgen.common import apply_room_to_map
from delve.world.rect import Rect
from delve.world.spawner import (
    SpawnIntent,
    SpawnRegion,
    SpawnTables,
    spawn_intents,
)

log = structlog.get_logger(__name__)


class MapBuilder(ABC):
    """Common contract for every level generator.

    A builder owns its :class:`GameMap` for the whole of :meth:`build`.
    Afterwards the caller reads the map, the starting position and the spawn
    regions, then discards the builder. Set ``snapshots`` to record a map
    clone at each generation step for visualisers.
    """

    def __init__(
        self,
        depth: int = 1,
        width: int = MAP_WIDTH,
        height: int = MAP_HEIGHT,
        snapshots: bool = False,
    ):
        self.map = GameMap(width, height, depth)
        self.depth = depth
        self.starting_position: Tuple[int, int] = (0, 0)
        self.exit_idx: Optional[int] = None
        self.rooms: List[Rect] = []
        self.spawn_regions: List[SpawnRegion] = []
        self.history: List[GameMap] = []
        self.snapshots_enabled = snapshots

    @abstractmethod
    def name(self) -> str:
        """Human-readable algorithm name."""

    @abstractmethod
    def _generate(self, rng: GameRNG) -> None:
        """Carves ``self.map`` and fills in start, exit and spawn regions."""

    def build(self, rng: GameRNG) -> None:
        self._generate(rng)
        self.map.populate_blocked()
        log.info(
            "Level generated",
            builder=self.name(),
            seed=rng.initial_seed,
            depth=self.depth,
            floors=self.map.count(TileType.FLOOR),
            start=self.starting_position,
            exit=None if self.exit_idx is None else self.map.idx_xy(self.exit_idx),
            spawn_regions=len(self.spawn_regions),
            snapshots=len(self.history),
        )

    def get_map(self) -> GameMap:
        return self.map

    def get_starting_position(self) -> Tuple[int, int]:
        return self.starting_position

    def get_spawn_regions(self) -> List[SpawnRegion]:
        return list(self.spawn_regions)

    def get_snapshot_history(self) -> List[GameMap]:
        return list(self.history)

    def spawn_entities(
        self, rng: GameRNG, tables: Optional[SpawnTables] = None
    ) -> List[SpawnIntent]:
        return spawn_intents(rng, self.map, self.spawn_regions, tables)

    def take_snapshot(self) -> None:
        if self.snapshots_enabled:
            snapshot = self.map.clone()
            snapshot.revealed[:] = True
            self.history.append(snapshot)

    # ------------------------------------------------------------------
    # Shared finishing steps
    # ------------------------------------------------------------------
    def _finish_from_start(self) -> None:
        """Cull unreachable floor, put the exit far away, split spawn regions."""
        start_idx = self.map.xy_idx(*self.starting_position)
        if self.map.tiles[start_idx] == TileType.WALL:
            self.map.tiles[start_idx] = TileType.FLOOR
        self.take_snapshot()
        self.exit_idx, self.spawn_regions = finalize_reachability(self.map, start_idx)
        self.take_snapshot()

    def _finish_rooms(self) -> None:
        """Start in the first room, exit in the last, spawn in all but the first."""
        if not self.rooms:
            # Maps too small for any candidate room still get somewhere to stand
            cx, cy = self.map.width // 2, self.map.height // 2
            fallback = Rect(
                max(cx - 2, 0),
                max(cy - 2, 0),
                min(cx + 1, self.map.width - 2),
                min(cy + 1, self.map.height - 2),
            )
            log.warning(
                "No rooms placed, using fallback room",
                builder=self.name(),
                room=fallback,
            )
            apply_room_to_map(self.map, fallback)
            self.rooms.append(fallback)
        self.starting_position = self.rooms[0].center
        start_idx = self.map.xy_idx(*self.starting_position)
        culled = cull_unreachable(self.map, dijkstra_map(self.map, [start_idx]))
        if culled:
            log.warning(
                "Culled floor not joined to the rooms",
                builder=self.name(),
                culled=culled,
            )
        stairs_x, stairs_y = self.rooms[-1].center
        self.exit_idx = self.map.xy_idx(stairs_x, stairs_y)
        self.map.tiles[self.exit_idx] = TileType.DOWN_STAIRS
        self.spawn_regions = list(self.rooms[1:])
        self.take_snapshot()


__all__ = ["MapBuilder"]
