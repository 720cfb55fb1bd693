# delve/world/spawner.py
"""Spawn-intent emission.

Builders never create entities. They hand back :class:`SpawnIntent` records
(position, category, template name) and the host game turns those into live
objects however it likes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    Final,
    Iterable,
    List,
    Optional,
    Sequence,
    Union,
)

import structlog

from delve.constants import TileType
from delve.game_rng import GameRNG
from delve.utils.config_loader import load_yaml_config
from delve.world.connectivity import TileRegion
from delve.world.rect import Rect

if TYPE_CHECKING:
    from delve.world.game_map import GameMap

log = structlog.get_logger(__name__)

SPAWN_TABLES_FILE: Final[Path] = Path(__file__).with_name("spawn_tables.yaml")
MAX_SPAWN_ATTEMPTS: Final[int] = 20
# Regions smaller than this get proportionally fewer spawns
FULL_REGION_AREA: Final[float] = 50.0

SpawnRegion = Union[Rect, TileRegion]


@dataclass(frozen=True)
class SpawnIntent:
    x: int
    y: int
    category: str
    name: str


@dataclass(frozen=True)
class SpawnEntry:
    name: str
    weight: int
    per_depth: int = 0
    category: Optional[str] = None

    def weight_at(self, depth: int) -> int:
        return self.weight + self.per_depth * depth


class RandomTable:
    """Integer-weighted table; a roll picks each entry in proportion to its weight."""

    def __init__(self) -> None:
        self.entries: List[tuple[str, str, int]] = []
        self.total_weight = 0

    def add(self, name: str, weight: int, category: str) -> "RandomTable":
        if weight > 0:
            self.total_weight += weight
            self.entries.append((name, category, weight))
        return self

    def roll(self, rng: GameRNG) -> Optional[tuple[str, str]]:
        """Return ``(name, category)`` or ``None`` for an empty table."""
        if self.total_weight == 0:
            return None
        roll = rng.get_int(1, self.total_weight)
        for name, category, weight in self.entries:
            if roll <= weight:
                return name, category
            roll -= weight
        return None


def _parse_entries(raw: Any, table_name: str) -> List[SpawnEntry]:
    if not isinstance(raw, list):
        log.error("Spawn table must be a list", table=table_name)
        raise ValueError(f"Spawn table '{table_name}' must be a list of entries.")
    entries = []
    for item in raw:
        if not isinstance(item, dict) or "name" not in item or "weight" not in item:
            log.error("Malformed spawn table entry", table=table_name, entry=item)
            raise ValueError(
                f"Spawn table '{table_name}' entries need 'name' and 'weight': {item!r}"
            )
        entries.append(
            SpawnEntry(
                name=str(item["name"]),
                weight=int(item["weight"]),
                per_depth=int(item.get("per_depth", 0)),
                category=item.get("category"),
            )
        )
    return entries


@dataclass
class SpawnTables:
    monsters: List[SpawnEntry] = field(default_factory=list)
    items: List[SpawnEntry] = field(default_factory=list)
    max_monsters: int = 4
    max_items: int = 2

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SpawnTables":
        return cls(
            monsters=_parse_entries(data.get("monsters", []), "monsters"),
            items=_parse_entries(data.get("items", []), "items"),
            max_monsters=int(data.get("max_monsters", 4)),
            max_items=int(data.get("max_items", 2)),
        )

    def _table(
        self, entries: Sequence[SpawnEntry], category: str, depth: int
    ) -> RandomTable:
        table = RandomTable()
        for entry in entries:
            table.add(entry.name, entry.weight_at(depth), entry.category or category)
        return table

    def monster_table(self, depth: int) -> RandomTable:
        return self._table(self.monsters, "monster", depth)

    def item_table(self, depth: int) -> RandomTable:
        return self._table(self.items, "item", depth)


def load_spawn_tables(path: Path = SPAWN_TABLES_FILE) -> SpawnTables:
    return SpawnTables.from_dict(load_yaml_config(path, "Spawn tables"))


def _intents_for_points(
    rng: GameRNG,
    game_map: "GameMap",
    points: Iterable[int],
    table: RandomTable,
) -> List[SpawnIntent]:
    intents = []
    for idx in points:
        rolled = table.roll(rng)
        if rolled is None:
            continue
        name, category = rolled
        x, y = game_map.idx_xy(idx)
        intents.append(SpawnIntent(x=x, y=y, category=category, name=name))
    return intents


def spawn_room(
    rng: GameRNG, game_map: "GameMap", room: Rect, tables: SpawnTables
) -> List[SpawnIntent]:
    """Monsters then items at distinct floor tiles inside ``room``.

    Each occupant gets :data:`MAX_SPAWN_ATTEMPTS` draws to find a free floor
    tile; small rooms may therefore get fewer than rolled.
    """
    depth = game_map.depth
    max_monsters = tables.max_monsters + depth - 1
    max_items = tables.max_items + depth - 1
    num_monsters = rng.get_int(1, max_monsters) if max_monsters > 0 else 0
    num_items = rng.get_int(1, max_items) if max_items > 0 else 0

    taken: set[int] = set()

    def pick_points(count: int) -> List[int]:
        points = []
        for _ in range(count):
            for _ in range(MAX_SPAWN_ATTEMPTS):
                x = rng.get_int(room.x1 + 1, room.x2)
                y = rng.get_int(room.y1 + 1, room.y2)
                if not game_map.in_bounds(x, y):
                    continue
                idx = game_map.xy_idx(x, y)
                if idx not in taken and game_map.tiles[idx] == TileType.FLOOR:
                    taken.add(idx)
                    points.append(idx)
                    break
        return points

    monster_points = pick_points(num_monsters)
    item_points = pick_points(num_items)
    return _intents_for_points(
        rng, game_map, monster_points, tables.monster_table(depth)
    ) + _intents_for_points(rng, game_map, item_points, tables.item_table(depth))


def spawn_region(
    rng: GameRNG, game_map: "GameMap", region: TileRegion, tables: SpawnTables
) -> List[SpawnIntent]:
    """Like :func:`spawn_room` but over loose tiles, scaled by region size."""
    if not region.tiles:
        return []
    depth = game_map.depth
    area_factor = min(len(region.tiles) / FULL_REGION_AREA, 1.0)
    max_monsters = int((tables.max_monsters + depth - 1) * area_factor)
    max_items = int((tables.max_items + depth - 1) * area_factor)
    num_monsters = rng.get_int(0, max_monsters) if max_monsters > 0 else 0
    num_items = rng.get_int(0, max_items) if max_items > 0 else 0

    taken: set[int] = set()

    def pick_points(count: int) -> List[int]:
        points = []
        for _ in range(count):
            for _ in range(MAX_SPAWN_ATTEMPTS):
                idx = rng.choice(region.tiles)
                if idx not in taken:
                    taken.add(idx)
                    points.append(idx)
                    break
        return points

    monster_points = pick_points(num_monsters)
    item_points = pick_points(num_items)
    return _intents_for_points(
        rng, game_map, monster_points, tables.monster_table(depth)
    ) + _intents_for_points(rng, game_map, item_points, tables.item_table(depth))


def spawn_intents(
    rng: GameRNG,
    game_map: "GameMap",
    regions: Iterable[SpawnRegion],
    tables: Optional[SpawnTables] = None,
) -> List[SpawnIntent]:
    """Spawn intents for every region, in region order."""
    if tables is None:
        tables = load_spawn_tables()
    intents: List[SpawnIntent] = []
    for region in regions:
        if isinstance(region, Rect):
            intents.extend(spawn_room(rng, game_map, region, tables))
        else:
            intents.extend(spawn_region(rng, game_map, region, tables))
    log.info("Spawn intents created", count=len(intents), depth=game_map.depth)
    return intents


__all__ = [
    "SpawnIntent",
    "SpawnEntry",
    "SpawnRegion",
    "SpawnTables",
    "RandomTable",
    "load_spawn_tables",
    "spawn_room",
    "spawn_region",
    "spawn_intents",
]
