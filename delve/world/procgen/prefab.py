# delve/world/procgen/prefab.py
"""Hand-drawn prefabs stamped into a cave level.

Two modes share one builder. ``VAULTS`` drops a few small vaults onto open
cave floor, and ``SECTIONAL`` stamps one large section at a fixed edge or
corner of the map. Template characters either set terrain or leave a spawn
marker, which the builder hands back as :class:`SpawnIntent` records next to
the usual region spawns.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Final, List, Optional, Sequence

import structlog

from delve.constants import TileType
from delve.game_rng import GameRNG
from delve.world.connectivity import TileRegion
from delve.world.procgen.cellular_automata import CellularAutomataBuilder
from delve.world.procgen.common import draw_corridor
from delve.world.spawner import SpawnIntent, SpawnTables

log = structlog.get_logger(__name__)

# --- Configuration ---
MIN_VAULTS: Final[int] = 1
MAX_VAULTS: Final[int] = 3
VAULT_PLACEMENT_ATTEMPTS: Final[int] = 50
# Vaults keep this far from the map edge
VAULT_MARGIN: Final[int] = 2

# Template character -> (category, template name)
SPAWN_MARKERS: Final[Dict[str, tuple[str, str]]] = {
    "g": ("monster", "Goblin"),
    "o": ("monster", "Orc"),
    "!": ("item", "Health Potion"),
    "%": ("item", "Rations"),
    ")": ("item", "Magic Missile Scroll"),
    "/": ("item", "Dagger"),
    "(": ("item", "Shield"),
    "^": ("trap", "Bear Trap"),
}
WALL_CHAR: Final[str] = "#"
DOOR_CHAR: Final[str] = "+"
START_CHAR: Final[str] = "@"


class HorizontalPlacement(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class VerticalPlacement(Enum):
    TOP = "top"
    CENTER = "center"
    BOTTOM = "bottom"


def read_template(text: str, width: int, height: int) -> tuple[str, ...]:
    """Rows of exactly ``width`` x ``height`` characters.

    One leading newline is dropped, short rows and missing rows are padded
    with spaces and anything past the declared size is cut off.
    """
    if text.startswith("\n"):
        text = text[1:]
    rows = [line[:width].ljust(width) for line in text.splitlines()[:height]]
    rows.extend(" " * width for _ in range(height - len(rows)))
    return tuple(rows)


@dataclass(frozen=True)
class PrefabTemplate:
    rows: tuple[str, ...]

    @classmethod
    def from_text(cls, text: str, width: int, height: int) -> "PrefabTemplate":
        return cls(read_template(text, width, height))

    @property
    def width(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    @property
    def height(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class VaultConstraints:
    min_depth: int = 1
    # None means no upper bound
    max_depth: Optional[int] = None
    spawn_chance: float = 1.0
    min_floor_percent: int = 80

    def allows_depth(self, depth: int) -> bool:
        if depth < self.min_depth:
            return False
        return self.max_depth is None or depth <= self.max_depth


@dataclass(frozen=True)
class PrefabVault:
    template: PrefabTemplate
    constraints: VaultConstraints = VaultConstraints()


@dataclass(frozen=True)
class PrefabSection:
    template: PrefabTemplate
    horizontal: HorizontalPlacement
    vertical: VerticalPlacement


class PrefabMode(Enum):
    VAULTS = "vaults"
    SECTIONAL = "sectional"


TOTALLY_NOT_A_TRAP: Final = PrefabVault(
    PrefabTemplate.from_text(
        """

 ^^^
 ^!^
 ^^^

""",
        width=5,
        height=5,
    )
)

MONSTER_DEN: Final = PrefabVault(
    PrefabTemplate.from_text(
        """

 gggg
 g!!g
 gggg

""",
        width=6,
        height=5,
    ),
    VaultConstraints(min_depth=2, spawn_chance=0.7),
)

CHECKERBOARD_TRAP: Final = PrefabVault(
    PrefabTemplate.from_text(
        """

 ^.^.^
 .^.^.
 ^.^.^

""",
        width=7,
        height=5,
    ),
    VaultConstraints(max_depth=5, spawn_chance=0.5),
)

VAULTS: Final[tuple[PrefabVault, ...]] = (
    TOTALLY_NOT_A_TRAP,
    MONSTER_DEN,
    CHECKERBOARD_TRAP,
)

CORNER_FORT: Final = PrefabSection(
    PrefabTemplate.from_text(
        """
#########
#.......#
#.ggggg.#
#.g!!!g.#
#.g!o!g.#
#.g!!!g.#
#.ggggg.#
#.......#
###+#####
""",
        width=9,
        height=9,
    ),
    HorizontalPlacement.RIGHT,
    VerticalPlacement.TOP,
)


def eligible_vaults(vaults: Sequence[PrefabVault], depth: int) -> List[PrefabVault]:
    return [vault for vault in vaults if vault.constraints.allows_depth(depth)]


def section_origin(section: PrefabSection, width: int, height: int) -> tuple[int, int]:
    """Top-left map tile of ``section``, one tile in from the edge it hugs."""
    template = section.template
    if section.horizontal is HorizontalPlacement.LEFT:
        left = 1
    elif section.horizontal is HorizontalPlacement.CENTER:
        left = width // 2 - template.width // 2
    else:
        left = width - template.width - 1

    if section.vertical is VerticalPlacement.TOP:
        top = 1
    elif section.vertical is VerticalPlacement.CENTER:
        top = height // 2 - template.height // 2
    else:
        top = height - template.height - 1
    return left, top


class PrefabBuilder(CellularAutomataBuilder):
    """Cellular Automata caves with prefab vaults or a prefab section on top."""

    def __init__(
        self,
        mode: PrefabMode = PrefabMode.VAULTS,
        section: PrefabSection = CORNER_FORT,
        vaults: Sequence[PrefabVault] = VAULTS,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.mode = mode
        self.section = section
        self.vaults = tuple(vaults)
        # Map index -> (category, name) for every marker stamped so far
        self.spawn_markers: Dict[int, tuple[str, str]] = {}
        self.stamped: set[int] = set()
        self.prefab_spawns: List[SpawnIntent] = []

    def name(self) -> str:
        if self.mode is PrefabMode.SECTIONAL:
            return "Prefab (Sectional)"
        return "Prefab (Vaults)"

    def _generate(self, rng: GameRNG) -> None:
        self._carve_caves(rng)
        if self.mode is PrefabMode.SECTIONAL:
            self.apply_section(self.section)
        else:
            self.apply_random_vaults(rng)
        self.take_snapshot()
        self._finish_from_start()
        self._exclude_stamped_from_regions()
        self.prefab_spawns = self._collect_prefab_spawns()

    def spawn_entities(
        self, rng: GameRNG, tables: Optional[SpawnTables] = None
    ) -> List[SpawnIntent]:
        return super().spawn_entities(rng, tables) + list(self.prefab_spawns)

    # ------------------------------------------------------------------
    # Stamping
    # ------------------------------------------------------------------
    def _stamp(self, template: PrefabTemplate, left: int, top: int) -> List[int]:
        """Writes ``template`` with its top-left at ``(left, top)``.

        Cells on or past the outer border are skipped. Returns the map
        indices of door cells.
        """
        game_map = self.map
        doors: List[int] = []
        for dy, row in enumerate(template.rows):
            y = top + dy
            if not 0 < y < game_map.height - 1:
                continue
            for dx, char in enumerate(row):
                x = left + dx
                if not 0 < x < game_map.width - 1:
                    continue
                idx = game_map.xy_idx(x, y)
                self.stamped.add(idx)
                self.spawn_markers.pop(idx, None)
                if char == WALL_CHAR:
                    game_map.tiles[idx] = TileType.WALL
                    continue
                # Everything else is floor, ">" included
                game_map.tiles[idx] = TileType.FLOOR
                if char in SPAWN_MARKERS:
                    self.spawn_markers[idx] = SPAWN_MARKERS[char]
                elif char == START_CHAR:
                    self.starting_position = (x, y)
                elif char == DOOR_CHAR:
                    doors.append(idx)
        return doors

    def can_place_vault(self, vault: PrefabVault, left: int, top: int) -> bool:
        """True when the footprint fits inside the border and is floor enough."""
        template = vault.template
        game_map = self.map
        if left < 1 or top < 1:
            return False
        if left + template.width > game_map.width - 1:
            return False
        if top + template.height > game_map.height - 1:
            return False
        block = game_map.grid[top : top + template.height, left : left + template.width]
        floor_percent = int((block == TileType.FLOOR).sum()) * 100 // block.size
        return floor_percent >= vault.constraints.min_floor_percent

    def apply_vault(self, vault: PrefabVault, left: int, top: int) -> None:
        self._stamp(vault.template, left, top)
        log.debug(
            "Vault stamped",
            builder=self.name(),
            pos=(left, top),
            size=(vault.template.width, vault.template.height),
        )

    def apply_random_vaults(self, rng: GameRNG) -> int:
        """Tries to place between one and three depth-eligible vaults.

        Returns how many were stamped.
        """
        candidates = eligible_vaults(self.vaults, self.depth)
        if not candidates:
            log.debug("No vaults allowed at this depth", depth=self.depth)
            return 0

        placed = 0
        for _ in range(rng.get_int(MIN_VAULTS, MAX_VAULTS)):
            vault = rng.choice(candidates)
            if rng.get_float() > vault.constraints.spawn_chance:
                continue
            max_left = self.map.width - vault.template.width - VAULT_MARGIN
            max_top = self.map.height - vault.template.height - VAULT_MARGIN
            if max_left <= VAULT_MARGIN or max_top <= VAULT_MARGIN:
                log.debug("Map too small for vault", builder=self.name())
                continue
            for _ in range(VAULT_PLACEMENT_ATTEMPTS):
                left = rng.get_randrange(VAULT_MARGIN, max_left)
                top = rng.get_randrange(VAULT_MARGIN, max_top)
                if self.can_place_vault(vault, left, top):
                    self.apply_vault(vault, left, top)
                    placed += 1
                    break
        log.debug("Vaults placed", builder=self.name(), placed=placed)
        return placed

    def apply_section(self, section: PrefabSection) -> bool:
        """Stamps ``section`` and tunnels from each of its doors to the start.

        Returns ``False`` when the map is too small to hold it.
        """
        template = section.template
        game_map = self.map
        left, top = section_origin(section, game_map.width, game_map.height)
        if (
            left < 1
            or top < 1
            or left + template.width > game_map.width - 1
            or top + template.height > game_map.height - 1
        ):
            log.warning(
                "Section does not fit on this map",
                builder=self.name(),
                size=(template.width, template.height),
                map_size=(game_map.width, game_map.height),
            )
            return False

        for door_idx in self._stamp(template, left, top):
            self._connect_door(door_idx, left, top, template)
        log.debug("Section stamped", builder=self.name(), pos=(left, top))
        return True

    def _connect_door(
        self, door_idx: int, left: int, top: int, template: PrefabTemplate
    ) -> None:
        game_map = self.map
        door_x, door_y = game_map.idx_xy(door_idx)
        step_x, step_y = 0, 0
        if door_y == top + template.height - 1:
            step_y = 1
        elif door_y == top:
            step_y = -1
        elif door_x == left:
            step_x = -1
        elif door_x == left + template.width - 1:
            step_x = 1
        else:
            # Interior doors need no tunnel
            return
        out_x, out_y = door_x + step_x, door_y + step_y
        if not (0 < out_x < game_map.width - 1 and 0 < out_y < game_map.height - 1):
            return
        game_map.set_tile(out_x, out_y, TileType.FLOOR)
        draw_corridor(game_map, out_x, out_y, *self.starting_position)

    # ------------------------------------------------------------------
    # After the reachability pass
    # ------------------------------------------------------------------
    def _exclude_stamped_from_regions(self) -> None:
        regions = []
        for region in self.spawn_regions:
            tiles = tuple(idx for idx in region.tiles if idx not in self.stamped)
            if tiles:
                regions.append(TileRegion(tiles))
        self.spawn_regions = regions

    def _collect_prefab_spawns(self) -> List[SpawnIntent]:
        """Markers still on reachable floor, minus the start tile."""
        start_idx = self.map.xy_idx(*self.starting_position)
        intents = []
        dropped = 0
        for idx in sorted(self.spawn_markers):
            if idx == start_idx or self.map.tiles[idx] != TileType.FLOOR:
                dropped += 1
                continue
            category, name = self.spawn_markers[idx]
            x, y = self.map.idx_xy(idx)
            intents.append(SpawnIntent(x=x, y=y, category=category, name=name))
        log.debug(
            "Prefab spawns collected",
            builder=self.name(),
            spawns=len(intents),
            dropped=dropped,
        )
        return intents


__all__ = [
    "HorizontalPlacement",
    "VerticalPlacement",
    "PrefabTemplate",
    "VaultConstraints",
    "PrefabVault",
    "PrefabSection",
    "PrefabMode",
    "PrefabBuilder",
    "TOTALLY_NOT_A_TRAP",
    "MONSTER_DEN",
    "CHECKERBOARD_TRAP",
    "VAULTS",
    "CORNER_FORT",
    "eligible_vaults",
    "read_template",
    "section_origin",
]
