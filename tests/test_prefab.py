import numpy as np
import pytest

from delve.constants import TileType
from delve.game_rng import GameRNG
from delve.world.connectivity import dijkstra_map
from delve.world.procgen import BuilderType
from delve.world.procgen.prefab import (
    CHECKERBOARD_TRAP,
    CORNER_FORT,
    MONSTER_DEN,
    TOTALLY_NOT_A_TRAP,
    VAULTS,
    HorizontalPlacement,
    PrefabBuilder,
    PrefabMode,
    PrefabSection,
    PrefabTemplate,
    PrefabVault,
    VaultConstraints,
    VerticalPlacement,
    eligible_vaults,
    read_template,
    section_origin,
)
from delve.world.spawner import SpawnIntent

WIDTH, HEIGHT = 48, 32


def open_builder(mode=PrefabMode.VAULTS, width=12, height=12, **kwargs):
    builder = PrefabBuilder(mode, width=width, height=height, **kwargs)
    builder.map.grid[1:-1, 1:-1] = TileType.FLOOR
    return builder


def test_read_template_pads_and_truncates():
    rows = read_template("\n#.\n.#####\n", width=4, height=3)
    assert rows == ("#.  ", ".###", "    ")


def test_vault_templates_keep_declared_size():
    sizes = [(v.template.width, v.template.height) for v in VAULTS]
    assert sizes == [(5, 5), (6, 5), (7, 5)]
    assert CORNER_FORT.template.rows[-1] == "###+#####"


def test_eligible_vaults_follow_depth_limits():
    assert eligible_vaults(VAULTS, 1) == [TOTALLY_NOT_A_TRAP, CHECKERBOARD_TRAP]
    assert eligible_vaults(VAULTS, 3) == list(VAULTS)
    assert eligible_vaults(VAULTS, 6) == [TOTALLY_NOT_A_TRAP, MONSTER_DEN]


@pytest.mark.parametrize(
    "horizontal,vertical,expected",
    [
        (HorizontalPlacement.LEFT, VerticalPlacement.TOP, (1, 1)),
        (HorizontalPlacement.RIGHT, VerticalPlacement.TOP, (38, 1)),
        (HorizontalPlacement.CENTER, VerticalPlacement.CENTER, (20, 12)),
        (HorizontalPlacement.RIGHT, VerticalPlacement.BOTTOM, (38, 22)),
    ],
)
def test_section_origin(horizontal, vertical, expected):
    section = PrefabSection(CORNER_FORT.template, horizontal, vertical)
    assert section_origin(section, WIDTH, HEIGHT) == expected


def test_apply_vault_sets_terrain_and_markers():
    builder = open_builder()
    builder.map.set_tile(5, 5, TileType.WALL)
    builder.apply_vault(MONSTER_DEN, 3, 3)
    game_map = builder.map
    # The whole footprint is open, even the old wall
    assert game_map.get_tile(5, 5) is TileType.FLOOR
    markers = {
        game_map.idx_xy(idx): marker for idx, marker in builder.spawn_markers.items()
    }
    assert markers[(4, 4)] == ("monster", "Goblin")
    assert markers[(5, 5)] == ("item", "Health Potion")
    assert len(markers) == 12


def test_later_stamp_replaces_markers():
    builder = open_builder()
    builder.apply_vault(TOTALLY_NOT_A_TRAP, 3, 3)
    empty = PrefabVault(PrefabTemplate.from_text("\n.....\n", width=5, height=5))
    builder.apply_vault(empty, 3, 3)
    assert builder.spawn_markers == {}


def test_can_place_vault_needs_floor_and_room():
    builder = open_builder()
    assert builder.can_place_vault(TOTALLY_NOT_A_TRAP, 2, 2)
    # Would overlap the outer border
    assert not builder.can_place_vault(TOTALLY_NOT_A_TRAP, 8, 2)
    builder.map.grid[2:5, 2:7] = TileType.WALL
    assert not builder.can_place_vault(TOTALLY_NOT_A_TRAP, 2, 2)
    relaxed = PrefabVault(
        TOTALLY_NOT_A_TRAP.template, VaultConstraints(min_floor_percent=0)
    )
    assert builder.can_place_vault(relaxed, 2, 2)


def test_section_too_big_for_map_is_skipped():
    builder = open_builder(PrefabMode.SECTIONAL, width=8, height=8)
    assert not builder.apply_section(CORNER_FORT)
    assert builder.spawn_markers == {}


def test_sectional_level_keeps_the_fort_reachable():
    builder = BuilderType.PREFAB_SECTIONAL.create(width=WIDTH, height=HEIGHT)
    builder.build(GameRNG(seed=1))
    game_map = builder.get_map()

    # Fort walls stand one tile in from the top right corner
    assert (game_map.grid[1, 38:47] == TileType.WALL).all()
    assert game_map.get_tile(41, 9) is TileType.FLOOR

    start_idx = game_map.xy_idx(*builder.get_starting_position())
    distances = dijkstra_map(game_map, [start_idx])
    assert np.isfinite(distances[game_map.xy_idx(42, 5)])

    intents = builder.spawn_entities(GameRNG(seed=1))
    assert SpawnIntent(x=42, y=5, category="monster", name="Orc") in intents
    fort_intents = [i for i in intents if 38 <= i.x < 47 and 1 <= i.y < 10]
    assert fort_intents == builder.prefab_spawns
    assert {i.name for i in fort_intents} <= {"Goblin", "Orc", "Health Potion"}


@pytest.mark.parametrize("seed", (1, 2, 3))
def test_vault_spawns_match_depth_one_vaults(seed):
    builder = BuilderType.PREFAB_VAULTS.create(width=WIDTH, height=HEIGHT)
    builder.build(GameRNG(seed=seed))
    for intent in builder.prefab_spawns:
        assert (intent.category, intent.name) in {
            ("trap", "Bear Trap"),
            ("item", "Health Potion"),
        }
    stamped = builder.stamped
    for region in builder.get_spawn_regions():
        assert not stamped.intersection(region.tiles)
