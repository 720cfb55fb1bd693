import numpy as np
import pytest

from delve.constants import TileType
from delve.game_rng import GameRNG
from delve.world.connectivity import TileRegion, dijkstra_map
from delve.world.procgen import (
    BUILDER_FACTORIES,
    DEFAULT_BUILDER,
    IMPLEMENTED_BUILDERS,
    BuilderType,
    builder_type_from_name,
    generate_level,
    random_builder,
)
from delve.world.procgen.wfc import WaveFunctionCollapseBuilder
from delve.world.rect import Rect

WIDTH, HEIGHT = 48, 32
SEEDS = (1, 7)


def build(builder_type, seed, **kwargs):
    builder = builder_type.create(width=WIDTH, height=HEIGHT, **kwargs)
    builder.build(GameRNG(seed=seed))
    return builder


@pytest.mark.parametrize("seed", SEEDS)
@pytest.mark.parametrize("builder_type", IMPLEMENTED_BUILDERS)
def test_level_invariants(builder_type, seed):
    builder = build(builder_type, seed)
    game_map = builder.get_map()
    start_x, start_y = builder.get_starting_position()
    start_idx = game_map.xy_idx(start_x, start_y)

    assert game_map.tiles[start_idx] != TileType.WALL
    assert game_map.count(TileType.DOWN_STAIRS) == 1

    # Every open tile can be reached from the start
    distances = dijkstra_map(game_map, [start_idx])
    open_tiles = game_map.tiles != TileType.WALL
    assert np.isfinite(distances[open_tiles]).all()

    # The outer border is never carved
    grid = game_map.grid
    assert (grid[0, :] == TileType.WALL).all()
    assert (grid[-1, :] == TileType.WALL).all()
    assert (grid[:, 0] == TileType.WALL).all()
    assert (grid[:, -1] == TileType.WALL).all()

    assert np.array_equal(game_map.blocked, game_map.tiles == TileType.WALL)


@pytest.mark.parametrize("builder_type", IMPLEMENTED_BUILDERS)
def test_same_seed_same_level(builder_type):
    first = build(builder_type, 11)
    second = build(builder_type, 11)
    assert np.array_equal(first.get_map().tiles, second.get_map().tiles)
    assert first.get_starting_position() == second.get_starting_position()


@pytest.mark.parametrize("builder_type", IMPLEMENTED_BUILDERS)
def test_spawn_regions_exclude_start(builder_type):
    builder = build(builder_type, 3)
    game_map = builder.get_map()
    start = builder.get_starting_position()
    start_idx = game_map.xy_idx(*start)
    for region in builder.get_spawn_regions():
        if isinstance(region, Rect):
            assert not region.contains(*start)
        else:
            assert isinstance(region, TileRegion)
            assert start_idx not in region.tiles
            assert all(game_map.tiles[idx] == TileType.FLOOR for idx in region.tiles)


@pytest.mark.parametrize("builder_type", IMPLEMENTED_BUILDERS)
def test_spawn_entities_land_on_floor(builder_type):
    builder = build(builder_type, 5)
    game_map = builder.get_map()
    for intent in builder.spawn_entities(GameRNG(seed=5)):
        assert game_map.get_tile(intent.x, intent.y) is TileType.FLOOR
        assert (intent.x, intent.y) != builder.get_starting_position()


@pytest.mark.parametrize("builder_type", IMPLEMENTED_BUILDERS)
def test_snapshots_only_when_enabled(builder_type):
    quiet = build(builder_type, 2)
    assert quiet.get_snapshot_history() == []

    recorded = build(builder_type, 2, snapshots=True)
    history = recorded.get_snapshot_history()
    assert history
    assert all(snapshot.revealed.all() for snapshot in history)
    assert all(len(snapshot) == WIDTH * HEIGHT for snapshot in history)
    # Snapshots are copies, not views of the live map
    assert history[0] is not recorded.get_map()


@pytest.mark.parametrize(
    "builder_type,name",
    [
        (BuilderType.SIMPLE_MAP, "Simple Map"),
        (BuilderType.BSP_DUNGEON, "BSP Dungeon"),
        (BuilderType.BSP_INTERIOR, "BSP Interior"),
        (BuilderType.CELLULAR_AUTOMATA, "Cellular Automata"),
        (BuilderType.DRUNKARD_FAT_PASSAGES, "Drunkard (Fat Passages)"),
        (BuilderType.MAZE, "Maze"),
        (BuilderType.DLA_INSECTOID, "DLA (Insectoid)"),
        (BuilderType.VORONOI_EUCLIDEAN, "Voronoi (Euclidean)"),
        (BuilderType.VORONOI_MANHATTAN, "Voronoi (Manhattan)"),
        (BuilderType.PREFAB_VAULTS, "Prefab (Vaults)"),
        (BuilderType.PREFAB_SECTIONAL, "Prefab (Sectional)"),
        (BuilderType.WFC, "Wave Function Collapse"),
    ],
)
def test_builder_names(builder_type, name):
    assert builder_type.create(width=WIDTH, height=HEIGHT).name() == name


def test_room_builders_record_rooms():
    for builder_type in (
        BuilderType.SIMPLE_MAP,
        BuilderType.BSP_DUNGEON,
        BuilderType.BSP_INTERIOR,
    ):
        builder = build(builder_type, 4)
        assert builder.rooms
        assert builder.get_starting_position() == builder.rooms[0].center
        stairs = builder.get_map().xy_idx(*builder.rooms[-1].center)
        assert builder.exit_idx == stairs
        assert builder.get_spawn_regions() == builder.rooms[1:]


def test_room_builder_on_tiny_map_uses_fallback_room():
    builder = BuilderType.SIMPLE_MAP.create(width=8, height=8)
    builder.build(GameRNG(seed=1))
    assert len(builder.rooms) == 1
    assert builder.get_map().count(TileType.DOWN_STAIRS) == 1


def test_exit_is_farthest_reachable_tile():
    builder = build(BuilderType.CELLULAR_AUTOMATA, 9)
    game_map = builder.get_map()
    start_idx = game_map.xy_idx(*builder.get_starting_position())
    distances = dijkstra_map(game_map, [start_idx])
    finite = distances[np.isfinite(distances)]
    assert distances[builder.exit_idx] == finite.max()


def test_every_builder_type_has_a_factory():
    assert set(BUILDER_FACTORIES) == set(BuilderType)
    assert BuilderType.WFC not in IMPLEMENTED_BUILDERS
    assert len(IMPLEMENTED_BUILDERS) == len(BuilderType) - 1
    assert DEFAULT_BUILDER is BuilderType.BSP_DUNGEON


def test_wfc_is_declared_but_not_implemented():
    builder = BuilderType.WFC.create(width=WIDTH, height=HEIGHT)
    assert isinstance(builder, WaveFunctionCollapseBuilder)
    with pytest.raises(NotImplementedError):
        builder.build(GameRNG(seed=1))
    with pytest.raises(NotImplementedError):
        generate_level("wfc", seed=1, width=WIDTH, height=HEIGHT)


@pytest.mark.parametrize(
    "name", ["bsp_dungeon", "BSP_DUNGEON", "bsp-dungeon", " BSP Dungeon "]
)
def test_builder_type_from_name(name):
    assert builder_type_from_name(name) is BuilderType.BSP_DUNGEON


def test_unknown_builder_name_raises():
    with pytest.raises(ValueError):
        builder_type_from_name("labyrinthine")


def test_random_builder_never_picks_wfc():
    rng = GameRNG(seed=21)
    for _ in range(200):
        builder = random_builder(rng, width=WIDTH, height=HEIGHT)
        assert not isinstance(builder, WaveFunctionCollapseBuilder)


def test_generate_level_is_reproducible():
    first = generate_level("random", seed=17, width=WIDTH, height=HEIGHT)
    second = generate_level("random", seed=17, width=WIDTH, height=HEIGHT)
    assert first.name() == second.name()
    assert np.array_equal(first.get_map().tiles, second.get_map().tiles)


def test_default_size_level():
    builder = generate_level("bsp_dungeon", seed=1, depth=2)
    game_map = builder.get_map()
    assert (game_map.width, game_map.height) == (80, 43)
    assert game_map.depth == 2
    assert game_map.count(TileType.DOWN_STAIRS) == 1
