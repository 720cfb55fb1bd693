import numpy as np

from delve.constants import TileType
from delve.world.connectivity import (
    TileRegion,
    cull_unreachable,
    dijkstra_map,
    finalize_reachability,
    place_distant_exit,
    sectioned_spawn_regions,
)
from helpers import map_from_rows, open_map


def test_dijkstra_uniform_cost_with_diagonals():
    game_map = open_map(8, 8)
    distances = dijkstra_map(game_map, [game_map.xy_idx(1, 1)])
    assert distances[game_map.xy_idx(1, 1)] == 0.0
    assert distances[game_map.xy_idx(4, 4)] == 3.0
    assert distances[game_map.xy_idx(6, 2)] == 5.0
    assert np.isinf(distances[game_map.xy_idx(0, 0)])


def test_dijkstra_respects_walls():
    game_map = map_from_rows(
        [
            "#######",
            "#..#..#",
            "#..#..#",
            "#######",
        ]
    )
    distances = dijkstra_map(game_map, [game_map.xy_idx(1, 1)])
    assert np.isfinite(distances[game_map.xy_idx(2, 2)])
    assert np.isinf(distances[game_map.xy_idx(4, 1)])


def test_dijkstra_multiple_sources_take_nearest():
    game_map = open_map(10, 3)
    distances = dijkstra_map(game_map, [game_map.xy_idx(1, 1), game_map.xy_idx(8, 1)])
    assert distances[game_map.xy_idx(7, 1)] == 1.0
    assert distances[game_map.xy_idx(2, 1)] == 1.0


def test_cull_unreachable_walls_off_islands():
    game_map = map_from_rows(
        [
            "#######",
            "#..#..#",
            "#######",
        ]
    )
    distances = dijkstra_map(game_map, [game_map.xy_idx(1, 1)])
    culled = cull_unreachable(game_map, distances)
    assert culled == 2
    assert game_map.get_tile(4, 1) is TileType.WALL
    assert game_map.get_tile(5, 1) is TileType.WALL
    assert game_map.get_tile(2, 1) is TileType.FLOOR


def test_exit_goes_to_first_farthest_tile():
    game_map = open_map(6, 6)
    start = game_map.xy_idx(1, 1)
    distances = dijkstra_map(game_map, [start])
    exit_idx = place_distant_exit(game_map, distances)
    # (4, 1), (4, 2), (4, 3), (1, 4)... all sit at distance 3; row-major first wins
    assert game_map.idx_xy(exit_idx) == (4, 1)
    assert game_map.get_tile(4, 1) is TileType.DOWN_STAIRS
    assert game_map.count(TileType.DOWN_STAIRS) == 1


def test_exit_falls_back_to_start_when_isolated():
    game_map = map_from_rows(["###", "#.#", "###"])
    start = game_map.xy_idx(1, 1)
    exit_idx = place_distant_exit(game_map, dijkstra_map(game_map, [start]))
    assert exit_idx == start


def test_sectioned_regions_exclude_start_and_walls():
    game_map = open_map(16, 16)
    start = game_map.xy_idx(1, 1)
    distances = dijkstra_map(game_map, [start])
    regions = sectioned_spawn_regions(game_map, distances, start)
    assert len(regions) == 16
    all_tiles = [idx for region in regions for idx in region.tiles]
    assert start not in all_tiles
    assert len(all_tiles) == len(set(all_tiles))
    assert all(game_map.tiles[idx] == TileType.FLOOR for idx in all_tiles)
    assert all(isinstance(region, TileRegion) for region in regions)


def test_sectioned_regions_drop_remainder_strip():
    game_map = open_map(10, 10)
    start = game_map.xy_idx(1, 1)
    regions = sectioned_spawn_regions(
        game_map, dijkstra_map(game_map, [start]), start
    )
    # 10 // 4 == 2, so columns and rows 8.. never spawn
    for region in regions:
        for idx in region.tiles:
            x, y = game_map.idx_xy(idx)
            assert x < 8 and y < 8


def test_finalize_reachability_end_to_end():
    game_map = map_from_rows(
        [
            "##########",
            "#....#...#",
            "#....#...#",
            "##########",
        ]
    )
    start = game_map.xy_idx(1, 1)
    exit_idx, regions = finalize_reachability(game_map, start)
    assert game_map.get_tile(7, 1) is TileType.WALL
    assert game_map.idx_xy(exit_idx) == (4, 1)
    assert game_map.count(TileType.DOWN_STAIRS) == 1
    assert all(start not in region.tiles for region in regions)
