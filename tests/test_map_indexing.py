from delve.systems.map_indexing import Occupant, index_map
from helpers import open_map


def test_index_map_marks_blockers_and_content():
    game_map = open_map(6, 6)
    index_map(
        game_map,
        [
            Occupant(1, 2, 2, blocks=True),
            Occupant(2, 2, 2),
            Occupant(3, 4, 3),
        ],
    )
    assert game_map.blocked[game_map.xy_idx(2, 2)]
    assert not game_map.blocked[game_map.xy_idx(4, 3)]
    assert game_map.tile_content[game_map.xy_idx(2, 2)] == [1, 2]
    assert game_map.tile_content[game_map.xy_idx(4, 3)] == [3]


def test_index_map_resets_previous_state():
    game_map = open_map(6, 6)
    index_map(game_map, [Occupant(1, 2, 2, blocks=True)])
    index_map(game_map, [])
    assert not game_map.blocked[game_map.xy_idx(2, 2)]
    assert game_map.tile_content[game_map.xy_idx(2, 2)] == []
    assert game_map.blocked[game_map.xy_idx(0, 0)]


def test_index_map_skips_out_of_bounds():
    game_map = open_map(4, 4)
    index_map(game_map, [Occupant(9, 10, 10, blocks=True)])
    assert not any(game_map.tile_content)
