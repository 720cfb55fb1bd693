from delve.world.wall_glyphs import (
    MASK_EAST,
    MASK_NORTH,
    MASK_SOUTH,
    MASK_WEST,
    PILLAR_GLYPH,
    is_wall_facing_floor,
    wall_glyph,
    wall_mask,
)
from helpers import map_from_rows


def _single_cell_map():
    return map_from_rows(
        [
            "#####",
            "#####",
            "##.##",
            "#####",
            "#####",
        ]
    )


def test_wall_above_floor_is_horizontal():
    game_map = _single_cell_map()
    mask = wall_mask(game_map, 2, 1)
    assert mask == MASK_WEST | MASK_EAST
    assert wall_glyph(mask) == "═"


def test_corner_wall():
    game_map = _single_cell_map()
    mask = wall_mask(game_map, 1, 1)
    assert mask == MASK_SOUTH | MASK_EAST
    assert wall_glyph(mask) == "╔"


def test_isolated_wall_is_pillar():
    game_map = map_from_rows(["...", ".#.", "..."])
    assert wall_mask(game_map, 1, 1) == 0
    assert wall_glyph(0) == PILLAR_GLYPH


def test_t_junction_opens_south():
    game_map = map_from_rows(
        [
            ".....",
            "..#..",
            ".###.",
            ".....",
            ".....",
        ]
    )
    mask = wall_mask(game_map, 2, 2)
    assert mask == MASK_NORTH | MASK_WEST | MASK_EAST == 13
    assert wall_glyph(mask) == "╩"


def test_vertical_bar_of_walls():
    game_map = map_from_rows([".#.", ".#.", ".#."])
    mask = wall_mask(game_map, 1, 1)
    assert mask == MASK_NORTH | MASK_SOUTH == 3
    assert wall_glyph(mask) == "║"


def test_solid_rock_does_not_face_floor():
    game_map = _single_cell_map()
    assert is_wall_facing_floor(game_map, 1, 1)
    assert not is_wall_facing_floor(game_map, 0, 0)
    assert not is_wall_facing_floor(game_map, 2, 2)
    assert not is_wall_facing_floor(game_map, -1, 2)


def test_glyph_table_covers_every_mask():
    glyphs = {wall_glyph(mask) for mask in range(16)}
    assert "╬" in glyphs
    assert wall_glyph(5) == "╝"
    assert wall_glyph(3) == "║"
