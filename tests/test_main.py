from main import main, parse_args, render_map
from delve.world.wall_glyphs import PILLAR_GLYPH
from helpers import map_from_rows


def write_config(tmp_path, algorithm="bsp_dungeon"):
    path = tmp_path / "config.yaml"
    path.write_text(
        "map_width: 40\n"
        "map_height: 24\n"
        "seed: 3\n"
        f"algorithm: {algorithm}\n"
        "fov_radius: 5\n"
        "log_level: WARNING\n",
        encoding="utf-8",
    )
    return path


def test_parse_args_defaults():
    args = parse_args([])
    assert args.algorithm is None
    assert args.seed is None
    assert not args.glyphs


def test_render_map_marks_player_and_glyphs():
    game_map = map_from_rows(["#####", "#...#", "#####"])
    plain = render_map(game_map, (2, 1))
    assert plain == ["#####", "#.@.#", "#####"]
    fancy = render_map(game_map, (2, 1), glyphs=True)
    assert fancy[1][2] == "@"
    assert "#" not in "".join(fancy)

def test_render_map_draws_pillars_and_blanks_solid_rock():
    game_map = map_from_rows(
        [
            "#####",
            "#####",
            "#...#",
            "#.#.#",
            "#...#",
            "#####",
        ]
    )
    rows = render_map(game_map, (1, 2), glyphs=True)
    assert rows[3][2] == PILLAR_GLYPH
    assert rows[2][1] == "@"
    # Row 0 touches no open ground
    assert rows[0] == "     "
    assert rows[1][2] == "═"



def test_render_map_hides_unseen_tiles():
    game_map = map_from_rows(["#####", "#...#", "#####"])
    game_map.compute_fov(1, 1, 0)
    rows = render_map(game_map, (1, 1), visible_only=True)
    assert rows[1][1] == "@"
    assert rows[1][3] == " "


def test_main_prints_level(tmp_path, capsys):
    config = write_config(tmp_path)
    assert main(["--config", str(config), "--algorithm", "maze"]) == 0
    lines = capsys.readouterr().out.splitlines()
    level = [line for line in lines if len(line) == 40]
    assert len(level) == 24
    assert sum(line.count("@") for line in level) == 1


def test_main_rejects_unknown_algorithm(tmp_path):
    config = write_config(tmp_path, algorithm="nonsense")
    assert main(["--config", str(config)]) == 1


def test_main_reports_unimplemented_algorithm(tmp_path):
    config = write_config(tmp_path)
    assert main(["--config", str(config), "--algorithm", "wfc"]) == 1


def test_main_missing_config(tmp_path):
    assert main(["--config", str(tmp_path / "missing.yaml")]) == 1
