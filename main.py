# main.py
import argparse
import sys
from pathlib import Path
from typing import List, Optional

import structlog

from delve.constants import TileType
from delve.game_rng import GameRNG
from delve.utils.config_loader import GenerationConfig, load_generation_config
from delve.utils.logging_utils import setup_logging
from delve.world.game_map import GameMap
from delve.world.procgen import BuilderType, generate_level
from delve.world.wall_glyphs import is_wall_facing_floor, wall_glyph, wall_mask

# --- Paths relative to this script's location ---
SCRIPT_DIR = Path(__file__).parent.resolve()
CONFIG_DIR = SCRIPT_DIR / "config"

CONFIG_FILE = CONFIG_DIR / "config.yaml"
SETTINGS_FILE = CONFIG_DIR / "settings.toml"
# --- End Paths ---

log = structlog.get_logger()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate a dungeon level and print it as ASCII."
    )
    parser.add_argument(
        "--algorithm",
        default=None,
        help="Builder to use: 'random' or one of "
        + ", ".join(t.value for t in BuilderType),
    )
    parser.add_argument("--seed", type=int, default=None, help="RNG seed.")
    parser.add_argument("--depth", type=int, default=None, help="Dungeon depth.")
    parser.add_argument(
        "--glyphs",
        action="store_true",
        help="Draw walls with box-drawing characters.",
    )
    parser.add_argument(
        "--fov",
        action="store_true",
        help="Only print tiles visible from the start.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=CONFIG_FILE,
        help=f"YAML config file (default: {CONFIG_FILE}).",
    )
    return parser.parse_args(argv)


def render_map(
    game_map: GameMap,
    player: tuple[int, int],
    glyphs: bool = False,
    visible_only: bool = False,
) -> List[str]:
    """ASCII rows with ``@`` at the player and optional wall glyphs / FOV mask."""
    rows = [list(line) for line in game_map.to_lines([(*player, "@")])]
    for y, row in enumerate(rows):
        for x in range(game_map.width):
            idx = game_map.xy_idx(x, y)
            if visible_only and not game_map.visible[idx]:
                row[x] = " "
            elif glyphs and game_map.tiles[idx] == TileType.WALL:
                if is_wall_facing_floor(game_map, x, y):
                    row[x] = wall_glyph(wall_mask(game_map, x, y))
                else:
                    # Solid rock
                    row[x] = " "
    return ["".join(row) for row in rows]


def apply_cli_overrides(
    config: GenerationConfig, args: argparse.Namespace
) -> GenerationConfig:
    if args.algorithm is not None:
        config.algorithm = args.algorithm
    if args.seed is not None:
        config.seed = args.seed
    if args.depth is not None:
        config.depth = args.depth
    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the level generator demo."""
    args = parse_args(argv)
    try:
        config = load_generation_config(args.config, SETTINGS_FILE)
    except (FileNotFoundError, ValueError) as e:
        setup_logging()
        log.error("Could not load configuration", error=str(e))
        return 1
    config = apply_cli_overrides(config, args)
    setup_logging(config.log_level, config.log_format)
    log.info(
        "Configuration loaded", config=str(args.config), algorithm=config.algorithm
    )

    try:
        builder = generate_level(
            algorithm=config.algorithm,
            seed=config.seed,
            depth=config.depth,
            width=config.map_width,
            height=config.map_height,
            snapshots=config.snapshots,
        )
    except NotImplementedError as e:
        log.error("Algorithm not available", algorithm=config.algorithm, error=str(e))
        return 1
    except ValueError as e:
        log.error("Generation failed", error=str(e))
        return 1

    game_map = builder.get_map()
    start = builder.get_starting_position()

    visible_tiles = game_map.compute_fov(*start, config.fov_radius)

    # Spawn rolls come from a second stream so they never shift the layout
    spawn_rng = GameRNG(None if config.seed is None else config.seed + 1)
    intents = builder.spawn_entities(spawn_rng)

    for line in render_map(game_map, start, args.glyphs, args.fov):
        print(line)

    log.info(
        "Level summary",
        builder=builder.name(),
        start=start,
        visible=len(visible_tiles),
        spawns=len(intents),
        snapshots=len(builder.get_snapshot_history()),
    )
    for intent in intents:
        log.debug(
            "Spawn",
            category=intent.category,
            name=intent.name,
            pos=(intent.x, intent.y),
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
