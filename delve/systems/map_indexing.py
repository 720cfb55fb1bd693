# delve/systems/map_indexing.py
from typing import Iterable, NamedTuple

import structlog

from delve.world.game_map import GameMap

log = structlog.get_logger(__name__)


class Occupant(NamedTuple):
    entity_id: int
    x: int
    y: int
    blocks: bool = False


def index_map(game_map: GameMap, occupants: Iterable[Occupant]) -> None:
    """Rebuilds ``blocked`` and ``tile_content`` from the live occupants.

    Must run between query phases, never while a path or view is being
    computed against the same map.
    """
    game_map.populate_blocked()
    game_map.clear_content_index()
    indexed = 0
    for occupant in occupants:
        if not game_map.in_bounds(occupant.x, occupant.y):
            log.warning(
                "Occupant outside map skipped",
                entity_id=occupant.entity_id,
                pos=(occupant.x, occupant.y),
            )
            continue
        idx = game_map.xy_idx(occupant.x, occupant.y)
        if occupant.blocks:
            game_map.blocked[idx] = True
        game_map.tile_content[idx].append(occupant.entity_id)
        indexed += 1
    log.debug("Map indexed", occupants=indexed)


__all__ = ["Occupant", "index_map"]
