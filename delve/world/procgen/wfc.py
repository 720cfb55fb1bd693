# delve/world/procgen/wfc.py
"""Wave-function-collapse builder (declared, not implemented).

The intended design extracts ``DEFAULT_CHUNK_SIZE`` square patterns from a
source level, keeps at most ``MAX_PATTERNS`` of them and retries a failed
collapse up to ``MAX_RETRIES`` times before falling back to the source map.
"""

from typing import Final

from delve.game_rng import GameRNG
from delve.world.procgen.base import MapBuilder

DEFAULT_CHUNK_SIZE: Final[int] = 4
MAX_PATTERNS: Final[int] = 64
MAX_RETRIES: Final[int] = 10


class WaveFunctionCollapseBuilder(MapBuilder):
    def name(self) -> str:
        return "Wave Function Collapse"

    def _generate(self, rng: GameRNG) -> None:
        raise NotImplementedError(
            "Wave-function-collapse generation is not implemented"
        )
