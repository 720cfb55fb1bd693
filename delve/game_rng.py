"""Deterministic random number generator used by every generator.

All level randomness flows through a single :class:`GameRNG` instance that is
passed in explicitly, so the same seed always produces the same level.
"""

from __future__ import annotations

import random
from typing import Any, Dict, Optional, Sequence

import numpy as np


class GameRNG:
    def __init__(self, seed: Optional[int] = None) -> None:
        self.initial_seed = seed if seed is not None else random.randint(0, 2**32 - 1)
        self.rng = np.random.default_rng(self.initial_seed)

    # ------------------------------------------------------------------
    # basic random helpers
    # ------------------------------------------------------------------
    def get_int(self, a: int, b: int) -> int:
        """Return an integer in the inclusive range ``[a, b]``."""
        if a > b:
            raise ValueError("a <= b")
        return int(self.rng.integers(a, b + 1))

    def get_randrange(self, start: int, stop: Optional[int] = None) -> int:
        """Return an integer in ``[start, stop)``, like :func:`random.randrange`."""
        if stop is None:
            stop = start
            start = 0
        if stop <= start:
            raise ValueError("empty range")
        return self.get_int(start, stop - 1)

    def get_ints_array(self, a: int, b: int, count: int) -> np.ndarray:
        """Return ``count`` integers in ``[a, b]`` as an int64 array."""
        if a > b:
            raise ValueError("a <= b")
        return self.rng.integers(a, b + 1, size=count, dtype=np.int64)

    def get_float(self, a: float = 0.0, b: float = 1.0) -> float:
        if a > b:
            raise ValueError("a <= b")
        return a + (b - a) * float(self.rng.random())

    def roll_dice(self, num_dice: int = 1, sides: int = 6, modifier: int = 0) -> int:
        if sides < 1 or num_dice < 0:
            raise ValueError("invalid dice")
        return sum(self.get_int(1, sides) for _ in range(num_dice)) + modifier

    def coin_flip(self, heads_probability: float = 0.5) -> bool:
        """Return ``True`` for heads."""
        if not 0.0 <= heads_probability <= 1.0:
            raise ValueError("probability out of range")
        return self.get_float() < heads_probability

    def choice(self, seq: Sequence[Any]) -> Any:
        """Return a random element from *seq*."""
        if not seq:
            raise ValueError("cannot choose from an empty sequence")
        return seq[self.get_int(0, len(seq) - 1)]

    # ------------------------------------------------------------------
    # state
    # ------------------------------------------------------------------
    def get_state(self) -> Dict[str, Any]:
        return {
            "random_state": self.rng.bit_generator.state,
            "initial_seed": self.initial_seed,
        }

    def set_state(self, state: Dict[str, Any]) -> None:
        if "random_state" in state:
            self.rng.bit_generator.state = state["random_state"]
        if "initial_seed" in state:
            self.initial_seed = state["initial_seed"]


__all__ = ["GameRNG"]
