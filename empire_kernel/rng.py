"""
Deterministic RNG — Seeded random wrapper.

All randomness in the kernel passes through a single RNG instance handed
to the factory and the reducer. Identical seed → identical call sequence
→ identical results.
"""

from __future__ import annotations

import random
from typing import Iterable, List, Sequence, TypeVar

T = TypeVar("T")


class DeterministicRNG:
    """Local seeded RNG. No global random state touched."""

    def __init__(self, seed: int) -> None:
        self.seed = seed
        self._rng = random.Random(seed)

    def roll(self) -> float:
        """Uniform float in [0, 1)."""
        return self._rng.random()

    def rand_int(self, low: int, high: int) -> int:
        """Return random integer in [low, high] inclusive."""
        return self._rng.randint(low, high)

    def rand_choice(self, seq: Sequence[T]) -> T:
        """Pick one element from a non-empty sequence."""
        return self._rng.choice(seq)

    def shuffle(self, seq: List[T]) -> None:
        """In-place deterministic shuffle."""
        self._rng.shuffle(seq)

    def getstate(self):
        """Opaque snapshot for ``setstate``."""
        return self._rng.getstate()

    def setstate(self, state) -> None:
        self._rng.setstate(state)


class ScriptedRNG(DeterministicRNG):
    """
    RNG whose ``roll()`` returns a fixed script of values.

    Used to force combat / crime outcomes. Choices and ints still come
    from the seeded generator.
    """

    def __init__(self, rolls: Iterable[float], seed: int = 0) -> None:
        super().__init__(seed)
        self._rolls = list(rolls)

    def roll(self) -> float:
        if not self._rolls:
            raise RuntimeError("ScriptedRNG exhausted: no rolls left")
        return self._rolls.pop(0)

    def getstate(self):
        return super().getstate(), list(self._rolls)

    def setstate(self, state) -> None:
        base, rolls = state
        super().setstate(base)
        self._rolls = list(rolls)

    @property
    def remaining(self) -> int:
        return len(self._rolls)
