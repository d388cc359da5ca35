"""
RNG - Gap Placement
===================

Provides the random source used to place obstacle gaps. Any object with a
``random() -> float`` method returning values in [0, 1) can stand in for it,
so tests can inject a fixed sequence.
"""

from __future__ import annotations

import random
from typing import Iterable, List, Optional, Protocol


class RandomSource(Protocol):
    """Minimal random source contract."""

    def random(self) -> float:
        ...


class GapSampler:
    """
    Seeded uniform sampler for gap-top offsets.

    Wraps ``random.Random`` so a session can be replayed from its seed.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize sampler.

        Args:
            seed: Random seed for reproducibility. Random if None.
        """
        self._seed = seed
        self._rng = random.Random(seed)

    def random(self) -> float:
        """Next uniform value in [0, 1)."""
        return self._rng.random()

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reset the sampler with optional new seed.

        Args:
            seed: New random seed. Keeps current if None.
        """
        if seed is not None:
            self._seed = seed
        self._rng = random.Random(self._seed)


class SequenceSource:
    """
    Replays a fixed list of values, cycling when exhausted.

    Used for scripted scenarios and deterministic tests.
    """

    def __init__(self, values: Iterable[float]):
        self._values: List[float] = [float(v) for v in values]
        if not self._values:
            raise ValueError("SequenceSource needs at least one value")
        for v in self._values:
            if not 0.0 <= v < 1.0:
                raise ValueError(f"Values must be in [0, 1), got {v}")
        self._index = 0

    def random(self) -> float:
        value = self._values[self._index % len(self._values)]
        self._index += 1
        return value

    def reset(self, seed: Optional[int] = None) -> None:
        self._index = 0
