# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Uniform random sources for the yield simulator.

Every random draw made during a forecast goes through a RandomSource, so a
seeded or scripted source replays a forecast exactly.
"""

import math
from typing import Optional, Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class RandomSource(Protocol):
    """Protocol for a source of uniform random values."""

    def uniform(self) -> float:
        """Return a uniform random value in [0, 1)."""
        ...


class NumpyRandomSource:
    """RandomSource backed by a numpy Generator.

    Example:
        >>> source = NumpyRandomSource(seed=42)
        >>> 0.0 <= source.uniform() < 1.0
        True
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def uniform(self) -> float:
        return float(self._rng.random())

    def __repr__(self) -> str:
        return f"NumpyRandomSource(seed={self.seed})"


def uniform_between(source: RandomSource, low: float, high: float) -> float:
    """Draw one value in [low, high) from any RandomSource."""
    return low + source.uniform() * (high - low)


def standard_normal(source: RandomSource) -> float:
    """Box-Muller standard normal deviate (cosine branch only).

    The first uniform is taken as 1 - u, which lies in (0, 1], so the
    logarithm is always defined and each deviate costs exactly two draws.
    """
    u1 = 1.0 - source.uniform()
    u2 = source.uniform()
    return math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
