"""Reproducible random streams.

This module provides the random source used by the sampling engine. Every
trial owns its own stream spawned from one root seed, so results never depend
on execution order or on hidden global state.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray


def entropy_seed() -> int:
    """Draw a fresh high-entropy root seed from the operating system.

    Returns:
        Integer seed suitable for ``RandomSource``. Logged by callers so that
        a run can be replayed.
    """
    return int(np.random.SeedSequence().entropy)


def get_rng(seed: int | None = None) -> np.random.Generator:
    """Get a NumPy random number generator.

    Args:
        seed: Optional seed for the generator.

    Returns:
        NumPy random number generator.
    """
    return np.random.default_rng(seed)


class RandomSource:
    """Seedable source of uniform and standard-normal deviates.

    Example:
        >>> source = RandomSource(42)
        >>> u = source.uniform()          # in [0, 1)
        >>> z = source.normal()           # standard normal
        >>> children = source.spawn(3)    # independent per-trial streams
    """

    def __init__(self, seed: int | np.random.SeedSequence | None = None):
        """Initialize the source.

        Args:
            seed: Integer seed, an existing SeedSequence, or None for OS entropy.
        """
        self.seed(seed)

    def seed(self, seed: int | np.random.SeedSequence | None) -> None:
        """Re-seed the source explicitly, discarding its current state.

        Args:
            seed: Integer seed, an existing SeedSequence, or None for OS entropy.
        """
        if isinstance(seed, np.random.SeedSequence):
            self._seed_seq = seed
        else:
            self._seed_seq = np.random.SeedSequence(seed)
        self._rng = np.random.default_rng(self._seed_seq)

    @property
    def entropy(self) -> Any:
        """Root entropy of the underlying seed sequence."""
        return self._seed_seq.entropy

    @property
    def generator(self) -> np.random.Generator:
        """Underlying NumPy generator."""
        return self._rng

    def uniform(
        self,
        low: float = 0.0,
        high: float = 1.0,
        size: int | None = None,
    ) -> float | NDArray[np.float64]:
        """Draw uniform deviates in [low, high).

        Args:
            low: Lower bound (inclusive).
            high: Upper bound (exclusive).
            size: Number of draws, or None for a single float.

        Returns:
            A float, or an array of shape (size,).
        """
        if size is None:
            return float(self._rng.uniform(low, high))
        return self._rng.uniform(low, high, size)

    def normal(
        self,
        loc: float = 0.0,
        scale: float = 1.0,
        size: int | None = None,
    ) -> float | NDArray[np.float64]:
        """Draw normal deviates (standard normal by default).

        Args:
            loc: Mean.
            scale: Standard deviation.
            size: Number of draws, or None for a single float.

        Returns:
            A float, or an array of shape (size,).
        """
        if size is None:
            return float(self._rng.normal(loc, scale))
        return self._rng.normal(loc, scale, size)

    def spawn(self, n: int) -> list["RandomSource"]:
        """Spawn independent child sources.

        Children are a deterministic function of this source's seed and the
        number of children spawned so far; drawing from the parent does not
        affect them.

        Args:
            n: Number of children.

        Returns:
            List of independent RandomSource objects.
        """
        return [RandomSource(child) for child in self._seed_seq.spawn(n)]

    def __repr__(self) -> str:
        return f"RandomSource(entropy={self.entropy})"
