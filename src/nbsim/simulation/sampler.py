"""Per-device energy and latency sampling.

One trial shares a single base energy and latency, drawn once from the
strategy's ranges, to model a common radio environment. Each device then
scales that base by

    energy  = base_energy  * variation * distance * interference * noise
    latency = base_latency * variation * distance * (1 + n / 10000) * noise

where ``distance`` grows with the device's position on a sqrt(n) x sqrt(n)
grid and ``interference`` grows with population density. Products are clamped
to ``MIN_POSITIVE`` because a strongly negative noise draw would otherwise
produce a non-positive sample.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from nbsim.strategies import StrategyConfig
from nbsim.utils.logging import get_logger
from nbsim.utils.seed import RandomSource

logger = get_logger("simulation.sampler")

MIN_POSITIVE = 1e-9

DISTANCE_WEIGHT = 0.5
INTERFERENCE_SCALE = 1000.0
INTERFERENCE_JITTER = (0.8, 1.2)
LATENCY_LOAD_SCALE = 10000.0
VARIATION_RANGE = (0.9, 1.1)
NOISE_SCALE = 0.1


@dataclass(frozen=True)
class TrialBase:
    """Base conditions shared by all devices of one trial.

    Attributes:
        energy: Base energy in Joules.
        latency: Base latency in milliseconds.
    """

    energy: float
    latency: float


@dataclass(frozen=True)
class DeviceMeasurement:
    """Sampled energy (J) and latency (ms) of one device."""

    energy: float
    latency: float


def draw_trial_base(config: StrategyConfig, rng: RandomSource) -> TrialBase:
    """Draw the shared base energy and latency for one trial.

    Args:
        config: Strategy parameters.
        rng: Random source of the trial.

    Returns:
        TrialBase sampled uniformly within the strategy's ranges.
    """
    energy = rng.uniform(*config.energy_range)
    latency = rng.uniform(*config.latency_range)
    return TrialBase(energy=energy, latency=latency)


def distance_factor(index: int | NDArray[np.int64], n: int) -> float | NDArray[np.float64]:
    """Distance effect of devices placed row-major on a sqrt(n) x sqrt(n) grid.

    Args:
        index: Device index, or array of indices, in [0, n).
        n: Population size.

    Returns:
        1 + (distance from origin / grid diagonal) * 0.5.
    """
    side = max(math.isqrt(n), 1)
    x = np.mod(index, side)
    y = np.floor_divide(index, side)
    diagonal = math.sqrt(2.0 * n)
    return 1.0 + np.hypot(x, y) / diagonal * DISTANCE_WEIGHT


def interference_factor(
    n: int,
    coefficient: float,
    jitter: float | NDArray[np.float64],
) -> float | NDArray[np.float64]:
    """Contention effect of population density.

    Args:
        n: Population size.
        coefficient: Strategy interference coefficient.
        jitter: Uniform draw(s) in [0.8, 1.2].

    Returns:
        1 + (n / 1000 * coefficient) * jitter.
    """
    return 1.0 + (n / INTERFERENCE_SCALE * coefficient) * jitter


def latency_load_factor(n: int) -> float:
    return 1.0 + n / LATENCY_LOAD_SCALE


class DeviceSampler:
    """Sample device measurements for one strategy.

    Example:
        >>> sampler = DeviceSampler(DEFAULT_STRATEGY_CONFIGS[Strategy.PUR])
        >>> rng = RandomSource(42)
        >>> base = sampler.draw_base(rng)
        >>> m = sampler.sample(0, 100, base, rng)
    """

    def __init__(self, config: StrategyConfig):
        """Initialize the sampler.

        Args:
            config: Strategy parameters.
        """
        self.config = config

    def draw_base(self, rng: RandomSource) -> TrialBase:
        """Draw the per-trial base conditions."""
        return draw_trial_base(self.config, rng)

    def sample(
        self,
        index: int,
        n: int,
        base: TrialBase,
        rng: RandomSource,
    ) -> DeviceMeasurement:
        """Sample a single device.

        Args:
            index: Device index in [0, n).
            n: Population size.
            base: Shared trial base.
            rng: Random source of the trial.

        Returns:
            DeviceMeasurement with strictly positive energy and latency.
        """
        variation = rng.uniform(*VARIATION_RANGE)
        jitter = rng.uniform(*INTERFERENCE_JITTER)
        noise = 1.0 + rng.normal() * NOISE_SCALE

        distance = float(distance_factor(index, n))
        interference = interference_factor(n, self.config.interference_coefficient, jitter)

        energy = base.energy * variation * distance * interference * noise
        latency = base.latency * variation * distance * latency_load_factor(n) * noise
        if energy < MIN_POSITIVE or latency < MIN_POSITIVE:
            logger.debug(f"Clamped device {index} of {n} to {MIN_POSITIVE}")
        return DeviceMeasurement(
            energy=max(energy, MIN_POSITIVE),
            latency=max(latency, MIN_POSITIVE),
        )

    def sample_population(
        self,
        n: int,
        base: TrialBase,
        rng: RandomSource,
    ) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Sample every device of a population at once.

        Args:
            n: Population size.
            base: Shared trial base.
            rng: Random source of the trial.

        Returns:
            Tuple of (energies, latencies), each of shape (n,), strictly positive.
        """
        variation = rng.uniform(*VARIATION_RANGE, size=n)
        jitter = rng.uniform(*INTERFERENCE_JITTER, size=n)
        noise = 1.0 + rng.normal(size=n) * NOISE_SCALE

        distance = distance_factor(np.arange(n), n)
        interference = interference_factor(n, self.config.interference_coefficient, jitter)

        energies = base.energy * variation * distance * interference * noise
        latencies = base.latency * variation * distance * latency_load_factor(n) * noise

        n_clamped = int(np.count_nonzero((energies < MIN_POSITIVE) | (latencies < MIN_POSITIVE)))
        if n_clamped:
            logger.debug(f"Clamped {n_clamped} of {n} devices to {MIN_POSITIVE}")

        return np.maximum(energies, MIN_POSITIVE), np.maximum(latencies, MIN_POSITIVE)
