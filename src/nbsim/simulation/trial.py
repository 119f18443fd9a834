"""Single-trial execution.

A trial samples every device of one population under one strategy and
reduces the samples to descriptive statistics. Standard deviations are
population standard deviations (divide by n), so a single-device trial has a
stddev of exactly 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from nbsim.energy.battery import DEFAULT_BATTERY, BatterySpec, estimate_battery_life_years
from nbsim.errors import InvalidPopulationSize
from nbsim.simulation.sampler import DeviceSampler
from nbsim.strategies import DEFAULT_STRATEGY_CONFIGS, Strategy, StrategyConfig
from nbsim.utils.seed import RandomSource


@dataclass(frozen=True)
class MeasurementBatch:
    """All device measurements of one trial.

    Attributes:
        energies: Per-device energy in Joules, shape (n,).
        latencies: Per-device latency in milliseconds, shape (n,).
    """

    energies: NDArray[np.float64]
    latencies: NDArray[np.float64]

    def __len__(self) -> int:
        return len(self.energies)


@dataclass(frozen=True)
class TrialResult:
    """Aggregate statistics of one trial.

    Attributes:
        strategy: Strategy simulated.
        population_size: Number of devices sampled.
        mean_energy: Mean energy per device (J).
        mean_latency: Mean latency per device (ms).
        energy_std: Population stddev of energy (J).
        latency_std: Population stddev of latency (ms).
        battery_life_years: Projected battery life including capacity jitter.
    """

    strategy: Strategy
    population_size: int
    mean_energy: float
    mean_latency: float
    energy_std: float
    latency_std: float
    battery_life_years: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "strategy": self.strategy.name,
            "population_size": self.population_size,
            "mean_energy": self.mean_energy,
            "mean_latency": self.mean_latency,
            "energy_std": self.energy_std,
            "latency_std": self.latency_std,
            "battery_life_years": self.battery_life_years,
        }


def summarize_measurements(batch: MeasurementBatch) -> dict[str, float]:
    """Compute means and population standard deviations of a batch.

    Args:
        batch: Device measurements of one trial.

    Returns:
        Dictionary with mean_energy, mean_latency, energy_std, latency_std.
    """
    return {
        "mean_energy": float(np.mean(batch.energies)),
        "mean_latency": float(np.mean(batch.latencies)),
        "energy_std": float(np.std(batch.energies, ddof=0)),
        "latency_std": float(np.std(batch.latencies, ddof=0)),
    }


class TrialRunner:
    """Run single trials for any configured strategy.

    Example:
        >>> runner = TrialRunner()
        >>> result = runner.run(Strategy.PUR, 100, RandomSource(42))
        >>> print(f"{result.mean_energy:.3f} J")
    """

    def __init__(
        self,
        strategies: dict[Strategy, StrategyConfig] | None = None,
        battery: BatterySpec = DEFAULT_BATTERY,
    ):
        """Initialize the runner.

        Args:
            strategies: Strategy parameter table (defaults to the reference table).
            battery: Battery specification for lifetime projection.
        """
        self.strategies = dict(strategies or DEFAULT_STRATEGY_CONFIGS)
        self.battery = battery
        self._samplers = {s: DeviceSampler(cfg) for s, cfg in self.strategies.items()}

    def sample_measurements(
        self,
        strategy: Strategy,
        population_size: int,
        rng: RandomSource,
    ) -> MeasurementBatch:
        """Sample every device of one trial.

        Args:
            strategy: Strategy to simulate.
            population_size: Number of devices.
            rng: Random source owned by this trial.

        Returns:
            MeasurementBatch with exactly population_size measurements.

        Raises:
            InvalidPopulationSize: If population_size < 1.
        """
        if population_size < 1:
            raise InvalidPopulationSize(population_size)

        sampler = self._samplers[strategy]
        base = sampler.draw_base(rng)
        energies, latencies = sampler.sample_population(population_size, base, rng)
        return MeasurementBatch(energies=energies, latencies=latencies)

    def run(
        self,
        strategy: Strategy,
        population_size: int,
        rng: RandomSource,
    ) -> TrialResult:
        """Run one trial.

        Args:
            strategy: Strategy to simulate.
            population_size: Number of devices.
            rng: Random source owned by this trial.

        Returns:
            TrialResult for the trial.

        Raises:
            InvalidPopulationSize: If population_size < 1.
        """
        batch = self.sample_measurements(strategy, population_size, rng)
        stats = summarize_measurements(batch)

        battery_life = estimate_battery_life_years(stats["mean_energy"], self.battery)
        battery_life *= rng.uniform(*self.battery.jitter)

        return TrialResult(
            strategy=strategy,
            population_size=len(batch),
            battery_life_years=battery_life,
            **stats,
        )
