"""Simulation configuration.

A run is described by the strategy table, the population grid, the number of
repetitions per grid cell, the battery model and an optional root seed.
Configurations can be built from plain dictionaries or OmegaConf YAML files:

    simulation:
      seed: 42
      repetitions: 3
      population_sizes: [100, 500, 1000, 5000, 10000]
      n_workers: 1
    battery:
      capacity_joules: 18000.0
    strategies:
      PUR:
        energy_range: [2.0, 3.0]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from omegaconf import DictConfig

from nbsim.energy.battery import BatterySpec
from nbsim.errors import InvalidPopulationSize, SimulationError
from nbsim.strategies import (
    DEFAULT_STRATEGY_CONFIGS,
    Strategy,
    StrategyConfig,
    build_strategy_configs,
)
from nbsim.utils.config import load_config, to_dict

DEFAULT_POPULATION_SIZES = (100, 500, 1000, 5000, 10000)


@dataclass
class SimulationConfig:
    """Configuration for a multi-trial simulation run.

    Attributes:
        strategies: Strategy parameter table.
        population_sizes: Ascending population grid.
        repetitions: Trials per (strategy, population) cell.
        battery: Battery specification.
        seed: Root seed, or None to draw one from OS entropy at run time.
        n_workers: Worker processes; 1 runs sequentially.
    """

    strategies: dict[Strategy, StrategyConfig] = field(
        default_factory=lambda: dict(DEFAULT_STRATEGY_CONFIGS)
    )
    population_sizes: tuple[int, ...] = DEFAULT_POPULATION_SIZES
    repetitions: int = 3
    battery: BatterySpec = field(default_factory=BatterySpec)
    seed: int | None = None
    n_workers: int = 1

    def __post_init__(self) -> None:
        self.population_sizes = tuple(_as_population_size(n) for n in self.population_sizes)
        if not self.population_sizes:
            raise SimulationError("population_sizes must not be empty")
        for n in self.population_sizes:
            if n < 1:
                raise InvalidPopulationSize(n)
        if list(self.population_sizes) != sorted(set(self.population_sizes)):
            raise SimulationError(
                f"population_sizes must be strictly ascending, got {list(self.population_sizes)}"
            )
        if not self.strategies:
            raise SimulationError("At least one strategy is required")
        if self.repetitions < 1:
            raise SimulationError(f"repetitions must be >= 1, got {self.repetitions}")
        if self.n_workers < 1:
            raise SimulationError(f"n_workers must be >= 1, got {self.n_workers}")

    @classmethod
    def from_dict(cls, config: DictConfig | dict[str, Any]) -> "SimulationConfig":
        """Create SimulationConfig from a configuration mapping.

        Args:
            config: Mapping with optional simulation, battery and strategies sections.

        Returns:
            SimulationConfig instance.

        Raises:
            InvalidStrategyConfig: If a strategy entry is invalid.
            InvalidPopulationSize: If a population size is < 1.
        """
        config = to_dict(config) or {}
        sim = config.get("simulation") or {}
        seed = sim.get("seed")

        return cls(
            strategies=build_strategy_configs(config.get("strategies")),
            population_sizes=tuple(sim.get("population_sizes", DEFAULT_POPULATION_SIZES)),
            repetitions=int(sim.get("repetitions", 3)),
            battery=BatterySpec.from_dict(config.get("battery") or {}),
            seed=None if seed is None else int(seed),
            n_workers=int(sim.get("n_workers", 1)),
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "SimulationConfig":
        """Load SimulationConfig from a YAML file."""
        return cls.from_dict(load_config(path))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "simulation": {
                "seed": self.seed,
                "repetitions": self.repetitions,
                "population_sizes": list(self.population_sizes),
                "n_workers": self.n_workers,
            },
            "battery": self.battery.to_dict(),
            "strategies": {s.name: cfg.to_dict() for s, cfg in self.strategies.items()},
        }


def _as_population_size(value: Any) -> int:
    try:
        size = int(value)
    except (TypeError, ValueError) as e:
        raise SimulationError(f"Population size must be an integer, got {value!r}") from e
    if size != value:
        raise SimulationError(f"Population size must be an integer, got {value!r}")
    return size
