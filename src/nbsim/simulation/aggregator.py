"""Multi-trial aggregation over the (strategy x population) grid.

Every trial runs on its own random stream spawned from a single root seed in
grid order (strategy, population, repetition). A run is therefore fully
determined by the root seed and the configuration, whether trials execute
sequentially or in worker processes.
"""

from __future__ import annotations

import json
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence

import numpy as np
import pandas as pd
from tqdm import tqdm

from nbsim.energy.battery import BatterySpec, estimate_battery_life_years
from nbsim.simulation.config import SimulationConfig
from nbsim.simulation.trial import TrialResult, TrialRunner
from nbsim.strategies import Strategy
from nbsim.utils.logging import LoggerAdapter, get_logger, log_metrics
from nbsim.utils.seed import RandomSource, entropy_seed

logger = get_logger("simulation.aggregator")


@dataclass(frozen=True)
class AggregateResult:
    """Averaged result of repeated trials for one (strategy, population) cell.

    Attributes:
        strategy: Strategy simulated.
        population_size: Number of devices per trial.
        mean_energy: Mean of the trials' mean energies (J).
        mean_latency: Mean of the trials' mean latencies (ms).
        energy_std: Mean of the trials' energy stddevs (J).
        latency_std: Mean of the trials' latency stddevs (ms).
        battery_life_years: Battery life recomputed from mean_energy.
        n_trials: Number of trials averaged.
    """

    strategy: Strategy
    population_size: int
    mean_energy: float
    mean_latency: float
    energy_std: float
    latency_std: float
    battery_life_years: float
    n_trials: int

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
            "n_trials": self.n_trials,
        }


def aggregate_trials(
    trials: Sequence[TrialResult],
    battery: BatterySpec,
) -> AggregateResult:
    """Average repeated trials of the same cell.

    Battery life is recomputed from the averaged mean energy rather than
    averaged across trials, since lifetime is a 1/x function of energy.

    Args:
        trials: Trial results sharing one strategy and population size.
        battery: Battery specification.

    Returns:
        AggregateResult for the cell.

    Raises:
        ValueError: If trials is empty or mixes strategies or population sizes.
    """
    if not trials:
        raise ValueError("Cannot aggregate an empty list of trials")

    cells = {(t.strategy, t.population_size) for t in trials}
    if len(cells) != 1:
        raise ValueError(f"Trials must share strategy and population size, got {sorted(cells, key=str)}")

    mean_energy = float(np.mean([t.mean_energy for t in trials]))
    return AggregateResult(
        strategy=trials[0].strategy,
        population_size=trials[0].population_size,
        mean_energy=mean_energy,
        mean_latency=float(np.mean([t.mean_latency for t in trials])),
        energy_std=float(np.mean([t.energy_std for t in trials])),
        latency_std=float(np.mean([t.latency_std for t in trials])),
        battery_life_years=estimate_battery_life_years(mean_energy, battery),
        n_trials=len(trials),
    )


@dataclass
class GridResult:
    """All aggregates of one run.

    Attributes:
        seed: Root seed the run was drawn from.
        aggregates: Aggregates in grid order.
        config: Configuration of the run.
    """

    seed: int
    aggregates: list[AggregateResult]
    config: SimulationConfig = field(repr=False)

    def get(self, strategy: Strategy, population_size: int) -> AggregateResult:
        """Look up the aggregate of one cell.

        Raises:
            KeyError: If the cell was not part of the run.
        """
        for result in self.aggregates:
            if result.strategy is strategy and result.population_size == population_size:
                return result
        raise KeyError(f"No aggregate for ({strategy.name}, {population_size})")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "seed": self.seed,
            "config": self.config.to_dict(),
            "aggregates": [r.to_dict() for r in self.aggregates],
        }

    def to_frame(self) -> pd.DataFrame:
        """Tabular view of the aggregates."""
        return results_to_frame(self.aggregates)


def results_to_frame(aggregates: Sequence[AggregateResult]) -> pd.DataFrame:
    """Convert aggregates to a DataFrame with report column names.

    Args:
        aggregates: Aggregate results.

    Returns:
        DataFrame with Mode, Devices, Energy_J, Latency_ms, BatteryLife_Years,
        Energy_Std_J and Latency_Std_ms columns.
    """
    return pd.DataFrame(
        [
            {
                "Mode": r.strategy.name,
                "Devices": r.population_size,
                "Energy_J": r.mean_energy,
                "Latency_ms": r.mean_latency,
                "BatteryLife_Years": r.battery_life_years,
                "Energy_Std_J": r.energy_std,
                "Latency_Std_ms": r.latency_std,
            }
            for r in aggregates
        ],
        columns=[
            "Mode",
            "Devices",
            "Energy_J",
            "Latency_ms",
            "BatteryLife_Years",
            "Energy_Std_J",
            "Latency_Std_ms",
        ],
    )


def _run_cell(
    runner: TrialRunner,
    strategy: Strategy,
    population_size: int,
    sources: list[RandomSource],
) -> AggregateResult:
    trials = []
    for repetition, rng in enumerate(sources):
        trial = runner.run(strategy, population_size, rng)
        logger.debug(
            f"{strategy.name} n={population_size} rep={repetition}: "
            f"energy={trial.mean_energy:.4f} J latency={trial.mean_latency:.2f} ms"
        )
        trials.append(trial)
    return aggregate_trials(trials, runner.battery)


class MultiTrialAggregator:
    """Run repeated trials over the configured grid.

    Example:
        >>> aggregator = MultiTrialAggregator(SimulationConfig(seed=42))
        >>> grid = aggregator.run_grid()
        >>> print(aggregator.get_comparison_table(grid))
    """

    def __init__(self, config: SimulationConfig | None = None):
        """Initialize the aggregator.

        Args:
            config: Simulation configuration.
        """
        self.config = config or SimulationConfig()
        self.runner = TrialRunner(self.config.strategies, self.config.battery)

    def cells(self) -> list[tuple[Strategy, int]]:
        """Grid cells in execution order."""
        return [
            (strategy, n)
            for strategy in self.config.strategies
            for n in self.config.population_sizes
        ]

    def run_cell(
        self,
        strategy: Strategy,
        population_size: int,
        rng: RandomSource,
    ) -> AggregateResult:
        """Run all repetitions of one cell.

        Args:
            strategy: Strategy to simulate.
            population_size: Number of devices.
            rng: Source whose children seed the repetitions.

        Returns:
            AggregateResult for the cell.
        """
        sources = rng.spawn(self.config.repetitions)
        return _run_cell(self.runner, strategy, population_size, sources)

    def run_grid(self, progress: bool = False) -> GridResult:
        """Run every (strategy, population) cell of the grid.

        Args:
            progress: Show a progress bar.

        Returns:
            GridResult with one aggregate per cell.
        """
        seed = self.config.seed if self.config.seed is not None else entropy_seed()
        logger.info(f"Starting simulation run with seed {seed}")

        cells = self.cells()
        root = RandomSource(seed)
        cell_sources = [source.spawn(self.config.repetitions) for source in root.spawn(len(cells))]

        bar = tqdm(total=len(cells), desc="Simulating", disable=not progress)
        aggregates: list[AggregateResult] = []
        try:
            if self.config.n_workers == 1:
                for (strategy, n), sources in zip(cells, cell_sources):
                    aggregates.append(_run_cell(self.runner, strategy, n, sources))
                    self._log_aggregate(aggregates[-1])
                    bar.update(1)
            else:
                with ProcessPoolExecutor(max_workers=self.config.n_workers) as pool:
                    futures = [
                        pool.submit(_run_cell, self.runner, strategy, n, sources)
                        for (strategy, n), sources in zip(cells, cell_sources)
                    ]
                    for future in futures:
                        aggregates.append(future.result())
                        self._log_aggregate(aggregates[-1])
                        bar.update(1)
        finally:
            bar.close()

        return GridResult(seed=seed, aggregates=aggregates, config=self.config)

    def _log_aggregate(self, result: AggregateResult) -> None:
        adapter = LoggerAdapter(
            logger, {"strategy": result.strategy.name, "devices": result.population_size}
        )
        log_metrics(
            adapter,
            {
                "energy_j": result.mean_energy,
                "latency_ms": result.mean_latency,
                "battery_years": result.battery_life_years,
            },
        )

    def save_results(self, result: GridResult, path: str | Path) -> Path:
        """Save a run's aggregates as JSON.

        Args:
            result: Grid result to save.
            path: Output file path.

        Returns:
            Path written.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(result.to_dict(), f, indent=2)
        return path

    @staticmethod
    def get_comparison_table(result: GridResult) -> str:
        """Get a markdown table of all aggregates.

        Returns:
            Formatted table string.
        """
        if not result.aggregates:
            return "No results available."

        lines = [
            "| Mode | Devices | Energy (J) | Latency (ms) | Battery (y) |",
            "|------|---------|------------|--------------|-------------|",
        ]
        for r in result.aggregates:
            lines.append(
                f"| {r.strategy.name:4} | "
                f"{r.population_size:7d} | "
                f"{r.mean_energy:10.3f} | "
                f"{r.mean_latency:12.1f} | "
                f"{r.battery_life_years:11.3f} |"
            )
        return "\n".join(lines)
