"""Cross-strategy statistical comparison.

Per strategy, the aggregate mean energies of all population sizes are treated
as i.i.d. samples. The 95% confidence half-width is

    1.96 * std(aggregate means) / sqrt(count)

with a population standard deviation (divide by count). This is an
approximation over the grid, not a model of the per-device distribution.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

import numpy as np
from scipy import stats

from nbsim.simulation.aggregator import AggregateResult
from nbsim.strategies import Strategy

Z_95 = 1.96


def confidence_half_width(values: Sequence[float], z: float = Z_95) -> float:
    """Half-width of the normal-approximation confidence interval of a mean.

    Args:
        values: Sample values.
        z: Critical value (1.96 for 95%).

    Returns:
        z * population_std(values) / sqrt(len(values)); 0.0 for fewer than 2 values.
    """
    if len(values) < 2:
        return 0.0
    return z * float(np.std(values, ddof=0)) / math.sqrt(len(values))


def relative_improvement(reference: float, other: float) -> float:
    """Percentage reduction of other relative to reference.

    Raises:
        ValueError: If reference is not positive.
    """
    if reference <= 0:
        raise ValueError(f"Reference value must be positive, got {reference}")
    return (reference - other) / reference * 100.0


@dataclass(frozen=True)
class StrategySummary:
    """Cross-population statistics of one strategy.

    Attributes:
        strategy: Strategy summarized.
        count: Number of aggregates (population sizes).
        mean_energy: Mean of aggregate mean energies (J).
        energy_std: Population stddev of aggregate mean energies (J).
        energy_ci_half_width: 95% half-width around mean_energy (J).
        mean_latency: Mean of aggregate mean latencies (ms).
        latency_ci_half_width: 95% half-width around mean_latency (ms).
        mean_battery_life_years: Mean of aggregate battery lives.
    """

    strategy: Strategy
    count: int
    mean_energy: float
    energy_std: float
    energy_ci_half_width: float
    mean_latency: float
    latency_ci_half_width: float
    mean_battery_life_years: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "strategy": self.strategy.name,
            "count": self.count,
            "mean_energy": self.mean_energy,
            "energy_std": self.energy_std,
            "energy_ci_half_width": self.energy_ci_half_width,
            "mean_latency": self.mean_latency,
            "latency_ci_half_width": self.latency_ci_half_width,
            "mean_battery_life_years": self.mean_battery_life_years,
        }

    def summary(self) -> str:
        """Get summary string."""
        return (
            f"{self.strategy.name}: {self.mean_energy:.3f} ± {self.energy_ci_half_width:.3f} J, "
            f"{self.mean_latency:.1f} ± {self.latency_ci_half_width:.1f} ms, "
            f"battery {self.mean_battery_life_years:.2f} years"
        )


@dataclass(frozen=True)
class ComparisonReport:
    """Comparison of strategy_b against reference strategy_a.

    Attributes:
        strategy_a: Reference strategy (usually the baseline).
        strategy_b: Compared strategy.
        energy_improvement_percent: (mean_a - mean_b) / mean_a * 100 for energy.
        latency_improvement_percent: Same for latency.
        ci_half_width_a: 95% energy half-width of strategy_a.
        ci_half_width_b: 95% energy half-width of strategy_b.
        p_value: Welch's t-test p-value on the aggregate energies (NaN if undefined).
    """

    strategy_a: Strategy
    strategy_b: Strategy
    energy_improvement_percent: float
    latency_improvement_percent: float
    ci_half_width_a: float
    ci_half_width_b: float
    p_value: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "strategy_a": self.strategy_a.name,
            "strategy_b": self.strategy_b.name,
            "energy_improvement_percent": self.energy_improvement_percent,
            "latency_improvement_percent": self.latency_improvement_percent,
            "ci_half_width_a": self.ci_half_width_a,
            "ci_half_width_b": self.ci_half_width_b,
            "p_value": self.p_value,
        }

    def summary(self) -> str:
        """Get summary string."""
        return (
            f"{self.strategy_b.name} vs {self.strategy_a.name}: "
            f"energy saving {self.energy_improvement_percent:.1f}%, "
            f"latency reduction {self.latency_improvement_percent:.1f}%, "
            f"p={self.p_value:.3g}"
        )


def group_by_strategy(
    aggregates: Iterable[AggregateResult],
) -> dict[Strategy, list[AggregateResult]]:
    """Group aggregates by strategy in first-seen order."""
    groups: dict[Strategy, list[AggregateResult]] = {}
    for result in aggregates:
        groups.setdefault(result.strategy, []).append(result)
    return groups


def summarize_strategy(
    strategy: Strategy,
    aggregates: Sequence[AggregateResult],
) -> StrategySummary:
    """Summarize the aggregates of one strategy.

    Raises:
        ValueError: If aggregates is empty or contains other strategies.
    """
    if not aggregates:
        raise ValueError(f"No aggregates for strategy {strategy.name}")
    if any(r.strategy is not strategy for r in aggregates):
        raise ValueError(f"Aggregates of other strategies passed for {strategy.name}")

    energies = [r.mean_energy for r in aggregates]
    latencies = [r.mean_latency for r in aggregates]
    return StrategySummary(
        strategy=strategy,
        count=len(aggregates),
        mean_energy=float(np.mean(energies)),
        energy_std=float(np.std(energies, ddof=0)),
        energy_ci_half_width=confidence_half_width(energies),
        mean_latency=float(np.mean(latencies)),
        latency_ci_half_width=confidence_half_width(latencies),
        mean_battery_life_years=float(np.mean([r.battery_life_years for r in aggregates])),
    )


def summarize_strategies(
    aggregates: Iterable[AggregateResult],
) -> dict[Strategy, StrategySummary]:
    """Summarize every strategy present in aggregates."""
    return {
        strategy: summarize_strategy(strategy, group)
        for strategy, group in group_by_strategy(aggregates).items()
    }


def compare_strategies(
    aggregates: Iterable[AggregateResult],
    strategy_a: Strategy,
    strategy_b: Strategy,
) -> ComparisonReport:
    """Compare strategy_b against reference strategy_a.

    Args:
        aggregates: Aggregate results containing both strategies.
        strategy_a: Reference strategy.
        strategy_b: Compared strategy.

    Returns:
        ComparisonReport.

    Raises:
        ValueError: If either strategy has no aggregates.
    """
    groups = group_by_strategy(aggregates)
    for strategy in (strategy_a, strategy_b):
        if strategy not in groups:
            raise ValueError(f"No aggregates for strategy {strategy.name}")

    summary_a = summarize_strategy(strategy_a, groups[strategy_a])
    summary_b = summarize_strategy(strategy_b, groups[strategy_b])

    return ComparisonReport(
        strategy_a=strategy_a,
        strategy_b=strategy_b,
        energy_improvement_percent=relative_improvement(summary_a.mean_energy, summary_b.mean_energy),
        latency_improvement_percent=relative_improvement(
            summary_a.mean_latency, summary_b.mean_latency
        ),
        ci_half_width_a=summary_a.energy_ci_half_width,
        ci_half_width_b=summary_b.energy_ci_half_width,
        p_value=_welch_p_value(
            [r.mean_energy for r in groups[strategy_a]],
            [r.mean_energy for r in groups[strategy_b]],
        ),
    )


def _welch_p_value(a: Sequence[float], b: Sequence[float]) -> float:
    if len(a) < 2 or len(b) < 2:
        return float("nan")
    return float(stats.ttest_ind(a, b, equal_var=False).pvalue)


def analyze(
    aggregates: Iterable[AggregateResult],
    baseline: Strategy = Strategy.RAP,
) -> list[ComparisonReport]:
    """Compare every non-baseline strategy against the baseline.

    Args:
        aggregates: Aggregate results of a run.
        baseline: Reference strategy.

    Returns:
        One ComparisonReport per other strategy present, in enum order.

    Raises:
        ValueError: If the baseline has no aggregates.
    """
    aggregates = list(aggregates)
    present = {r.strategy for r in aggregates}
    if baseline not in present:
        raise ValueError(f"No aggregates for baseline strategy {baseline.name}")

    return [
        compare_strategies(aggregates, baseline, strategy)
        for strategy in Strategy
        if strategy in present and strategy is not baseline
    ]


def improvement_by_population(
    aggregates: Iterable[AggregateResult],
    strategy: Strategy,
    baseline: Strategy = Strategy.RAP,
) -> dict[int, float]:
    """Energy improvement of strategy over baseline at each population size.

    Only population sizes present for both strategies are reported.

    Returns:
        Dictionary of population size to improvement percentage.
    """
    energy: dict[tuple[Strategy, int], float] = {
        (r.strategy, r.population_size): r.mean_energy for r in aggregates
    }
    sizes = sorted(n for (s, n) in energy if s is strategy and (baseline, n) in energy)
    return {
        n: relative_improvement(energy[(baseline, n)], energy[(strategy, n)])
        for n in sizes
    }
