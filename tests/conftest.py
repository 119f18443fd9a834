"""Pytest fixtures for nbsim tests."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from nbsim.simulation import AggregateResult, SimulationConfig
from nbsim.strategies import Strategy
from nbsim.utils.seed import RandomSource

PROJECT_ROOT = Path(__file__).parent.parent


@pytest.fixture
def rng():
    """Seeded random source."""
    return RandomSource(42)


@pytest.fixture
def default_config_path():
    """Path to the shipped default configuration."""
    return PROJECT_ROOT / "configs" / "default.yaml"


@pytest.fixture
def small_config():
    """Small, fast grid over all strategies."""
    return SimulationConfig(
        population_sizes=(10, 50, 200),
        repetitions=2,
        seed=1234,
    )


@pytest.fixture
def make_aggregate():
    """Factory for hand-built aggregate results."""

    def _make(strategy: Strategy, population_size: int, energy: float, latency: float = 100.0):
        return AggregateResult(
            strategy=strategy,
            population_size=population_size,
            mean_energy=energy,
            mean_latency=latency,
            energy_std=0.1,
            latency_std=1.0,
            battery_life_years=18000.0 / (energy * 24 * 365),
            n_trials=3,
        )

    return _make


class StubSource:
    """Random source returning fixed draws, for forcing edge cases."""

    def __init__(self, uniform_value: float | None = None, normal_value: float = 0.0):
        self.uniform_value = uniform_value
        self.normal_value = normal_value

    def uniform(self, low=0.0, high=1.0, size=None):
        value = low if self.uniform_value is None else self.uniform_value
        if size is None:
            return value
        return np.full(size, value, dtype=float)

    def normal(self, loc=0.0, scale=1.0, size=None):
        if size is None:
            return self.normal_value
        return np.full(size, self.normal_value, dtype=float)


@pytest.fixture
def stub_source():
    """Factory for deterministic stub sources."""
    return StubSource
