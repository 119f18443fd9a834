"""Exceptions raised by the simulation engine."""

from __future__ import annotations


class SimulationError(ValueError):
    """Base class for invalid simulation inputs."""


class InvalidPopulationSize(SimulationError):
    """Raised when a trial is requested for fewer than one device."""

    def __init__(self, population_size: int):
        self.population_size = population_size
        super().__init__(f"Population size must be >= 1, got {population_size}")


class InvalidStrategyConfig(SimulationError):
    """Raised when a strategy configuration has unusable ranges or coefficients."""
