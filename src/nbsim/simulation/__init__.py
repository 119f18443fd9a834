"""Simulation module for nbsim.

This module provides device sampling, single trials and multi-trial
aggregation over a (strategy x population) grid.
"""

from nbsim.simulation.aggregator import (
    AggregateResult,
    GridResult,
    MultiTrialAggregator,
    aggregate_trials,
    results_to_frame,
)
from nbsim.simulation.config import DEFAULT_POPULATION_SIZES, SimulationConfig
from nbsim.simulation.sampler import (
    MIN_POSITIVE,
    DeviceMeasurement,
    DeviceSampler,
    TrialBase,
    distance_factor,
    draw_trial_base,
    interference_factor,
)
from nbsim.simulation.trial import (
    MeasurementBatch,
    TrialResult,
    TrialRunner,
    summarize_measurements,
)

__all__ = [
    # Config
    "SimulationConfig",
    "DEFAULT_POPULATION_SIZES",
    # Sampler
    "MIN_POSITIVE",
    "TrialBase",
    "DeviceMeasurement",
    "DeviceSampler",
    "draw_trial_base",
    "distance_factor",
    "interference_factor",
    # Trial
    "MeasurementBatch",
    "TrialResult",
    "TrialRunner",
    "summarize_measurements",
    # Aggregator
    "AggregateResult",
    "GridResult",
    "MultiTrialAggregator",
    "aggregate_trials",
    "results_to_frame",
]
