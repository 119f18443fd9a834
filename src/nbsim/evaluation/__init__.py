"""Evaluation module for nbsim.

This module provides cross-strategy statistics: relative improvements,
confidence intervals and significance tests.
"""

from nbsim.evaluation.statistics import (
    Z_95,
    ComparisonReport,
    StrategySummary,
    analyze,
    compare_strategies,
    confidence_half_width,
    group_by_strategy,
    improvement_by_population,
    relative_improvement,
    summarize_strategies,
    summarize_strategy,
)

__all__ = [
    "Z_95",
    "ComparisonReport",
    "StrategySummary",
    "analyze",
    "compare_strategies",
    "confidence_half_width",
    "group_by_strategy",
    "improvement_by_population",
    "relative_improvement",
    "summarize_strategies",
    "summarize_strategy",
]
