"""Tests for cross-strategy statistics."""

from __future__ import annotations

import math

import numpy as np
import pytest

from nbsim.evaluation import (
    Z_95,
    analyze,
    compare_strategies,
    confidence_half_width,
    improvement_by_population,
    relative_improvement,
    summarize_strategies,
)
from nbsim.simulation import MultiTrialAggregator, SimulationConfig
from nbsim.strategies import Strategy


class TestConfidenceHalfWidth:
    """Tests for the normal-approximation half-width."""

    def test_reference_value(self):
        """1.96 * population std / sqrt(count)."""
        values = [1.0, 2.0, 3.0]
        expected = 1.96 * np.std(values) / math.sqrt(3)
        assert confidence_half_width(values) == pytest.approx(expected)

    def test_single_value(self):
        """One value has no spread."""
        assert confidence_half_width([4.2]) == 0.0

    def test_constant_values(self):
        """Identical values give a zero-width interval."""
        assert confidence_half_width([2.0] * 5) == pytest.approx(0.0)

    def test_shrinks_with_more_samples(self):
        """Same variance, more samples: tighter interval."""
        widths = [confidence_half_width([1.0, 3.0] * k) for k in (1, 2, 4, 8)]

        assert all(a > b for a, b in zip(widths, widths[1:]))
        assert widths[0] == pytest.approx(Z_95 / math.sqrt(2))


class TestRelativeImprovement:
    """Tests for relative_improvement."""

    def test_reduction(self):
        """Lower is better."""
        assert relative_improvement(4.0, 3.0) == pytest.approx(25.0)

    def test_regression_is_negative(self):
        """A higher value is a negative improvement."""
        assert relative_improvement(2.0, 3.0) == pytest.approx(-50.0)

    def test_zero_reference(self):
        """Improvement against zero is undefined."""
        with pytest.raises(ValueError):
            relative_improvement(0.0, 1.0)


class TestComparison:
    """Tests for strategy comparison on hand-built aggregates."""

    @pytest.fixture
    def aggregates(self, make_aggregate):
        """Two population sizes for each strategy."""
        return [
            make_aggregate(Strategy.RAP, 100, 5.0, 500.0),
            make_aggregate(Strategy.RAP, 1000, 6.0, 600.0),
            make_aggregate(Strategy.EDT, 100, 4.0, 250.0),
            make_aggregate(Strategy.EDT, 1000, 4.4, 275.0),
            make_aggregate(Strategy.PUR, 100, 2.5, 150.0),
            make_aggregate(Strategy.PUR, 1000, 2.75, 160.0),
        ]

    def test_summaries(self, aggregates):
        """Per-strategy means and half-widths."""
        summaries = summarize_strategies(aggregates)

        rap = summaries[Strategy.RAP]
        assert rap.count == 2
        assert rap.mean_energy == pytest.approx(5.5)
        assert rap.energy_std == pytest.approx(0.5)
        assert rap.energy_ci_half_width == pytest.approx(1.96 * 0.5 / math.sqrt(2))
        assert rap.mean_latency == pytest.approx(550.0)

    def test_compare_energy_and_latency(self, aggregates):
        """Improvement percentages against the baseline."""
        report = compare_strategies(aggregates, Strategy.RAP, Strategy.PUR)

        assert report.energy_improvement_percent == pytest.approx((5.5 - 2.625) / 5.5 * 100)
        assert report.latency_improvement_percent == pytest.approx((550.0 - 155.0) / 550.0 * 100)
        assert report.ci_half_width_a == pytest.approx(1.96 * 0.5 / math.sqrt(2))
        assert report.ci_half_width_b == pytest.approx(1.96 * 0.125 / math.sqrt(2))
        assert 0.0 <= report.p_value <= 1.0

    def test_analyze_covers_other_strategies(self, aggregates):
        """One report per non-baseline strategy, in enum order."""
        reports = analyze(aggregates)

        assert [(r.strategy_a, r.strategy_b) for r in reports] == [
            (Strategy.RAP, Strategy.EDT),
            (Strategy.RAP, Strategy.PUR),
        ]

    def test_missing_strategy(self, aggregates):
        """Comparing against an absent strategy fails."""
        only_pur = [r for r in aggregates if r.strategy is Strategy.PUR]

        with pytest.raises(ValueError):
            compare_strategies(only_pur, Strategy.RAP, Strategy.PUR)
        with pytest.raises(ValueError):
            analyze(only_pur)

    def test_p_value_undefined_for_single_sizes(self, make_aggregate):
        """The t-test needs at least two aggregates per side."""
        aggregates = [
            make_aggregate(Strategy.RAP, 100, 5.0),
            make_aggregate(Strategy.PUR, 100, 2.5),
        ]
        report = compare_strategies(aggregates, Strategy.RAP, Strategy.PUR)

        assert math.isnan(report.p_value)
        assert report.ci_half_width_a == 0.0

    def test_improvement_by_population(self, aggregates, make_aggregate):
        """Per-size improvement only for sizes both strategies ran."""
        extra = aggregates + [make_aggregate(Strategy.PUR, 5000, 2.9)]
        by_size = improvement_by_population(extra, Strategy.PUR)

        assert list(by_size) == [100, 1000]
        assert by_size[100] == pytest.approx(50.0)
        assert by_size[1000] == pytest.approx((6.0 - 2.75) / 6.0 * 100)

    def test_report_serialization(self, aggregates):
        """Reports and summaries export strategy names."""
        report = compare_strategies(aggregates, Strategy.RAP, Strategy.EDT)
        data = report.to_dict()

        assert data["strategy_a"] == "RAP"
        assert data["strategy_b"] == "EDT"
        assert "EDT vs RAP" in report.summary()


class TestSimulatedComparison:
    """Tests for the analyzer on a simulated run."""

    @pytest.fixture(scope="class")
    def grid(self):
        """Reference grid with a fixed seed."""
        config = SimulationConfig(
            population_sizes=(100, 500, 1000, 5000),
            repetitions=3,
            seed=2024,
        )
        return MultiTrialAggregator(config).run_grid()

    def test_optimized_strategies_save_energy(self, grid):
        """Both optimized strategies beat the baseline on energy and latency."""
        for report in analyze(grid.aggregates):
            assert report.energy_improvement_percent > 0
            assert report.latency_improvement_percent > 0

    def test_pur_beats_edt(self, grid):
        """PUR saves more energy than EDT."""
        reports = {r.strategy_b: r for r in analyze(grid.aggregates)}
        assert (
            reports[Strategy.PUR].energy_improvement_percent
            > reports[Strategy.EDT].energy_improvement_percent
        )

    def test_battery_ordering(self, grid):
        """Cheaper strategies last longer."""
        summaries = summarize_strategies(grid.aggregates)
        assert (
            summaries[Strategy.PUR].mean_battery_life_years
            > summaries[Strategy.EDT].mean_battery_life_years
            > summaries[Strategy.RAP].mean_battery_life_years
        )
