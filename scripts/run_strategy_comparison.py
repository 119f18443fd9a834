#!/usr/bin/env python3
"""Compare RAP, EDT and PUR energy, latency and battery life.

Runs the multi-trial grid from a YAML config, then prints the aggregate table
and the comparison of each optimized strategy against the RAP baseline.
"""

import argparse
from pathlib import Path

from nbsim.evaluation import analyze, improvement_by_population, summarize_strategies
from nbsim.simulation import MultiTrialAggregator, SimulationConfig
from nbsim.strategies import Strategy
from nbsim.utils import load_config, merge_configs, setup_logging

_project_root = Path(__file__).parent.parent
DEFAULT_CONFIG = _project_root / "configs" / "default.yaml"


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG)
    parser.add_argument("--seed", type=int, default=None, help="Root seed (overrides config)")
    parser.add_argument("--repetitions", type=int, default=None)
    parser.add_argument("--workers", type=int, default=None)
    parser.add_argument("--output", type=Path, default=None, help="JSON file for aggregates")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    setup_logging(args.log_level)

    overrides = {"simulation": {}}
    if args.seed is not None:
        overrides["simulation"]["seed"] = args.seed
    if args.repetitions is not None:
        overrides["simulation"]["repetitions"] = args.repetitions
    if args.workers is not None:
        overrides["simulation"]["n_workers"] = args.workers

    config = SimulationConfig.from_dict(merge_configs(load_config(args.config), overrides))
    aggregator = MultiTrialAggregator(config)
    grid = aggregator.run_grid(progress=True)

    print(f"\nRun seed: {grid.seed}\n")
    print(aggregator.get_comparison_table(grid))

    print("\nPer-strategy summary (95% CI):")
    for summary in summarize_strategies(grid.aggregates).values():
        print(f"  {summary.summary()}")

    print("\nImprovement vs RAP:")
    for report in analyze(grid.aggregates, baseline=Strategy.RAP):
        print(f"  {report.summary()}")
        by_size = improvement_by_population(grid.aggregates, report.strategy_b)
        print("    " + ", ".join(f"{n}: {pct:.1f}%" for n, pct in by_size.items()))

    if args.output is not None:
        path = aggregator.save_results(grid, args.output)
        print(f"\n[Results saved to: {path}]")


if __name__ == "__main__":
    main()
